"""initial schema

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-17 09:12:40.113204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'staff',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('code', sa.String(length=50), nullable=False),
        sa.Column('first_name', sa.String(length=255), nullable=False),
        sa.Column('last_name', sa.String(length=255), nullable=False),
        sa.Column('work_area', sa.String(length=255), nullable=False),
        sa.Column('non_working_days', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_staff_code', 'staff', ['code'], unique=True)

    op.create_table(
        'attendance_logs',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('staff_id', sa.String(length=36), sa.ForeignKey('staff.id'), nullable=False),
        sa.Column('check_in_time', sa.DateTime(), nullable=False),
        sa.Column('check_out_time', sa.DateTime(), nullable=True),
        sa.Column('check_in_date', sa.Date(), nullable=False),
    )
    op.create_index('ix_attendance_logs_staff_id', 'attendance_logs', ['staff_id'])
    op.create_index('ix_attendance_logs_check_in_date', 'attendance_logs', ['check_in_date'])

    op.create_table(
        'visitors',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('check_in_time', sa.DateTime(), nullable=False),
        sa.Column('check_out_time', sa.DateTime(), nullable=True),
        sa.Column('check_in_date', sa.Date(), nullable=False),
    )
    op.create_index('ix_visitors_check_in_date', 'visitors', ['check_in_date'])

    op.create_table(
        'daily_absences',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('staff_id', sa.String(length=36), sa.ForeignKey('staff.id'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.UniqueConstraint('staff_id', 'date', name='uq_absence_staff_date'),
    )
    op.create_index('ix_daily_absences_date', 'daily_absences', ['date'])

    op.create_table(
        'crt_codes',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('code', sa.String(length=50), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('assigned_to', sa.String(length=36), sa.ForeignKey('staff.id'), nullable=True),
        sa.UniqueConstraint('code', 'date', name='uq_crt_code_date'),
    )
    op.create_index('ix_crt_codes_date', 'crt_codes', ['date'])


def downgrade() -> None:
    op.drop_table('crt_codes')
    op.drop_table('daily_absences')
    op.drop_table('visitors')
    op.drop_table('attendance_logs')
    op.drop_table('staff')
