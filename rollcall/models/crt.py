# rollcall/models/crt.py
from sqlalchemy import Column, String, Date, ForeignKey, UniqueConstraint
from rollcall.database import Base
from rollcall.models.staff import new_id


class CrtCode(Base):
    """Day-scoped access code. Presenting one only proves admission."""
    __tablename__ = "crt_codes"

    id = Column(String(36), primary_key=True, default=new_id)
    code = Column(String(50), nullable=False)
    date = Column(Date, nullable=False, index=True)
    assigned_to = Column(String(36), ForeignKey("staff.id"), nullable=True)

    __table_args__ = (UniqueConstraint("code", "date", name="uq_crt_code_date"),)
