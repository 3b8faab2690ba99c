# rollcall/models/staff.py
import uuid

from sqlalchemy import Column, String, DateTime, JSON, func
from rollcall.database import Base


def new_id() -> str:
    return str(uuid.uuid4())


class Staff(Base):
    __tablename__ = "staff"

    id = Column(String(36), primary_key=True, default=new_id)
    code = Column(String(50), unique=True, nullable=False, index=True)  # always upper-case
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    work_area = Column(String(255), nullable=False)
    non_working_days = Column(JSON, nullable=True, default=list)  # ["Monday", "Friday"]
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
