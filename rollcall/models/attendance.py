# rollcall/models/attendance.py
from sqlalchemy import Column, String, Date, DateTime, ForeignKey, UniqueConstraint
from rollcall.database import Base
from rollcall.models.staff import new_id


class AttendanceLog(Base):
    __tablename__ = "attendance_logs"

    id = Column(String(36), primary_key=True, default=new_id)
    staff_id = Column(String(36), ForeignKey("staff.id"), nullable=False, index=True)
    check_in_time = Column(DateTime, nullable=False)   # local wall time in settings.TIMEZONE
    check_out_time = Column(DateTime, nullable=True)
    check_in_date = Column(Date, nullable=False, index=True)


class Visitor(Base):
    __tablename__ = "visitors"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    check_in_time = Column(DateTime, nullable=False)
    check_out_time = Column(DateTime, nullable=True)
    check_in_date = Column(Date, nullable=False, index=True)


class DailyAbsence(Base):
    __tablename__ = "daily_absences"

    id = Column(String(36), primary_key=True, default=new_id)
    staff_id = Column(String(36), ForeignKey("staff.id"), nullable=False)
    date = Column(Date, nullable=False, index=True)

    __table_args__ = (UniqueConstraint("staff_id", "date", name="uq_absence_staff_date"),)
