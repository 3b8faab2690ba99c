from pydantic import BaseModel
from typing import Literal

class ExportRecord(BaseModel):
    date: str        # YYYY-MM-DD
    time_in: str     # HH:MM:SS
    time_out: str    # "" until checked out
    staff_code: str
    first_name: str  # visitor name for visitor rows
    last_name: str
    work_area: str
    type: Literal["Staff", "Visitor"]

class VisitorCountResponse(BaseModel):
    count: int

class StatusSummaryResponse(BaseModel):
    total: int
    present: int
    absent: int
    non_working: int
    unaccounted: int
    visitors: int

class StaffLookupResponse(BaseModel):
    id: str

class ResetResult(BaseModel):
    check_ins: int
    visitors: int
    absences: int
