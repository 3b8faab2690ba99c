from pydantic import BaseModel, Field, field_validator
import datetime as dt
from typing import List, Optional, Union

# Row fields are deliberately loose: the store validates every row and
# reports all offending rows at once instead of failing on the first.

class StaffRow(BaseModel):
    code: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    work_area: Optional[str] = None
    non_working_days: Union[List[str], str, None] = None

class CrtRow(BaseModel):
    code: Optional[str] = None
    date: Optional[dt.date] = None  # → today
    assigned_to: Optional[str] = None  # staff id

    @field_validator("date", mode="before")
    @classmethod
    def blank_date_is_today(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

class AbsenceRow(BaseModel):
    staff_id: Optional[str] = None
    date: Optional[dt.date] = None  # → today

    @field_validator("date", mode="before")
    @classmethod
    def blank_date_is_today(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

class StaffUpload(BaseModel):
    staffData: List[StaffRow] = Field(default_factory=list)

class CrtUpload(BaseModel):
    crtData: List[CrtRow] = Field(default_factory=list)

class AbsenceUpload(BaseModel):
    absenceData: List[AbsenceRow] = Field(default_factory=list)
