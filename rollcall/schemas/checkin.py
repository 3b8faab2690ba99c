from pydantic import BaseModel

class StaffCheckIn(BaseModel):
    staffCode: str

class CrtCheckIn(BaseModel):
    crtCode: str

class VisitorCheckIn(BaseModel):
    name: str

class ActionResponse(BaseModel):
    success: bool
    message: str
