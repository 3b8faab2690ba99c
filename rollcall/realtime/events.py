# rollcall/realtime/events.py
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, Field


class EventType(str, Enum):
    STAFF_CHECKIN = "staff_checkin"
    CRT_CHECKIN = "crt_checkin"
    VISITOR_CHECKIN = "visitor_checkin"
    STAFF_UPLOAD = "staff_upload"
    CRT_UPLOAD = "crt_upload"
    ABSENCE_UPLOAD = "absence_upload"
    RESET_ATTENDANCE = "reset_attendance"


class MutationEvent(BaseModel):
    """Push message `{type, data}`.

    The payload is a hint for logs and debugging. Observers refetch the
    status snapshot on every event whatever it carries.
    """
    type: EventType
    data: Dict[str, Any] = Field(default_factory=dict)

    def wire(self) -> dict:
        return {"type": self.type.value, "data": self.data}


def staff_checkin(code: str) -> MutationEvent:
    return MutationEvent(type=EventType.STAFF_CHECKIN, data={"code": code})


def crt_checkin(code: str) -> MutationEvent:
    return MutationEvent(type=EventType.CRT_CHECKIN, data={"code": code})


def visitor_checkin(name: str) -> MutationEvent:
    return MutationEvent(type=EventType.VISITOR_CHECKIN, data={"name": name})


def staff_upload(count: int) -> MutationEvent:
    return MutationEvent(type=EventType.STAFF_UPLOAD, data={"count": count})


def crt_upload(count: int) -> MutationEvent:
    return MutationEvent(type=EventType.CRT_UPLOAD, data={"count": count})


def absence_upload(count: int) -> MutationEvent:
    return MutationEvent(type=EventType.ABSENCE_UPLOAD, data={"count": count})


def reset_attendance() -> MutationEvent:
    return MutationEvent(type=EventType.RESET_ATTENDANCE)
