# rollcall/services/status.py
"""Status resolution for today's roll call.

Pure in-memory computation over already-fetched records; the store feeds
it, the routers sort its output for display.
"""
from enum import Enum
from typing import Collection, Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel


class StaffStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    NON_WORKING = "non_working"
    UNACCOUNTED = "unaccounted"


# Admin view: who still needs finding comes first
STATUS_PRIORITY = {
    StaffStatus.UNACCOUNTED: 0,
    StaffStatus.ABSENT: 1,
    StaffStatus.NON_WORKING: 2,
    StaffStatus.PRESENT: 3,
}


class StaffStatusRecord(BaseModel):
    id: str
    first_name: str
    last_name: str
    work_area: str
    status: StaffStatus


def resolve_status(
    checked_in: bool,
    absent: bool,
    non_working_days: Optional[Iterable[str]],
    weekday: str,
) -> StaffStatus:
    if checked_in:
        return StaffStatus.PRESENT
    if absent:
        return StaffStatus.ABSENT
    if weekday in (non_working_days or ()):
        return StaffStatus.NON_WORKING
    return StaffStatus.UNACCOUNTED


def resolve_statuses(
    staff: Sequence,
    present_ids: Collection[str],
    absent_ids: Collection[str],
    weekday: str,
) -> List[StaffStatusRecord]:
    """One record per staff member, in the order given.

    `staff` items only need `id`, `first_name`, `last_name`, `work_area`
    and `non_working_days` attributes; missing names fall back to "".
    """
    records = []
    for member in staff:
        status = resolve_status(
            checked_in=member.id in present_ids,
            absent=member.id in absent_ids,
            non_working_days=getattr(member, "non_working_days", None),
            weekday=weekday,
        )
        records.append(
            StaffStatusRecord(
                id=member.id,
                first_name=getattr(member, "first_name", None) or "",
                last_name=getattr(member, "last_name", None) or "",
                work_area=getattr(member, "work_area", None) or "",
                status=status,
            )
        )
    return records


def _name_key(record: StaffStatusRecord):
    return (record.last_name.casefold(), record.first_name.casefold())


def sort_by_name(records: Iterable[StaffStatusRecord]) -> List[StaffStatusRecord]:
    return sorted(records, key=_name_key)


def sort_by_priority(records: Iterable[StaffStatusRecord]) -> List[StaffStatusRecord]:
    return sorted(records, key=lambda r: (STATUS_PRIORITY[r.status], _name_key(r)))


def summarize(records: Iterable[StaffStatusRecord]) -> Dict[str, int]:
    counts = {status.value: 0 for status in StaffStatus}
    total = 0
    for record in records:
        counts[record.status.value] += 1
        total += 1
    counts["total"] = total
    return counts
