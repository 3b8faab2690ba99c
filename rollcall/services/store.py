# rollcall/services/store.py
"""Reconciliation store: roster, check-ins, absences, access codes, visitors.

Every bulk operation validates the whole batch first and then applies it in
a single transaction, so a batch lands completely or not at all.

Roster replace keeps the id of every staff member whose code survives the
upload. Dependents of staff that disappear are cleared in the same
transaction: their check-ins and absence markers are deleted and access code
assignments pointing at them are set to NULL.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import select, delete, update, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from rollcall.core.clock import Clock, parse_weekdays, weekday_name
from rollcall.core.exceptions import NotFoundError, RowError, StorageError, ValidationError
from rollcall.core.locks import ReadWriteLock
from rollcall.models.attendance import AttendanceLog, DailyAbsence, Visitor
from rollcall.models.crt import CrtCode
from rollcall.models.staff import Staff
from rollcall.schemas.attendance import ExportRecord, ResetResult
from rollcall.schemas.upload import AbsenceRow, CrtRow, StaffRow
from rollcall.services.status import StaffStatusRecord, resolve_statuses

logger = logging.getLogger(__name__)


def normalize_code(code: Optional[str]) -> str:
    return (code or "").strip().upper()


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


class AttendanceStore:
    def __init__(self, session_factory: async_sessionmaker, clock: Clock):
        self._sessions = session_factory
        self.clock = clock
        self._roster_lock = ReadWriteLock()
        self._absence_lock = asyncio.Lock()
        self._crt_lock = asyncio.Lock()

    @asynccontextmanager
    async def _session(self, action: str):
        try:
            async with self._sessions() as session:
                yield session
        except SQLAlchemyError as e:
            logger.exception("Storage failure during %s", action)
            raise StorageError(f"Storage failure during {action}") from e

    def _day(self, day: Optional[date]) -> date:
        return day if day is not None else self.clock.today()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def resolve(self, day: Optional[date] = None) -> List[StaffStatusRecord]:
        """Status of every staff member for `day` (default today), ordered by name."""
        day = self._day(day)
        async with self._roster_lock.read():
            async with self._session("status resolution") as session:
                staff = (
                    await session.execute(select(Staff).order_by(Staff.last_name, Staff.first_name))
                ).scalars().all()
                present = await session.execute(
                    select(AttendanceLog.staff_id).where(AttendanceLog.check_in_date == day).distinct()
                )
                absent = await session.execute(
                    select(DailyAbsence.staff_id).where(DailyAbsence.date == day)
                )
                present_ids = set(present.scalars())
                absent_ids = set(absent.scalars())

        return resolve_statuses(staff, present_ids, absent_ids, weekday_name(day))

    async def get_staff_by_code(self, code: str) -> Optional[str]:
        normalized = normalize_code(code)
        async with self._roster_lock.read():
            async with self._session("staff lookup") as session:
                result = await session.execute(select(Staff.id).where(Staff.code == normalized))
                return result.scalar_one_or_none()

    async def count_visitors_today(self, day: Optional[date] = None) -> int:
        day = self._day(day)
        async with self._session("visitor count") as session:
            result = await session.execute(
                select(func.count(Visitor.id)).where(Visitor.check_in_date == day)
            )
            return result.scalar_one()

    async def export_today(self, day: Optional[date] = None) -> List[ExportRecord]:
        """Staff check-ins first, then visitors, each in arrival order."""
        day = self._day(day)
        async with self._roster_lock.read():
            async with self._session("export") as session:
                staff_rows = await session.execute(
                    select(AttendanceLog, Staff)
                    .join(Staff, Staff.id == AttendanceLog.staff_id)
                    .where(AttendanceLog.check_in_date == day)
                    .order_by(AttendanceLog.check_in_time)
                )
                visitors = await session.execute(
                    select(Visitor)
                    .where(Visitor.check_in_date == day)
                    .order_by(Visitor.check_in_time)
                )

                records = [
                    ExportRecord(
                        date=log.check_in_date.isoformat(),
                        time_in=log.check_in_time.strftime("%H:%M:%S"),
                        time_out=log.check_out_time.strftime("%H:%M:%S") if log.check_out_time else "",
                        staff_code=member.code,
                        first_name=member.first_name,
                        last_name=member.last_name,
                        work_area=member.work_area,
                        type="Staff",
                    )
                    for log, member in staff_rows.all()
                ]
                records.extend(
                    ExportRecord(
                        date=visitor.check_in_date.isoformat(),
                        time_in=visitor.check_in_time.strftime("%H:%M:%S"),
                        time_out=visitor.check_out_time.strftime("%H:%M:%S") if visitor.check_out_time else "",
                        staff_code="",
                        first_name=visitor.name,
                        last_name="",
                        work_area="",
                        type="Visitor",
                    )
                    for visitor in visitors.scalars()
                )
        return records

    # ------------------------------------------------------------------
    # Check-ins
    # ------------------------------------------------------------------

    async def record_check_in(self, code: str) -> Staff:
        normalized = normalize_code(code)
        if not normalized:
            raise NotFoundError("Invalid staff code")

        async with self._roster_lock.read():
            async with self._session("staff check-in") as session:
                async with session.begin():
                    result = await session.execute(select(Staff).where(Staff.code == normalized))
                    member = result.scalar_one_or_none()
                    if member is None:
                        raise NotFoundError("Invalid staff code")

                    now = self.clock.now()
                    session.add(
                        AttendanceLog(staff_id=member.id, check_in_time=now, check_in_date=now.date())
                    )

        logger.info("Staff %s checked in", normalized)
        return member

    async def verify_access_code(self, code: str, day: Optional[date] = None) -> str:
        """Admission check only: no check-in is recorded and no status changes."""
        normalized = normalize_code(code)
        day = self._day(day)
        async with self._session("access code check") as session:
            result = await session.execute(
                select(CrtCode.id).where(CrtCode.code == normalized, CrtCode.date == day)
            )
            if result.first() is None:
                raise NotFoundError("Invalid CRT code for today")
        return normalized

    async def record_visitor(self, name: Optional[str]) -> str:
        cleaned = _clean(name)
        if not cleaned:
            raise ValidationError("Visitor name is required")

        async with self._session("visitor check-in") as session:
            async with session.begin():
                now = self.clock.now()
                session.add(Visitor(name=cleaned, check_in_time=now, check_in_date=now.date()))

        logger.info("Visitor %s checked in", cleaned)
        return cleaned

    # ------------------------------------------------------------------
    # Bulk uploads
    # ------------------------------------------------------------------

    def _validate_roster(self, entries: Sequence[StaffRow]) -> List[dict]:
        rows, errors = [], []
        seen: Dict[str, int] = {}

        for index, entry in enumerate(entries, start=1):
            row = {
                "code": normalize_code(entry.code),
                "first_name": _clean(entry.first_name),
                "last_name": _clean(entry.last_name),
                "work_area": _clean(entry.work_area),
            }
            missing = [field for field, value in row.items() if not value]
            if missing:
                errors.append(RowError(index, f"Missing required field(s): {', '.join(missing)}"))
                continue

            if row["code"] in seen:
                errors.append(
                    RowError(index, f"Duplicate staff code {row['code']} (also on row {seen[row['code']]})")
                )
                continue
            seen[row["code"]] = index

            try:
                row["non_working_days"] = parse_weekdays(entry.non_working_days)
            except ValueError as e:
                errors.append(RowError(index, str(e)))
                continue

            rows.append(row)

        if errors:
            raise ValidationError(f"{len(errors)} invalid staff row(s); nothing was applied", errors)
        return rows

    async def replace_roster(self, entries: Sequence[StaffRow]) -> int:
        rows = self._validate_roster(entries)

        async with self._roster_lock.write():
            async with self._session("roster replace") as session:
                async with session.begin():
                    result = await session.execute(select(Staff))
                    existing = {member.code: member for member in result.scalars()}

                    incoming = {row["code"] for row in rows}
                    removed_ids = [m.id for code, m in existing.items() if code not in incoming]
                    if removed_ids:
                        await session.execute(
                            delete(AttendanceLog).where(AttendanceLog.staff_id.in_(removed_ids))
                        )
                        await session.execute(
                            delete(DailyAbsence).where(DailyAbsence.staff_id.in_(removed_ids))
                        )
                        await session.execute(
                            update(CrtCode)
                            .where(CrtCode.assigned_to.in_(removed_ids))
                            .values(assigned_to=None)
                        )
                        await session.execute(delete(Staff).where(Staff.id.in_(removed_ids)))

                    for row in rows:
                        member = existing.get(row["code"])
                        if member is None:
                            session.add(Staff(**row))
                        else:
                            member.first_name = row["first_name"]
                            member.last_name = row["last_name"]
                            member.work_area = row["work_area"]
                            member.non_working_days = row["non_working_days"]

        logger.info("Roster replaced: %d staff, %d removed", len(rows), len(removed_ids))
        return len(rows)

    async def _unknown_staff_ids(self, session, staff_ids) -> set:
        if not staff_ids:
            return set()
        result = await session.execute(select(Staff.id).where(Staff.id.in_(list(staff_ids))))
        return set(staff_ids) - set(result.scalars())

    async def upsert_access_codes(self, entries: Sequence[CrtRow]) -> int:
        today = self.clock.today()
        parsed: List[Tuple[int, str, date, Optional[str]]] = []
        errors = []
        for index, entry in enumerate(entries, start=1):
            code = normalize_code(entry.code)
            if not code:
                errors.append(RowError(index, "Missing required field(s): code"))
                continue
            parsed.append((index, code, entry.date or today, _clean(entry.assigned_to) or None))
        if errors:
            raise ValidationError(f"{len(errors)} invalid CRT row(s); nothing was applied", errors)

        async with self._roster_lock.read(), self._crt_lock:
            async with self._session("CRT upload") as session:
                async with session.begin():
                    unknown = await self._unknown_staff_ids(
                        session, {assigned for _, _, _, assigned in parsed if assigned}
                    )
                    errors = [
                        RowError(index, f"Unknown staff id {assigned}")
                        for index, _, _, assigned in parsed
                        if assigned in unknown
                    ]
                    if errors:
                        raise ValidationError(
                            f"{len(errors)} invalid CRT row(s); nothing was applied", errors
                        )

                    # Later rows win when a batch repeats a (code, date) key
                    batch = {(code, day): assigned for _, code, day, assigned in parsed}
                    if batch:
                        result = await session.execute(
                            select(CrtCode).where(
                                CrtCode.code.in_([code for code, _ in batch]),
                                CrtCode.date.in_([day for _, day in batch]),
                            )
                        )
                        existing = {(crt.code, crt.date): crt for crt in result.scalars()}
                        for (code, day), assigned in batch.items():
                            crt = existing.get((code, day))
                            if crt is None:
                                session.add(CrtCode(code=code, date=day, assigned_to=assigned))
                            else:
                                crt.assigned_to = assigned

        logger.info("CRT codes upserted: %d row(s)", len(parsed))
        return len(parsed)

    async def upsert_absences(self, entries: Sequence[AbsenceRow]) -> int:
        today = self.clock.today()
        parsed: List[Tuple[int, str, date]] = []
        errors = []
        for index, entry in enumerate(entries, start=1):
            staff_id = _clean(entry.staff_id)
            if not staff_id:
                errors.append(RowError(index, "Missing required field(s): staff_id"))
                continue
            parsed.append((index, staff_id, entry.date or today))
        if errors:
            raise ValidationError(f"{len(errors)} invalid absence row(s); nothing was applied", errors)

        async with self._roster_lock.read(), self._absence_lock:
            async with self._session("absence upload") as session:
                async with session.begin():
                    unknown = await self._unknown_staff_ids(session, {sid for _, sid, _ in parsed})
                    errors = [
                        RowError(index, f"Unknown staff id {staff_id}")
                        for index, staff_id, _ in parsed
                        if staff_id in unknown
                    ]
                    if errors:
                        raise ValidationError(
                            f"{len(errors)} invalid absence row(s); nothing was applied", errors
                        )

                    batch = {(staff_id, day) for _, staff_id, day in parsed}
                    if batch:
                        result = await session.execute(
                            select(DailyAbsence.staff_id, DailyAbsence.date).where(
                                DailyAbsence.staff_id.in_([sid for sid, _ in batch]),
                                DailyAbsence.date.in_([day for _, day in batch]),
                            )
                        )
                        existing = {(row.staff_id, row.date) for row in result}
                        for staff_id, day in batch - existing:
                            session.add(DailyAbsence(staff_id=staff_id, date=day))

        logger.info("Absences upserted: %d row(s)", len(parsed))
        return len(parsed)

    # ------------------------------------------------------------------
    # Daily reset
    # ------------------------------------------------------------------

    async def reset_today(self, day: Optional[date] = None) -> ResetResult:
        """Back to the unaccounted baseline for `day`; roster and codes stay."""
        day = self._day(day)
        async with self._session("daily reset") as session:
            async with session.begin():
                logs = await session.execute(
                    delete(AttendanceLog).where(AttendanceLog.check_in_date == day)
                )
                visitors = await session.execute(delete(Visitor).where(Visitor.check_in_date == day))
                absences = await session.execute(delete(DailyAbsence).where(DailyAbsence.date == day))

        result = ResetResult(
            check_ins=logs.rowcount, visitors=visitors.rowcount, absences=absences.rowcount
        )
        logger.info("Attendance reset for %s: %s", day.isoformat(), result.model_dump())
        return result
