from __future__ import annotations

import asyncio
from datetime import date, datetime

import pytest
from sqlalchemy import func, select

from conftest import ROSTER, staff_row
from rollcall.core.exceptions import NotFoundError, ValidationError
from rollcall.models.attendance import AttendanceLog, DailyAbsence
from rollcall.models.crt import CrtCode
from rollcall.schemas.upload import AbsenceRow, CrtRow
from rollcall.services.status import StaffStatus

MONDAY = date(2025, 6, 2)
TUESDAY = date(2025, 6, 3)


async def statuses(store, day=None):
    return {r.last_name: r.status for r in await store.resolve(day)}


async def count_rows(sessions, model):
    async with sessions() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar_one()


async def staff_id(store, code):
    return await store.get_staff_by_code(code)


def test_upload_rows_accept_an_explicit_day():
    assert CrtRow.model_validate({"code": "CRT001", "date": "2025-06-03"}).date == TUESDAY
    assert AbsenceRow.model_validate({"staff_id": "x", "date": "2025-06-03"}).date == TUESDAY
    assert CrtRow.model_validate({"code": "CRT001", "date": " "}).date is None
    assert AbsenceRow.model_validate({"staff_id": "x"}).date is None


async def test_non_working_day_then_check_in_with_lower_case_code(store):
    await store.replace_roster([staff_row("ADAC", "Christina", "Adams", "P S PCO", ["Monday"])])

    assert await statuses(store) == {"Adams": StaffStatus.NON_WORKING}

    member = await store.record_check_in("adac")

    assert member.code == "ADAC"
    assert await statuses(store) == {"Adams": StaffStatus.PRESENT}


async def test_check_in_beats_absence_and_absence_beats_non_working(store):
    await store.replace_roster(ROSTER)
    adams = await staff_id(store, "ADAC")
    brown = await staff_id(store, "BROJ")

    await store.upsert_absences([AbsenceRow(staff_id=adams), AbsenceRow(staff_id=brown)])
    await store.record_check_in("BROJ")

    assert await statuses(store) == {
        "Adams": StaffStatus.ABSENT,
        "Brown": StaffStatus.PRESENT,
        "Clark": StaffStatus.UNACCOUNTED,
    }


async def test_unknown_staff_code_is_not_found(store):
    await store.replace_roster(ROSTER)

    with pytest.raises(NotFoundError, match="Invalid staff code"):
        await store.record_check_in("NOPE")
    with pytest.raises(NotFoundError):
        await store.record_check_in("   ")


async def test_replace_roster_is_all_or_nothing(store):
    await store.replace_roster(ROSTER)

    with pytest.raises(ValidationError) as excinfo:
        await store.replace_roster([
            staff_row("NEWA", "New", "Person"),
            staff_row("", "Blank", "Code"),
        ])

    assert [row.row for row in excinfo.value.rows] == [2]
    assert "code" in excinfo.value.rows[0].message
    assert set(await statuses(store)) == {"Adams", "Brown", "Clark"}


async def test_replace_roster_reports_every_offending_row(store):
    with pytest.raises(ValidationError) as excinfo:
        await store.replace_roster([
            staff_row("AAAA", "", "Nofirst"),
            staff_row("BBBB", "Ok", "Fine"),
            staff_row("bbbb", "Dup", "Code"),
            staff_row("CCCC", "Bad", "Day", days="Funday"),
            staff_row("DDDD", "No", "Area", area="  "),
        ])

    assert [row.row for row in excinfo.value.rows] == [1, 3, 4, 5]
    assert await store.resolve() == []


async def test_replace_roster_keeps_ids_and_clears_dependents_of_removed_staff(store, sessions):
    await store.replace_roster(ROSTER)
    adams = await staff_id(store, "ADAC")
    clark = await staff_id(store, "CLAS")
    await store.record_check_in("CLAS")
    await store.upsert_absences([AbsenceRow(staff_id=adams), AbsenceRow(staff_id=clark)])
    await store.upsert_access_codes([CrtRow(code="CRT001", assigned_to=clark)])

    await store.replace_roster([
        staff_row("adac", "Christina", "Adams-Smith", days=["Monday"]),
        staff_row("BROJ", "James", "Brown"),
    ])

    assert await staff_id(store, "ADAC") == adams
    assert await staff_id(store, "CLAS") is None
    assert await statuses(store) == {"Adams-Smith": StaffStatus.ABSENT, "Brown": StaffStatus.UNACCOUNTED}
    assert await count_rows(sessions, AttendanceLog) == 0
    assert await count_rows(sessions, DailyAbsence) == 1

    async with sessions() as session:
        crt = (await session.execute(select(CrtCode))).scalar_one()
    assert crt.assigned_to is None
    await store.verify_access_code("CRT001")


async def test_verify_access_code_is_scoped_to_the_day(store):
    await store.upsert_access_codes([CrtRow(code="CRT001", date=TUESDAY)])

    with pytest.raises(NotFoundError, match="Invalid CRT code for today"):
        await store.verify_access_code("crt001")

    await store.verify_access_code("crt001", TUESDAY)


async def test_verify_access_code_records_no_attendance(store, sessions):
    await store.replace_roster(ROSTER)
    await store.upsert_access_codes([CrtRow(code="crt002")])
    before = await statuses(store)

    assert await store.verify_access_code(" crt002 ") == "CRT002"

    assert await statuses(store) == before
    assert await count_rows(sessions, AttendanceLog) == 0


async def test_access_code_upsert_is_idempotent(store, sessions):
    await store.replace_roster(ROSTER)
    brown = await staff_id(store, "BROJ")
    batch = [
        CrtRow(code="crt001"),
        CrtRow(code="CRT002", date=TUESDAY, assigned_to=brown),
        CrtRow(code="CRT001", date=""),
    ]

    assert await store.upsert_access_codes(batch) == 3
    assert await store.upsert_access_codes(batch) == 3

    assert await count_rows(sessions, CrtCode) == 2


async def test_access_code_upsert_rejects_unknown_assignee(store, sessions):
    with pytest.raises(ValidationError) as excinfo:
        await store.upsert_access_codes([CrtRow(code="OK1"), CrtRow(code="BAD", assigned_to="ghost")])

    assert [row.row for row in excinfo.value.rows] == [2]
    assert await count_rows(sessions, CrtCode) == 0


async def test_absence_upsert_is_idempotent(store, sessions):
    await store.replace_roster(ROSTER)
    adams = await staff_id(store, "ADAC")
    batch = [AbsenceRow(staff_id=adams), AbsenceRow(staff_id=adams, date=TUESDAY)]

    await store.upsert_absences(batch)
    await store.upsert_absences(batch)

    assert await count_rows(sessions, DailyAbsence) == 2


async def test_absence_upsert_reports_unknown_staff_and_applies_nothing(store, sessions):
    await store.replace_roster(ROSTER)
    adams = await staff_id(store, "ADAC")

    with pytest.raises(ValidationError) as excinfo:
        await store.upsert_absences([
            AbsenceRow(staff_id=adams),
            AbsenceRow(staff_id="missing-1"),
            AbsenceRow(staff_id=""),
        ])

    assert [row.row for row in excinfo.value.rows] == [3]

    with pytest.raises(ValidationError) as excinfo:
        await store.upsert_absences([AbsenceRow(staff_id=adams), AbsenceRow(staff_id="missing-1")])

    assert [row.row for row in excinfo.value.rows] == [2]
    assert "missing-1" in excinfo.value.rows[0].message
    assert await count_rows(sessions, DailyAbsence) == 0


async def test_visitors_are_counted_per_day(store, clock):
    with pytest.raises(ValidationError):
        await store.record_visitor("   ")

    assert await store.record_visitor("  Dana Guest ") == "Dana Guest"
    assert await store.count_visitors_today() == 1

    clock.advance_to(datetime(2025, 6, 3, 9, 0))
    assert await store.count_visitors_today() == 0
    assert await store.count_visitors_today(MONDAY) == 1


async def test_reset_only_touches_the_target_day(store, clock):
    await store.replace_roster(ROSTER)
    brown = await staff_id(store, "BROJ")
    clark = await staff_id(store, "CLAS")
    await store.record_check_in("BROJ")
    await store.upsert_absences([AbsenceRow(staff_id=clark), AbsenceRow(staff_id=clark, date=TUESDAY)])
    await store.record_visitor("Monday visitor")

    clock.advance_to(datetime(2025, 6, 3, 10, 15))
    await store.record_check_in("ADAC")
    await store.upsert_absences([AbsenceRow(staff_id=brown)])
    await store.upsert_access_codes([CrtRow(code="CRT009")])
    await store.record_visitor("Tuesday visitor")

    result = await store.reset_today()

    assert (result.check_ins, result.visitors, result.absences) == (1, 1, 2)
    assert set((await statuses(store)).values()) == {StaffStatus.UNACCOUNTED}
    assert await statuses(store, MONDAY) == {
        "Adams": StaffStatus.NON_WORKING,
        "Brown": StaffStatus.PRESENT,
        "Clark": StaffStatus.ABSENT,
    }
    assert await store.count_visitors_today(MONDAY) == 1
    await store.verify_access_code("CRT009")


async def test_export_lists_staff_then_visitors(store, clock):
    await store.replace_roster(ROSTER)
    await store.record_visitor("Vera Visitor")
    clock.advance_to(datetime(2025, 6, 2, 8, 45, 5))
    await store.record_check_in("CLAS")

    records = await store.export_today()

    assert [r.model_dump() for r in records] == [
        {
            "date": "2025-06-02", "time_in": "08:45:05", "time_out": "",
            "staff_code": "CLAS", "first_name": "Sarah", "last_name": "Clark",
            "work_area": "English", "type": "Staff",
        },
        {
            "date": "2025-06-02", "time_in": "08:30:00", "time_out": "",
            "staff_code": "", "first_name": "Vera Visitor", "last_name": "",
            "work_area": "", "type": "Visitor",
        },
    ]


async def test_concurrent_check_ins_and_roster_swap(store, sessions):
    await store.replace_roster(ROSTER)

    await asyncio.gather(
        store.record_check_in("ADAC"),
        store.record_check_in("BROJ"),
        store.replace_roster(ROSTER),
        store.record_check_in("CLAS"),
        store.record_check_in("adac"),
    )

    assert await count_rows(sessions, AttendanceLog) == 4
    assert set((await statuses(store)).values()) == {StaffStatus.PRESENT}
