from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Literal
from rollcall.dependencies import get_store
from rollcall.services.store import AttendanceStore
from rollcall.services.status import StaffStatusRecord, sort_by_name, sort_by_priority, summarize
from rollcall.schemas.attendance import ExportRecord, StaffLookupResponse, StatusSummaryResponse, VisitorCountResponse

router = APIRouter(prefix="/api", tags=["status"])


@router.get("/staff-status", response_model=List[StaffStatusRecord])
async def get_staff_status(
    order: Literal["name", "priority", "none"] = Query("name"),
    store: AttendanceStore = Depends(get_store)
):
    """
    Today's status for every staff member.
    `priority` puts unaccounted staff first (admin view).
    """
    records = await store.resolve()
    if order == "priority":
        return sort_by_priority(records)
    if order == "name":
        return sort_by_name(records)
    return records


@router.get("/summary", response_model=StatusSummaryResponse)
async def get_summary(store: AttendanceStore = Depends(get_store)):
    counts = summarize(await store.resolve())
    visitors = await store.count_visitors_today()
    return StatusSummaryResponse(visitors=visitors, **counts)


@router.get("/visitor-count", response_model=VisitorCountResponse)
async def get_visitor_count(store: AttendanceStore = Depends(get_store)):
    count = await store.count_visitors_today()
    return VisitorCountResponse(count=count)


@router.get("/export", response_model=List[ExportRecord])
async def export_attendance(store: AttendanceStore = Depends(get_store)):
    return await store.export_today()


@router.get("/staff/{code}", response_model=StaffLookupResponse)
async def get_staff_by_code(code: str, store: AttendanceStore = Depends(get_store)):
    staff_id = await store.get_staff_by_code(code)
    if not staff_id:
        raise HTTPException(404, "Staff not found")
    return StaffLookupResponse(id=staff_id)
