from fastapi import APIRouter, Depends, HTTPException
from rollcall.core.exceptions import NotFoundError
from rollcall.dependencies import get_hub, get_store
from rollcall.realtime import events
from rollcall.realtime.hub import ConnectionHub
from rollcall.services.store import AttendanceStore
from rollcall.schemas.checkin import ActionResponse, CrtCheckIn, StaffCheckIn, VisitorCheckIn

router = APIRouter(prefix="/api/checkin", tags=["checkin"])


@router.post("/staff", response_model=ActionResponse)
async def check_in_staff(
    checkin_in: StaffCheckIn,
    store: AttendanceStore = Depends(get_store),
    hub: ConnectionHub = Depends(get_hub)
):
    try:
        staff = await store.record_check_in(checkin_in.staffCode)
    except NotFoundError as e:
        raise HTTPException(status_code=400, detail=e.message)

    hub.emit(events.staff_checkin(staff.code))
    return ActionResponse(success=True, message="Staff check-in successful")


@router.post("/crt", response_model=ActionResponse)
async def check_in_crt(
    checkin_in: CrtCheckIn,
    store: AttendanceStore = Depends(get_store),
    hub: ConnectionHub = Depends(get_hub)
):
    # Verifies the code only; no attendance row is written for CRT staff
    try:
        code = await store.verify_access_code(checkin_in.crtCode)
    except NotFoundError as e:
        raise HTTPException(status_code=400, detail=e.message)

    hub.emit(events.crt_checkin(code))
    return ActionResponse(success=True, message="CRT check-in successful")


@router.post("/visitor", response_model=ActionResponse)
async def check_in_visitor(
    checkin_in: VisitorCheckIn,
    store: AttendanceStore = Depends(get_store),
    hub: ConnectionHub = Depends(get_hub)
):
    name = await store.record_visitor(checkin_in.name)
    hub.emit(events.visitor_checkin(name))
    return ActionResponse(success=True, message="Visitor check-in successful")
