from fastapi import APIRouter, Depends
from rollcall.dependencies import get_hub, get_store
from rollcall.realtime import events
from rollcall.realtime.hub import ConnectionHub
from rollcall.services.store import AttendanceStore
from rollcall.schemas.checkin import ActionResponse
from rollcall.schemas.upload import AbsenceUpload, CrtUpload, StaffUpload

router = APIRouter(prefix="/api", tags=["admin"])


@router.post("/upload/staff", response_model=ActionResponse)
async def upload_staff(
    upload_in: StaffUpload,
    store: AttendanceStore = Depends(get_store),
    hub: ConnectionHub = Depends(get_hub)
):
    """
    Full replace: the uploaded roster supersedes the current one.
    Any invalid row rejects the whole upload.
    """
    count = await store.replace_roster(upload_in.staffData)
    hub.emit(events.staff_upload(count))
    return ActionResponse(success=True, message=f"Successfully processed {count} staff records")


@router.post("/upload/crt", response_model=ActionResponse)
async def upload_crt(
    upload_in: CrtUpload,
    store: AttendanceStore = Depends(get_store),
    hub: ConnectionHub = Depends(get_hub)
):
    count = await store.upsert_access_codes(upload_in.crtData)
    hub.emit(events.crt_upload(count))
    return ActionResponse(success=True, message=f"Successfully processed {count} CRT records")


@router.post("/upload/absence", response_model=ActionResponse)
async def upload_absence(
    upload_in: AbsenceUpload,
    store: AttendanceStore = Depends(get_store),
    hub: ConnectionHub = Depends(get_hub)
):
    count = await store.upsert_absences(upload_in.absenceData)
    hub.emit(events.absence_upload(count))
    return ActionResponse(success=True, message=f"Successfully processed {count} absence records")


@router.post("/reset", response_model=ActionResponse)
async def reset_attendance(
    store: AttendanceStore = Depends(get_store),
    hub: ConnectionHub = Depends(get_hub)
):
    await store.reset_today()
    hub.emit(events.reset_attendance())
    return ActionResponse(success=True, message="Successfully reset all attendance records for today")
