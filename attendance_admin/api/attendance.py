from fastapi import APIRouter, Depends, Query, Request
from datetime import date
from typing import Optional

from ..services.attendance_service import AttendanceService
from ..services.errors import ServiceError
from ..models.db_models import User
from .schemas.attendance import AttendanceCreateRequest, AttendanceCreateResponse, AttendanceListResponse
from .auth import get_current_user
from .dependencies import get_attendance_service
from .utilities.errors import to_http_exception
from .utilities.limiter import limiter

router = APIRouter(prefix="/attendance", tags=["Attendance"])


@router.post("", response_model=AttendanceCreateResponse, summary="Mark a student's attendance for a day")
@limiter.limit("200/minute")
async def record_attendance(
    request: Request,
    create_request: AttendanceCreateRequest,
    user: User = Depends(get_current_user),
    service: AttendanceService = Depends(get_attendance_service)
):
    """
    Stores one attendance row per student per day. When `status` is omitted it
    is derived from `time_in`: missing means Absent, after the late threshold means Late.
    """
    try:
        new_id, final_status = await service.record_attendance(
            student_pk=create_request.student_id,
            recorded_by=user,
            day=create_request.date,
            time_in=create_request.time_in,
            time_out=create_request.time_out,
            status=create_request.status,
            remarks=create_request.remarks,
        )
    except ServiceError as e:
        raise to_http_exception(e)
    return AttendanceCreateResponse(message="Attendance recorded successfully", id=new_id, status=final_status)


@router.get("", response_model=AttendanceListResponse, summary="List attendance for a day")
@limiter.limit("120/minute")
async def list_attendance(
    request: Request,
    day: Optional[date] = Query(None, alias="date", description="YYYY-MM-DD, defaults to today"),
    user: User = Depends(get_current_user),
    service: AttendanceService = Depends(get_attendance_service)
):
    target_day = day or date.today()
    records, stats = await service.get_attendance_for_date(target_day)
    return AttendanceListResponse(date=target_day, records=records, stats=stats)
