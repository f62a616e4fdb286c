from fastapi import APIRouter, Depends, Request

from ..services.teacher_service import TeacherService
from ..services.errors import ServiceError
from ..models.db_models import User
from .schemas.teacher import TeacherCreateRequest, TeacherCreateResponse, TeacherListResponse
from .auth import get_current_user
from .dependencies import get_teacher_service
from .utilities.errors import to_http_exception
from .utilities.limiter import limiter

router = APIRouter(prefix="/teachers", tags=["Teachers"])


@router.get("", response_model=TeacherListResponse, summary="List every teacher")
@limiter.limit("120/minute")
async def list_teachers(
    request: Request,
    user: User = Depends(get_current_user),
    service: TeacherService = Depends(get_teacher_service)
):
    teachers = await service.list_teachers()
    return TeacherListResponse(teachers=teachers, total=len(teachers))


@router.post("", response_model=TeacherCreateResponse, summary="Add a teacher")
@limiter.limit("60/minute")
async def create_teacher(
    request: Request,
    create_request: TeacherCreateRequest,
    user: User = Depends(get_current_user),
    service: TeacherService = Depends(get_teacher_service)
):
    try:
        new_id = await service.create_teacher(**create_request.model_dump())
    except ServiceError as e:
        raise to_http_exception(e)
    return TeacherCreateResponse(message="Teacher added successfully", id=new_id)
