import logging
from fastapi import APIRouter, Depends, Request, Response

from ..services.student_service import StudentService
from ..services.import_service import ImportService
from ..services.errors import ServiceError
from ..models.db_models import User
from .schemas.student import (
    StudentCreateRequest,
    StudentCreateResponse,
    StudentListResponse,
    StudentImportRequest,
    StudentImportResponse,
    MessageResponse,
)
from .auth import get_current_user, require_admin
from .dependencies import get_student_service, get_import_service
from .utilities.errors import to_http_exception
from .utilities.limiter import limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/students", tags=["Students"])


@router.get("", response_model=StudentListResponse, summary="List every student")
@limiter.limit("120/minute")
async def list_students(
    request: Request,
    user: User = Depends(get_current_user),
    service: StudentService = Depends(get_student_service)
):
    students = await service.list_students()
    return StudentListResponse(students=students, total=len(students))


@router.post("", response_model=StudentCreateResponse, summary="Add a single student")
@limiter.limit("60/minute")
async def create_student(
    request: Request,
    create_request: StudentCreateRequest,
    user: User = Depends(get_current_user),
    service: StudentService = Depends(get_student_service)
):
    try:
        new_id = await service.create_student(**create_request.model_dump())
    except ServiceError as e:
        raise to_http_exception(e)
    return StudentCreateResponse(message="Student added successfully", id=new_id)


@router.post("/import", response_model=StudentImportResponse, summary="Bulk import students from CSV text")
@limiter.limit("10/minute")
async def import_students(
    request: Request,
    import_request: StudentImportRequest,
    user: User = Depends(get_current_user),
    service: ImportService = Depends(get_import_service)
):
    """
    Imports students row by row. Rows that fail validation or collide on the
    student ID are reported in `errors` (first 10 only) and do not stop the batch.
    """
    try:
        result = await service.import_students(import_request.csv_content)
    except ServiceError as e:
        raise to_http_exception(e)
    logger.info(f"User '{user.username}' imported {result.imported_count} of {result.total_rows} students.")
    return StudentImportResponse(message=result.message, **result.model_dump())


@router.get("/export", summary="Download every student as CSV")
@limiter.limit("20/minute")
async def export_students(
    request: Request,
    user: User = Depends(get_current_user),
    service: StudentService = Depends(get_student_service)
):
    filename, content = await service.export_students()
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# Declared before /{student_pk} so "clear" is not taken for an id.
@router.delete("/clear", response_model=MessageResponse, summary="Delete every student (admin only)")
@limiter.limit("5/minute")
async def clear_students(
    request: Request,
    admin: User = Depends(require_admin),
    service: StudentService = Depends(get_student_service)
):
    await service.clear_students()
    logger.warning(f"Admin '{admin.username}' cleared all students.")
    return MessageResponse(message="All students cleared successfully")


@router.delete("/{student_pk}", response_model=MessageResponse, summary="Delete one student and its dependent rows")
@limiter.limit("60/minute")
async def delete_student(
    request: Request,
    student_pk: str,
    user: User = Depends(get_current_user),
    service: StudentService = Depends(get_student_service)
):
    try:
        await service.delete_student(student_pk)
    except ServiceError as e:
        raise to_http_exception(e)
    return MessageResponse(message="Student deleted successfully")
