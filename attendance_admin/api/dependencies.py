#attendance_admin/api/dependencies.py
from fastapi import Request, Depends, HTTPException, status
import asyncpg

from ..config.config import settings
from ..db.db_client import AsyncPostgresClient
from ..services.auth_service import AuthService
from ..services.student_service import StudentService
from ..services.import_service import ImportService
from ..services.teacher_service import TeacherService
from ..services.attendance_service import AttendanceService
from ..services.dashboard_service import DashboardService
from ..services.search_service import SearchService


def get_postgres_pool(request: Request) -> asyncpg.Pool:
    """
    Hands out the connection pool created once in the application lifespan.
    """
    pool = getattr(request.app.state, "postgres_pool", None)
    if pool is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Database is unavailable.")
    return pool


def get_db_client(postgres_pool: asyncpg.Pool = Depends(get_postgres_pool)) -> AsyncPostgresClient:
    """
    Wraps the shared pool in a storage client for the current request.
    The client is cheap; the pool behind it is never recreated per call.
    """
    return AsyncPostgresClient(pool=postgres_pool)


def get_auth_service(db_client: AsyncPostgresClient = Depends(get_db_client)) -> AuthService:
    return AuthService(db_client=db_client)


def get_student_service(db_client: AsyncPostgresClient = Depends(get_db_client)) -> StudentService:
    return StudentService(db_client=db_client)


def get_import_service(db_client: AsyncPostgresClient = Depends(get_db_client)) -> ImportService:
    return ImportService(db_client=db_client)


def get_teacher_service(db_client: AsyncPostgresClient = Depends(get_db_client)) -> TeacherService:
    return TeacherService(db_client=db_client)


def get_attendance_service(db_client: AsyncPostgresClient = Depends(get_db_client)) -> AttendanceService:
    return AttendanceService(db_client=db_client, late_threshold=settings.LATE_THRESHOLD)


def get_dashboard_service(db_client: AsyncPostgresClient = Depends(get_db_client)) -> DashboardService:
    return DashboardService(db_client=db_client)


def get_search_service(db_client: AsyncPostgresClient = Depends(get_db_client)) -> SearchService:
    return SearchService(db_client=db_client)
