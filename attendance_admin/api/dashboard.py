from fastapi import APIRouter, Depends, Request

from ..services.dashboard_service import DashboardService
from ..models.db_models import User
from .schemas.dashboard import DashboardStatsResponse
from .auth import get_current_user
from .dependencies import get_dashboard_service
from .utilities.limiter import limiter

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=DashboardStatsResponse, summary="Counts shown on the dashboard")
@limiter.limit("120/minute")
async def get_dashboard_stats(
    request: Request,
    user: User = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service)
):
    stats = await service.get_stats()
    return DashboardStatsResponse(**stats)
