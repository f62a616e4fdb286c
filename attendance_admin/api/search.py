from fastapi import APIRouter, Depends, Request
from typing import Optional

from ..services.search_service import SearchService, SearchResult
from ..models.db_models import User
from .auth import get_current_user
from .dependencies import get_search_service
from .utilities.limiter import limiter

router = APIRouter(prefix="/search", tags=["Search"])


@router.get("", response_model=SearchResult, response_model_exclude_none=True, summary="Search students and teachers")
@limiter.limit("120/minute")
async def search(
    request: Request,
    q: Optional[str] = None,
    user: User = Depends(get_current_user),
    service: SearchService = Depends(get_search_service)
):
    """
    Matches student names/strands and teacher names/positions. Queries under
    two characters return an empty list with a message.
    """
    return await service.search(q)
