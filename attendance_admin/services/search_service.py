import logging
from typing import List, Optional

from pydantic import BaseModel

from ..db.db_client import AsyncPostgresClient
from ..models.db_models import SearchHit

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
PER_TYPE_LIMIT = 10
MAX_RESULTS = 20


class SearchResult(BaseModel):
    results: List[SearchHit] = []
    total: Optional[int] = None
    query: Optional[str] = None
    message: Optional[str] = None


def rank_hits(hits: List[SearchHit], query: str) -> List[SearchHit]:
    """
    Names containing the query (case-insensitive) come first,
    then everything is ordered by name, case-insensitive.
    """
    needle = query.lower()
    return sorted(hits, key=lambda hit: (needle not in hit.name.lower(), hit.name.lower()))


class SearchService:
    """Global search over students and teachers."""
    def __init__(self, db_client: AsyncPostgresClient):
        self.db_client = db_client

    async def search(self, query: Optional[str]) -> SearchResult:
        """
        Up to 10 students and 10 teachers are matched, ranked together and cut to 20.
        Queries shorter than 2 characters never reach the database.
        """
        if not query or len(query.strip()) < MIN_QUERY_LENGTH:
            return SearchResult(message=f"Query must be at least {MIN_QUERY_LENGTH} characters long")

        term = query.strip()
        hits: List[SearchHit] = []
        hits.extend(await self.db_client.search_students(term, PER_TYPE_LIMIT))
        hits.extend(await self.db_client.search_teachers(term, PER_TYPE_LIMIT))

        ranked = rank_hits(hits, query)
        logger.debug(f"Search '{term}' matched {len(ranked)} rows.")
        return SearchResult(results=ranked[:MAX_RESULTS], total=len(ranked), query=query)
