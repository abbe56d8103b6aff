"""
Content search routes.

Endpoints:
- GET /search - Search note, assignment and past paper titles
- GET /search/suggestions - Complete a partial query from earlier searches
"""

from fastapi import APIRouter, Query

from student_tracker.api.deps import CurrentUser, DbSession
from student_tracker.schemas import SearchResponse, SearchSuggestions, SearchType
from student_tracker.services import search

router = APIRouter(prefix="/search", tags=["search"])


@router.get("", response_model=SearchResponse)
async def search_content(
    current_user: CurrentUser,
    db: DbSession,
    query: str = Query(..., min_length=1, max_length=255),
    content_type: SearchType = Query("all", alias="type"),
    unit_code: str | None = Query(None),
) -> SearchResponse:
    """Search titles, optionally within one unit or one content type."""
    results = await search.search_content(
        db, current_user.id, query, unit_code=unit_code, content_type=content_type
    )
    return SearchResponse(results=results)


@router.get("/suggestions", response_model=SearchSuggestions)
async def get_suggestions(
    current_user: CurrentUser,
    db: DbSession,
    query: str = Query(..., min_length=1, max_length=255),
) -> SearchSuggestions:
    """Up to five earlier queries that start with the given text."""
    return SearchSuggestions(suggestions=await search.search_suggestions(db, query))
