"""
Title search over notes, assignments and past papers.

Every search is logged as a SearchQuery so later prefixes can be
completed from what other users searched most.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from student_tracker.db.models import Assignment, Note, PastPaper, SearchQuery
from student_tracker.schemas import SearchResultRead
from student_tracker.services.content import get_unit_or_404
from student_tracker.services.exceptions import ValidationError

logger = logging.getLogger(__name__)

SEARCH_TYPES = ("all", "notes", "assignments", "pastpapers")
DEFAULT_RESULT_LIMIT = 50
DEFAULT_SUGGESTION_LIMIT = 5

# (search type, result type, model)
_SOURCES = (
    ("notes", "note", Note),
    ("assignments", "assignment", Assignment),
    ("pastpapers", "pastpaper", PastPaper),
)


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def search_content(
    db: AsyncSession,
    user_id: int,
    query: str,
    unit_code: str | None = None,
    content_type: str = "all",
    limit: int = DEFAULT_RESULT_LIMIT,
) -> list[SearchResultRead]:
    """
    Find content whose title contains the query, case-insensitively.

    Args:
        user_id: The searching user, recorded with the query
        query: Text to look for; % and _ match literally
        unit_code: Restrict results to one unit
        content_type: "all", "notes", "assignments" or "pastpapers"
        limit: Maximum number of results across all types

    Raises:
        ValidationError: If the query is blank or content_type is unknown
        NotFoundError: If unit_code names no unit
    """
    query = query.strip()
    if not query:
        raise ValidationError("Search query is required")
    if content_type not in SEARCH_TYPES:
        raise ValidationError(f"Unknown content type: {content_type!r}")
    if unit_code is not None:
        await get_unit_or_404(db, unit_code)

    pattern = f"%{_escape_like(query)}%"
    results: list[SearchResultRead] = []
    for search_type, result_type, model in _SOURCES:
        if content_type not in ("all", search_type):
            continue
        stmt = select(model.id, model.title, model.unit_code, model.file_url).where(
            model.title.ilike(pattern, escape="\\")
        )
        if unit_code is not None:
            stmt = stmt.where(model.unit_code == unit_code)
        result = await db.execute(stmt.order_by(model.title, model.id).limit(limit))
        results.extend(
            SearchResultRead(id=item_id, type=result_type, title=title, unit_code=code, url=url)
            for item_id, title, code, url in result.all()
        )

    results = results[:limit]
    db.add(SearchQuery(user_id=user_id, query=query, result_count=len(results)))
    await db.flush()
    logger.info("User %s searched %r: %d results", user_id, query, len(results))
    return results


async def search_suggestions(
    db: AsyncSession, prefix: str, limit: int = DEFAULT_SUGGESTION_LIMIT
) -> list[str]:
    """Earlier queries starting with prefix, most searched first."""
    prefix = prefix.strip().lower()
    if not prefix:
        raise ValidationError("Query parameter is required")

    result = await db.execute(
        select(SearchQuery.query)
        .where(func.lower(SearchQuery.query).like(f"{_escape_like(prefix)}%", escape="\\"))
        .group_by(SearchQuery.query)
        .order_by(func.count(SearchQuery.id).desc(), SearchQuery.query)
        .limit(limit)
    )
    return list(result.scalars())
