"""Dashboard routes: headline counts, recent activity and deadlines."""

from fastapi import APIRouter, Query

from student_tracker.api.deps import CurrentUser, DbSession
from student_tracker.schemas import ActivityRead, AssignmentRead, DashboardStats
from student_tracker.services import content

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
async def get_stats(current_user: CurrentUser, db: DbSession) -> DashboardStats:
    """Unviewed notes and papers, pending/overdue/upcoming assignments and cached rank."""
    return await content.dashboard_stats(db, current_user)


@router.get("/activities", response_model=list[ActivityRead])
async def get_activities(
    current_user: CurrentUser,
    db: DbSession,
    limit: int = Query(10, ge=1, le=50),
) -> list[ActivityRead]:
    """The current user's latest completions and views."""
    return await content.recent_activity(db, current_user.id, limit=limit)


@router.get("/deadlines", response_model=list[AssignmentRead])
async def get_deadlines(
    current_user: CurrentUser,
    db: DbSession,
    limit: int = Query(5, ge=1, le=50),
) -> list[AssignmentRead]:
    """Nearest upcoming assignment deadlines across all units."""
    return await content.upcoming_deadlines(db, current_user.id, limit=limit)
