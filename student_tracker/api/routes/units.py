"""Unit routes: listing, detail and the per-unit leaderboard."""

import logging

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select

from student_tracker.api.deps import CurrentUser, DbSession, TeacherUser
from student_tracker.db.models import Unit
from student_tracker.schemas import RankingEntryRead, UnitCreate, UnitRead, UnitSummary
from student_tracker.services import content, ranking

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/units", tags=["units"])


@router.get("", response_model=list[UnitSummary])
async def list_units(
    current_user: CurrentUser,
    db: DbSession,
) -> list[UnitSummary]:
    """List all units with the current user's notification counts."""
    return await content.list_units(db, current_user.id)


@router.post("", response_model=UnitRead, status_code=status.HTTP_201_CREATED)
async def create_unit(
    data: UnitCreate,
    current_user: TeacherUser,
    db: DbSession,
) -> UnitRead:
    """Create a new unit (teachers only)."""
    existing = await db.scalar(select(Unit.id).where(Unit.unit_code == data.unit_code))
    if existing is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Unit {data.unit_code} already exists",
        )
    unit = Unit(**data.model_dump())
    db.add(unit)
    await db.commit()
    await db.refresh(unit)
    logger.info("User %s created unit %s", current_user.id, unit.unit_code)
    return UnitRead.model_validate(unit)


@router.get("/{unit_code}", response_model=UnitRead)
async def get_unit(
    unit_code: str,
    current_user: CurrentUser,
    db: DbSession,
) -> UnitRead:
    """Get a unit by its code."""
    unit = await content.get_unit_or_404(db, unit_code)
    return UnitRead.model_validate(unit)


@router.get("/{unit_code}/rankings", response_model=list[RankingEntryRead])
async def get_unit_rankings(
    unit_code: str,
    current_user: CurrentUser,
    db: DbSession,
) -> list[RankingEntryRead]:
    """
    Leaderboard for a unit, fastest average completion first.

    An empty list means nobody has completed an assignment in the unit yet.
    """
    entries = await ranking.get_unit_rankings(db, unit_code)
    return [RankingEntryRead.model_validate(entry) for entry in entries]
