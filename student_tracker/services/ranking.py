"""
Unit leaderboards ranked by assignment-completion speed.

The ranking is recomputed from completion records on every read:

1. compute_ranking: pure aggregation over completion samples
2. get_unit_rankings: loads one unit's samples and ranks them
3. refresh_overall_ranks: separate step that caches a cross-unit
   position on User.rank

Ordering is average completion time ascending, then completed
assignments descending, then user id ascending. Positions are 1-based and
never shared, even when every sort key ties.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from sqlalchemy import or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from student_tracker.config import get_settings
from student_tracker.db.models import Assignment, AssignmentCompletion, Unit, User
from student_tracker.services.exceptions import DataIntegrityError, NotFoundError, TrackerError

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 5


class BadgeTier(str, Enum):
    """Leaderboard badge awarded by position."""

    GOLD = "gold"
    SILVER = "silver"


@dataclass(frozen=True)
class CompletionSample:
    """One completion joined with its user and assignment."""

    user_id: int
    name: str
    profile_image_url: str | None
    overall_rank: int | None
    assignment_id: int
    title: str
    assignment_created_at: datetime
    completed_at: datetime

    @property
    def completion_time(self) -> timedelta:
        return self.completed_at - self.assignment_created_at


@dataclass(frozen=True)
class RecentCompletion:
    title: str
    completed_at: datetime
    completion_time: timedelta


@dataclass
class RankingEntry:
    """One student's standing within a leaderboard."""

    user_id: int
    name: str
    profile_image_url: str | None
    overall_rank: int | None
    average_completion_time: timedelta
    completed_assignments: int
    recent_completions: list[RecentCompletion] = field(default_factory=list)
    position: int = 0

    @property
    def badge(self) -> str | None:
        tier = badge_tier(self.position)
        return tier.value if tier else None

    @property
    def average_completion_time_label(self) -> str:
        return format_duration(self.average_completion_time)


def badge_tier(position: int) -> BadgeTier | None:
    """Position 1 earns gold, 2-3 silver, everyone else nothing."""
    if position == 1:
        return BadgeTier.GOLD
    if position in (2, 3):
        return BadgeTier.SILVER
    return None


def format_duration(delta: timedelta) -> str:
    """Approximate, human readable length of a duration ("about 3 hours")."""
    minutes = round(delta.total_seconds() / 60)
    if minutes < 1:
        return "less than a minute"
    if minutes < 45:
        return "1 minute" if minutes == 1 else f"{minutes} minutes"
    if minutes < 90:
        return "about 1 hour"
    if minutes < 24 * 60:
        return f"about {round(minutes / 60)} hours"
    if minutes < 42 * 60:
        return "1 day"
    days = round(minutes / (24 * 60))
    if days < 30:
        return f"{days} days"
    months = round(days / 30)
    if days < 365:
        return "about 1 month" if months <= 1 else f"{months} months"
    years = round(days / 365)
    return "about 1 year" if years == 1 else f"about {years} years"


def compute_ranking(
    samples: Iterable[CompletionSample],
    recent_limit: int = DEFAULT_RECENT_LIMIT,
) -> list[RankingEntry]:
    """
    Rank users by their average completion time over the given samples.

    Args:
        samples: Completions, each carrying its assignment's posting time
        recent_limit: How many of each user's latest completions to keep

    Returns:
        Entries in leaderboard order with positions 1..n. Empty when there
        are no samples.

    Raises:
        DataIntegrityError: If a completion predates its assignment
    """
    by_user: dict[int, list[CompletionSample]] = defaultdict(list)
    for sample in samples:
        if sample.completion_time < timedelta(0):
            raise DataIntegrityError(
                f"Completion of assignment {sample.assignment_id} by user {sample.user_id} "
                f"at {sample.completed_at.isoformat()} precedes its posting at "
                f"{sample.assignment_created_at.isoformat()}"
            )
        by_user[sample.user_id].append(sample)

    entries = []
    for user_id, completions in by_user.items():
        total = sum((c.completion_time for c in completions), timedelta(0))
        newest_first = sorted(completions, key=lambda c: c.completed_at, reverse=True)
        first = completions[0]
        entries.append(
            RankingEntry(
                user_id=user_id,
                name=first.name,
                profile_image_url=first.profile_image_url,
                overall_rank=first.overall_rank,
                average_completion_time=total / len(completions),
                completed_assignments=len(completions),
                recent_completions=[
                    RecentCompletion(c.title, c.completed_at, c.completion_time)
                    for c in newest_first[:recent_limit]
                ],
            )
        )

    entries.sort(key=lambda e: (e.average_completion_time, -e.completed_assignments, e.user_id))
    for index, entry in enumerate(entries, start=1):
        entry.position = index
    return entries


def _samples_query():
    return (
        select(
            AssignmentCompletion.user_id,
            User.name,
            User.profile_image_url,
            User.rank,
            Assignment.id,
            Assignment.title,
            Assignment.created_at,
            AssignmentCompletion.completed_at,
        )
        .select_from(AssignmentCompletion)
        .join(User, User.id == AssignmentCompletion.user_id)
        .join(Assignment, Assignment.id == AssignmentCompletion.assignment_id)
    )


async def get_unit_rankings(db: AsyncSession, unit_code: str) -> list[RankingEntry]:
    """
    Leaderboard for one unit, computed live from its completion records.

    Raises NotFoundError for an unknown unit. A unit nobody has completed
    anything in yields an empty list.
    """
    unit = await db.scalar(select(Unit.id).where(Unit.unit_code == unit_code))
    if unit is None:
        raise NotFoundError(f"Unit {unit_code} not found")

    result = await db.execute(_samples_query().where(Assignment.unit_code == unit_code))
    samples = [CompletionSample(*row) for row in result.all()]
    return compute_ranking(samples, recent_limit=get_settings().ranking_recent_completions)


async def refresh_overall_ranks(db: AsyncSession) -> int:
    """
    Recompute the cross-unit ranking and cache each position on User.rank.

    Only users whose cached rank differs are written, in user id order.
    Users without completions have their cached rank cleared. Returns the
    number of users ranked.
    """
    result = await db.execute(_samples_query())
    entries = compute_ranking(CompletionSample(*row) for row in result.all())
    positions = {entry.user_id: entry.position for entry in entries}

    cached = await db.execute(
        select(User.id, User.rank)
        .where(or_(User.rank.is_not(None), User.id.in_(list(positions))))
        .order_by(User.id)
    )
    changed = 0
    for user_id, rank in cached.all():
        position = positions.get(user_id)
        if rank != position:
            await db.execute(update(User).where(User.id == user_id).values(rank=position))
            changed += 1

    logger.info("Refreshed overall rank for %d users (%d changed)", len(entries), changed)
    return len(entries)


async def refresh_overall_ranks_after_commit(db: AsyncSession) -> bool:
    """
    Refresh the cached overall ranks in a transaction of their own.

    Call once the triggering write has been committed. The cached rank is
    a hint, so a failed refresh is logged and rolled back without
    affecting the caller. Returns True when the refresh was committed.
    """
    try:
        await refresh_overall_ranks(db)
        await db.commit()
    except (TrackerError, SQLAlchemyError):
        await db.rollback()
        logger.exception("Failed to refresh cached overall ranks")
        return False
    return True
