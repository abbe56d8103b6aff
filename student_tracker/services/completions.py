"""Completion tracking for assignments.

A completion row stores the first time a user marked an assignment done.
Later submissions for the same pair return that row untouched.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from student_tracker.db.models import Assignment, AssignmentCompletion
from student_tracker.db.queries import insert_if_absent
from student_tracker.services.exceptions import ConflictError, DataIntegrityError, ValidationError

logger = logging.getLogger(__name__)


async def record_completion(
    db: AsyncSession,
    user_id: int,
    assignment_id: int,
    now: datetime | None = None,
) -> AssignmentCompletion:
    """
    Record that a user completed an assignment.

    Args:
        user_id: The completing user
        assignment_id: Must reference an existing assignment
        now: Completion time; defaults to the current UTC time

    Returns:
        The stored completion. On a repeat call this is the original row
        with the first completion time.

    Raises:
        ValidationError: If assignment_id is not an assignment
        DataIntegrityError: If the completion time precedes the assignment's
            posting, which would give a negative completion time
    """
    assignment = await db.get(Assignment, assignment_id)
    if assignment is None:
        raise ValidationError(f"Assignment {assignment_id} does not exist")

    completed_at = now or datetime.now(timezone.utc)
    if completed_at < assignment.created_at:
        raise DataIntegrityError(
            f"Completion of assignment {assignment_id} at {completed_at.isoformat()} "
            f"precedes its posting at {assignment.created_at.isoformat()}"
        )

    try:
        await insert_if_absent(
            db,
            AssignmentCompletion,
            {"assignment_id": assignment_id, "user_id": user_id, "completed_at": completed_at},
            ["assignment_id", "user_id"],
        )
        logger.info("User %s completed assignment %s", user_id, assignment_id)
    except ConflictError:
        logger.debug("Assignment %s already completed by user %s", assignment_id, user_id)

    result = await db.execute(
        select(AssignmentCompletion).where(
            AssignmentCompletion.assignment_id == assignment_id,
            AssignmentCompletion.user_id == user_id,
        )
    )
    return result.scalar_one()


def _uncompleted_query(user_id: int):
    return (
        select(func.count(Assignment.id))
        .select_from(Assignment)
        .outerjoin(
            AssignmentCompletion,
            and_(
                AssignmentCompletion.assignment_id == Assignment.id,
                AssignmentCompletion.user_id == user_id,
            ),
        )
        .where(AssignmentCompletion.id.is_(None))
    )


async def pending_count(db: AsyncSession, user_id: int, unit_code: str | None) -> int:
    """Count assignments in the unit the user has not completed.

    A unit_code of None counts across every unit.
    """
    query = _uncompleted_query(user_id)
    if unit_code is not None:
        query = query.where(Assignment.unit_code == unit_code)
    result = await db.execute(query)
    return result.scalar_one()


async def completed_assignment_ids(
    db: AsyncSession, user_id: int, unit_code: str
) -> dict[int, datetime]:
    """Map of assignment id -> completed_at for the user's completions in a unit."""
    result = await db.execute(
        select(AssignmentCompletion.assignment_id, AssignmentCompletion.completed_at)
        .join(Assignment, Assignment.id == AssignmentCompletion.assignment_id)
        .where(AssignmentCompletion.user_id == user_id, Assignment.unit_code == unit_code)
    )
    return {assignment_id: completed_at for assignment_id, completed_at in result.all()}


async def overdue_count(db: AsyncSession, user_id: int, now: datetime | None = None) -> int:
    """Count assignments, across all units, past their deadline and not completed."""
    now = now or datetime.now(timezone.utc)
    result = await db.execute(
        _uncompleted_query(user_id).where(
            Assignment.deadline.is_not(None),
            Assignment.deadline < now,
        )
    )
    return result.scalar_one()


async def upcoming_count(db: AsyncSession, user_id: int, now: datetime | None = None) -> int:
    """Count uncompleted assignments whose deadline is still ahead."""
    now = now or datetime.now(timezone.utc)
    result = await db.execute(
        _uncompleted_query(user_id).where(
            Assignment.deadline.is_not(None),
            Assignment.deadline >= now,
        )
    )
    return result.scalar_one()
