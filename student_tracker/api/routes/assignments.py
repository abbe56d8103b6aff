"""Assignment routes within a unit, including completion."""

import logging

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import delete

from student_tracker.api.deps import (
    CurrentUser,
    DbSession,
    TeacherUser,
    get_unit_item_or_404,
    require_owner,
)
from student_tracker.api.routes.files import delete_stored_file
from student_tracker.db.models import Assignment, AssignmentCompletion
from student_tracker.schemas import AssignmentCreate, AssignmentRead, CompletionRead
from student_tracker.services import completions, content, ranking

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/units/{unit_code}/assignments", tags=["assignments"])


@router.get("", response_model=list[AssignmentRead])
async def list_assignments(
    unit_code: str,
    current_user: CurrentUser,
    db: DbSession,
) -> list[AssignmentRead]:
    """List a unit's assignments by deadline, with the current user's completion state."""
    return await content.list_assignments(db, unit_code, current_user.id)


@router.post("", response_model=AssignmentRead, status_code=status.HTTP_201_CREATED)
async def create_assignment(
    unit_code: str,
    data: AssignmentCreate,
    current_user: TeacherUser,
    db: DbSession,
) -> AssignmentRead:
    """Post an assignment to a unit (teachers only)."""
    await content.get_unit_or_404(db, unit_code)
    assignment = Assignment(
        unit_code=unit_code,
        user_id=current_user.id,
        **data.model_dump(),
    )
    db.add(assignment)
    await db.commit()
    await db.refresh(assignment)
    return content.assignment_to_read(assignment, current_user.name, None)


@router.post("/{assignment_id}/complete", response_model=CompletionRead)
async def complete_assignment(
    unit_code: str,
    assignment_id: int,
    current_user: CurrentUser,
    db: DbSession,
) -> CompletionRead:
    """
    Mark an assignment completed by the current user.

    The first completion time is kept; repeating the call returns the
    original record. The cached overall ranks are refreshed once the
    completion is committed.
    """
    await content.get_unit_or_404(db, unit_code)
    assignment = await db.get(Assignment, assignment_id)
    if assignment is not None and assignment.unit_code != unit_code:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resource not found")

    completion = await completions.record_completion(db, current_user.id, assignment_id)
    response = CompletionRead(
        id=completion.id,
        assignment_id=completion.assignment_id,
        user_id=completion.user_id,
        completed_at=completion.completed_at,
        completion_time=completion.completed_at - assignment.created_at,
    )
    await db.commit()

    await ranking.refresh_overall_ranks_after_commit(db)
    return response


@router.delete("/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_assignment(
    unit_code: str,
    assignment_id: int,
    current_user: CurrentUser,
    db: DbSession,
) -> None:
    """Delete an assignment you posted, with its completions and stored file."""
    assignment = await get_unit_item_or_404(db, Assignment, assignment_id, unit_code)
    require_owner(assignment.user_id, current_user)
    file_url = assignment.file_url

    await db.execute(
        delete(AssignmentCompletion).where(AssignmentCompletion.assignment_id == assignment.id)
    )
    await db.delete(assignment)
    await db.commit()
    logger.info("User %s deleted assignment %s", current_user.id, assignment_id)

    if file_url:
        await delete_stored_file(file_url)
    await ranking.refresh_overall_ranks_after_commit(db)
