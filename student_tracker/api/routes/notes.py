"""Note routes within a unit."""

import logging

from fastapi import APIRouter, status
from sqlalchemy import delete

from student_tracker.api.deps import CurrentUser, DbSession, get_unit_item_or_404, require_owner
from student_tracker.api.routes.files import delete_stored_file
from student_tracker.db.models import ItemKind, Note, NoteView
from student_tracker.schemas import NoteCreate, NoteRead
from student_tracker.services import content, views

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/units/{unit_code}/notes", tags=["notes"])


@router.get("", response_model=list[NoteRead])
async def list_notes(
    unit_code: str,
    current_user: CurrentUser,
    db: DbSession,
) -> list[NoteRead]:
    """List a unit's notes, newest first, with the current user's viewed flag."""
    return await content.list_notes(db, unit_code, current_user.id)


@router.post("", response_model=NoteRead, status_code=status.HTTP_201_CREATED)
async def create_note(
    unit_code: str,
    data: NoteCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> NoteRead:
    """Upload a note to a unit."""
    await content.get_unit_or_404(db, unit_code)
    note = Note(
        unit_code=unit_code,
        user_id=current_user.id,  # From auth, NEVER from request
        **data.model_dump(),
    )
    db.add(note)
    await db.commit()
    await db.refresh(note)
    return content.note_to_read(note, current_user.name, current_user.profile_image_url)


@router.post("/{note_id}/view", status_code=status.HTTP_204_NO_CONTENT)
async def mark_note_viewed(
    unit_code: str,
    note_id: int,
    current_user: CurrentUser,
    db: DbSession,
) -> None:
    """Mark a note as viewed by the current user. Repeat calls are no-ops."""
    await get_unit_item_or_404(db, Note, note_id, unit_code)
    await views.record_view(db, current_user.id, note_id, ItemKind.NOTE)
    await db.commit()


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(
    unit_code: str,
    note_id: int,
    current_user: CurrentUser,
    db: DbSession,
) -> None:
    """Delete a note you uploaded, with its view records and stored file."""
    note = await get_unit_item_or_404(db, Note, note_id, unit_code)
    require_owner(note.user_id, current_user)
    file_url = note.file_url

    await db.execute(delete(NoteView).where(NoteView.note_id == note.id))
    await db.delete(note)
    await db.commit()
    logger.info("User %s deleted note %s", current_user.id, note_id)

    if file_url:
        await delete_stored_file(file_url)
