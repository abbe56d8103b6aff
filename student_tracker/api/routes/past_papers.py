"""Past paper routes within a unit."""

import logging

from fastapi import APIRouter, status
from sqlalchemy import delete

from student_tracker.api.deps import CurrentUser, DbSession, get_unit_item_or_404, require_owner
from student_tracker.api.routes.files import delete_stored_file
from student_tracker.db.models import ItemKind, PaperView, PastPaper
from student_tracker.schemas import PastPaperCreate, PastPaperRead
from student_tracker.services import content, views

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/units/{unit_code}/pastpapers", tags=["past papers"])


@router.get("", response_model=list[PastPaperRead])
async def list_past_papers(
    unit_code: str,
    current_user: CurrentUser,
    db: DbSession,
) -> list[PastPaperRead]:
    """List a unit's past papers, latest year first, with the viewed flag."""
    return await content.list_past_papers(db, unit_code, current_user.id)


@router.post("", response_model=PastPaperRead, status_code=status.HTTP_201_CREATED)
async def create_past_paper(
    unit_code: str,
    data: PastPaperCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> PastPaperRead:
    """Upload a past paper to a unit."""
    await content.get_unit_or_404(db, unit_code)
    paper = PastPaper(
        unit_code=unit_code,
        user_id=current_user.id,
        **data.model_dump(),
    )
    db.add(paper)
    await db.commit()
    await db.refresh(paper)
    return content.paper_to_read(paper, current_user.name, current_user.profile_image_url)


@router.post("/{paper_id}/view", status_code=status.HTTP_204_NO_CONTENT)
async def mark_past_paper_viewed(
    unit_code: str,
    paper_id: int,
    current_user: CurrentUser,
    db: DbSession,
) -> None:
    """Mark a past paper as viewed by the current user. Repeat calls are no-ops."""
    await get_unit_item_or_404(db, PastPaper, paper_id, unit_code)
    await views.record_view(db, current_user.id, paper_id, ItemKind.PAPER)
    await db.commit()


@router.delete("/{paper_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_past_paper(
    unit_code: str,
    paper_id: int,
    current_user: CurrentUser,
    db: DbSession,
) -> None:
    """Delete a past paper you uploaded, with its view records and stored file."""
    paper = await get_unit_item_or_404(db, PastPaper, paper_id, unit_code)
    require_owner(paper.user_id, current_user)
    file_url = paper.file_url

    await db.execute(delete(PaperView).where(PaperView.paper_id == paper.id))
    await db.delete(paper)
    await db.commit()
    logger.info("User %s deleted past paper %s", current_user.id, paper_id)

    if file_url:
        await delete_stored_file(file_url)
