"""View tracking for notes and past papers.

A view record exists once per (item, user); its presence is the whole
"viewed" signal, so repeated views are silent no-ops.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import and_, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from student_tracker.db.models import ItemKind, Note, NoteView, PaperView, PastPaper
from student_tracker.db.queries import insert_if_absent
from student_tracker.services.exceptions import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _ViewTarget:
    item_model: type
    view_model: type
    item_column: str
    label: str


_TARGETS = {
    ItemKind.NOTE: _ViewTarget(Note, NoteView, "note_id", "Note"),
    ItemKind.PAPER: _ViewTarget(PastPaper, PaperView, "paper_id", "Past paper"),
}


def _target(item_kind: ItemKind | str) -> _ViewTarget:
    try:
        return _TARGETS[ItemKind(item_kind)]
    except ValueError:
        raise ValidationError(f"Unknown item kind: {item_kind!r}") from None


async def record_view(
    db: AsyncSession,
    user_id: int,
    item_id: int,
    item_kind: ItemKind | str,
) -> None:
    """Mark an item as viewed by a user. Idempotent."""
    target = _target(item_kind)
    item = await db.get(target.item_model, item_id)
    if item is None:
        raise NotFoundError(f"{target.label} {item_id} not found")

    try:
        await insert_if_absent(
            db,
            target.view_model,
            {target.item_column: item_id, "user_id": user_id},
            [target.item_column, "user_id"],
        )
    except ConflictError:
        logger.debug("%s %s already viewed by user %s", target.label, item_id, user_id)
        return
    logger.info("User %s viewed %s %s", user_id, target.label.lower(), item_id)


async def is_viewed(
    db: AsyncSession,
    user_id: int,
    item_id: int,
    item_kind: ItemKind | str,
) -> bool:
    """Return True if the user has a view record for the item."""
    target = _target(item_kind)
    view = target.view_model
    result = await db.execute(
        select(
            exists().where(
                getattr(view, target.item_column) == item_id,
                view.user_id == user_id,
            )
        )
    )
    return bool(result.scalar())


async def unviewed_count(
    db: AsyncSession,
    user_id: int,
    unit_code: str | None,
    item_kind: ItemKind | str,
) -> int:
    """Count items in the unit the user has never opened.

    Items added after the user's last visit have no record yet, so they
    count as unviewed. A unit_code of None counts across every unit.
    """
    target = _target(item_kind)
    item, view = target.item_model, target.view_model
    query = (
        select(func.count(item.id))
        .select_from(item)
        .outerjoin(
            view,
            and_(getattr(view, target.item_column) == item.id, view.user_id == user_id),
        )
        .where(view.id.is_(None))
    )
    if unit_code is not None:
        query = query.where(item.unit_code == unit_code)
    result = await db.execute(query)
    return result.scalar_one()


async def viewed_item_ids(
    db: AsyncSession,
    user_id: int,
    unit_code: str,
    item_kind: ItemKind | str,
) -> set[int]:
    """Ids of every item in the unit the user has viewed, in one query."""
    target = _target(item_kind)
    item, view = target.item_model, target.view_model
    item_column = getattr(view, target.item_column)
    result = await db.execute(
        select(item_column)
        .join(item, item.id == item_column)
        .where(view.user_id == user_id, item.unit_code == unit_code)
    )
    return set(result.scalars())
