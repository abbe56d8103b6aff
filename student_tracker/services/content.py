"""
Unit content listings annotated with the viewer's state.

Each listing runs one query for the items and one for the viewer's
view or completion records in the unit, then joins them in memory.
"""

from datetime import datetime, timezone

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from student_tracker.db.models import (
    Assignment,
    AssignmentCompletion,
    ItemKind,
    Note,
    NoteView,
    PaperView,
    PastPaper,
    Unit,
    User,
)
from student_tracker.schemas import (
    ActivityRead,
    AssignmentRead,
    DashboardStats,
    NoteRead,
    PastPaperRead,
    UnitSummary,
)
from student_tracker.services.completions import (
    completed_assignment_ids,
    overdue_count,
    pending_count,
    upcoming_count,
)
from student_tracker.services.exceptions import NotFoundError
from student_tracker.services.views import unviewed_count, viewed_item_ids


async def get_unit_or_404(db: AsyncSession, unit_code: str) -> Unit:
    """Fetch a unit by code or raise NotFoundError."""
    unit = await db.scalar(select(Unit).where(Unit.unit_code == unit_code))
    if unit is None:
        raise NotFoundError(f"Unit {unit_code} not found")
    return unit


# =============================================================================
# ANNOTATED LISTINGS
# =============================================================================


def note_to_read(
    note: Note, uploaded_by: str, uploader_image_url: str | None, viewed: bool = False
) -> NoteRead:
    return NoteRead(
        id=note.id,
        title=note.title,
        description=note.description,
        file_url=note.file_url,
        unit_code=note.unit_code,
        user_id=note.user_id,
        uploaded_by=uploaded_by,
        uploader_image_url=uploader_image_url,
        created_at=note.created_at,
        viewed=viewed,
    )


def paper_to_read(
    paper: PastPaper, uploaded_by: str, uploader_image_url: str | None, viewed: bool = False
) -> PastPaperRead:
    return PastPaperRead(
        id=paper.id,
        title=paper.title,
        description=paper.description,
        year=paper.year,
        file_url=paper.file_url,
        unit_code=paper.unit_code,
        user_id=paper.user_id,
        uploaded_by=uploaded_by,
        uploader_image_url=uploader_image_url,
        created_at=paper.created_at,
        viewed=viewed,
    )


async def list_notes(db: AsyncSession, unit_code: str, user_id: int) -> list[NoteRead]:
    """Notes in a unit, newest first, each flagged viewed for this user."""
    await get_unit_or_404(db, unit_code)
    result = await db.execute(
        select(Note, User.name, User.profile_image_url)
        .join(User, User.id == Note.user_id)
        .where(Note.unit_code == unit_code)
        .order_by(Note.created_at.desc(), Note.id.desc())
    )
    viewed = await viewed_item_ids(db, user_id, unit_code, ItemKind.NOTE)
    return [
        note_to_read(note, name, image_url, viewed=note.id in viewed)
        for note, name, image_url in result.all()
    ]


async def list_past_papers(db: AsyncSession, unit_code: str, user_id: int) -> list[PastPaperRead]:
    """Past papers in a unit, latest year first, each flagged viewed for this user."""
    await get_unit_or_404(db, unit_code)
    result = await db.execute(
        select(PastPaper, User.name, User.profile_image_url)
        .join(User, User.id == PastPaper.user_id)
        .where(PastPaper.unit_code == unit_code)
        .order_by(PastPaper.year.desc(), PastPaper.created_at.desc(), PastPaper.id.desc())
    )
    viewed = await viewed_item_ids(db, user_id, unit_code, ItemKind.PAPER)
    return [
        paper_to_read(paper, name, image_url, viewed=paper.id in viewed)
        for paper, name, image_url in result.all()
    ]


def assignment_to_read(
    assignment: Assignment, uploaded_by: str, completed_at: datetime | None
) -> AssignmentRead:
    return AssignmentRead(
        id=assignment.id,
        title=assignment.title,
        description=assignment.description,
        deadline=assignment.deadline,
        file_url=assignment.file_url,
        unit_code=assignment.unit_code,
        user_id=assignment.user_id,
        uploaded_by=uploaded_by,
        created_at=assignment.created_at,
        completed=completed_at is not None,
        completed_at=completed_at,
    )


async def list_assignments(db: AsyncSession, unit_code: str, user_id: int) -> list[AssignmentRead]:
    """Assignments in a unit by deadline, each flagged completed for this user."""
    await get_unit_or_404(db, unit_code)
    result = await db.execute(
        select(Assignment, User.name)
        .join(User, User.id == Assignment.user_id)
        .where(Assignment.unit_code == unit_code)
        .order_by(Assignment.deadline.asc().nullslast(), Assignment.id.asc())
    )
    completed = await completed_assignment_ids(db, user_id, unit_code)
    return [
        assignment_to_read(assignment, name, completed.get(assignment.id))
        for assignment, name in result.all()
    ]


# =============================================================================
# UNITS & DASHBOARD
# =============================================================================


def _unread_by_unit(item: type, view: type, item_column, user_id: int):
    return (
        select(item.unit_code, func.count(item.id))
        .outerjoin(view, and_(item_column == item.id, view.user_id == user_id))
        .where(view.id.is_(None))
        .group_by(item.unit_code)
    )


async def list_units(db: AsyncSession, user_id: int) -> list[UnitSummary]:
    """
    Every unit with the user's notification count.

    notification_count = unviewed notes + pending assignments + unviewed papers
    """
    units = (await db.execute(select(Unit).order_by(Unit.unit_code))).scalars().all()

    counts: dict[str, int] = {}
    for query in (
        _unread_by_unit(Note, NoteView, NoteView.note_id, user_id),
        _unread_by_unit(PastPaper, PaperView, PaperView.paper_id, user_id),
        _unread_by_unit(Assignment, AssignmentCompletion, AssignmentCompletion.assignment_id, user_id),
    ):
        for unit_code, count in (await db.execute(query)).all():
            counts[unit_code] = counts.get(unit_code, 0) + count

    return [
        UnitSummary(
            id=unit.id,
            unit_code=unit.unit_code,
            name=unit.name,
            description=unit.description,
            category=unit.category,
            notification_count=counts.get(unit.unit_code, 0),
        )
        for unit in units
    ]


async def dashboard_stats(db: AsyncSession, user: User, now: datetime | None = None) -> DashboardStats:
    """Headline counts across every unit for one user."""
    now = now or datetime.now(timezone.utc)
    return DashboardStats(
        unviewed_notes=await unviewed_count(db, user.id, None, ItemKind.NOTE),
        pending_assignments=await pending_count(db, user.id, None),
        unviewed_past_papers=await unviewed_count(db, user.id, None, ItemKind.PAPER),
        overdue=await overdue_count(db, user.id, now),
        upcoming=await upcoming_count(db, user.id, now),
        rank=user.rank,
    )


async def recent_activity(db: AsyncSession, user_id: int, limit: int = 10) -> list[ActivityRead]:
    """The user's latest completions and views, newest first."""
    sources = (
        (
            "assignment",
            select(Assignment.id, Assignment.title, Assignment.unit_code, AssignmentCompletion.completed_at)
            .select_from(AssignmentCompletion)
            .join(Assignment, Assignment.id == AssignmentCompletion.assignment_id)
            .where(AssignmentCompletion.user_id == user_id)
            .order_by(AssignmentCompletion.completed_at.desc()),
        ),
        (
            "note",
            select(Note.id, Note.title, Note.unit_code, NoteView.viewed_at)
            .select_from(NoteView)
            .join(Note, Note.id == NoteView.note_id)
            .where(NoteView.user_id == user_id)
            .order_by(NoteView.viewed_at.desc()),
        ),
        (
            "pastpaper",
            select(PastPaper.id, PastPaper.title, PastPaper.unit_code, PaperView.viewed_at)
            .select_from(PaperView)
            .join(PastPaper, PastPaper.id == PaperView.paper_id)
            .where(PaperView.user_id == user_id)
            .order_by(PaperView.viewed_at.desc()),
        ),
    )

    activities = []
    for kind, query in sources:
        for item_id, title, unit_code, timestamp in (await db.execute(query.limit(limit))).all():
            activities.append(
                ActivityRead(
                    type=kind,
                    item_id=item_id,
                    title=title,
                    unit_code=unit_code,
                    timestamp=timestamp,
                )
            )
    activities.sort(key=lambda a: a.timestamp, reverse=True)
    return activities[:limit]


async def upcoming_deadlines(
    db: AsyncSession, user_id: int, limit: int = 5, now: datetime | None = None
) -> list[AssignmentRead]:
    """Assignments with the nearest future deadlines, with the user's completion state."""
    now = now or datetime.now(timezone.utc)
    result = await db.execute(
        select(Assignment, User.name, AssignmentCompletion.completed_at)
        .join(User, User.id == Assignment.user_id)
        .outerjoin(
            AssignmentCompletion,
            and_(
                AssignmentCompletion.assignment_id == Assignment.id,
                AssignmentCompletion.user_id == user_id,
            ),
        )
        .where(Assignment.deadline.is_not(None), Assignment.deadline >= now)
        .order_by(Assignment.deadline.asc())
        .limit(limit)
    )
    return [
        assignment_to_read(assignment, name, completed_at)
        for assignment, name, completed_at in result.all()
    ]
