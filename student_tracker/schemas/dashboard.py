"""Dashboard schemas."""

from datetime import datetime
from typing import Literal

from student_tracker.schemas.base import BaseSchema


class DashboardStats(BaseSchema):
    """Headline counts for the signed-in user."""

    unviewed_notes: int
    pending_assignments: int
    unviewed_past_papers: int
    overdue: int
    upcoming: int
    rank: int | None


class ActivityRead(BaseSchema):
    """A completion or view by the user, newest first in listings."""

    type: Literal["assignment", "note", "pastpaper"]
    item_id: int
    title: str
    unit_code: str
    timestamp: datetime
