"""API routes package."""

from student_tracker.api.routes import (
    assignments,
    auth,
    dashboard,
    files,
    notes,
    past_papers,
    search,
    units,
)

__all__ = [
    "assignments",
    "auth",
    "dashboard",
    "files",
    "notes",
    "past_papers",
    "search",
    "units",
]
