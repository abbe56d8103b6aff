"""Unit schemas."""

from pydantic import Field

from student_tracker.schemas.base import BaseSchema


class UnitCreate(BaseSchema):
    """Schema for creating a unit."""

    unit_code: str = Field(..., min_length=1, max_length=32, examples=["MAT 2101"])
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    category: str = Field(..., min_length=1, max_length=100)


class UnitRead(UnitCreate):
    """Schema for reading unit data."""

    id: int


class UnitSummary(UnitRead):
    """Unit with the viewer's count of unread notes, papers and pending assignments."""

    notification_count: int = 0
