"""Assignment schemas."""

from datetime import datetime

from pydantic import Field, field_validator

from student_tracker.schemas.base import BaseSchema, to_seconds


class AssignmentBase(BaseSchema):
    """Base assignment schema."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    deadline: datetime | None = None
    file_url: str | None = None


class AssignmentCreate(AssignmentBase):
    """Schema for creating an assignment."""


class AssignmentRead(AssignmentBase):
    """Assignment as seen by one user, with their completion state."""

    id: int
    unit_code: str
    user_id: int
    uploaded_by: str
    created_at: datetime
    completed: bool = False
    completed_at: datetime | None = None


class CompletionRead(BaseSchema):
    """A stored completion and how long after posting it happened."""

    id: int
    assignment_id: int
    user_id: int
    completed_at: datetime
    completion_time: float = Field(..., description="Seconds between posting and completion")

    @field_validator("completion_time", mode="before")
    @classmethod
    def completion_time_in_seconds(cls, value: object) -> object:
        return to_seconds(value)
