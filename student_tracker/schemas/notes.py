"""Note schemas."""

from datetime import datetime

from pydantic import Field

from student_tracker.schemas.base import BaseSchema


class NoteBase(BaseSchema):
    """Base note schema."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    file_url: str | None = None  # URL returned by POST /files


class NoteCreate(NoteBase):
    """Schema for creating a note."""


class NoteRead(NoteBase):
    """Note as seen by one user, with their viewed flag."""

    id: int
    unit_code: str
    user_id: int
    uploaded_by: str
    uploader_image_url: str | None = None
    created_at: datetime
    viewed: bool = False
