"""Past paper schemas."""

from datetime import datetime

from pydantic import Field

from student_tracker.schemas.base import BaseSchema


class PastPaperBase(BaseSchema):
    """Base past paper schema."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    year: str = Field(..., min_length=4, max_length=16, examples=["2023"])
    file_url: str | None = None


class PastPaperCreate(PastPaperBase):
    """Schema for creating a past paper."""


class PastPaperRead(PastPaperBase):
    """Past paper as seen by one user, with their viewed flag."""

    id: int
    unit_code: str
    user_id: int
    uploaded_by: str
    uploader_image_url: str | None = None
    created_at: datetime
    viewed: bool = False
