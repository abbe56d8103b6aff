"""File upload schemas."""

from student_tracker.schemas.base import BaseSchema


class FileUploadResponse(BaseSchema):
    """Where an uploaded file can be fetched from."""

    url: str
    filename: str
    content_type: str
    size: int
