"""Authentication schemas."""

from pydantic import Field

from student_tracker.schemas.base import BaseSchema


class LoginRequest(BaseSchema):
    """Request schema for password login."""

    admission_number: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseSchema):
    """Response schema for successful authentication."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token expiry in seconds")
