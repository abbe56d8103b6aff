"""User schemas."""

from datetime import datetime
from typing import Literal

from pydantic import Field, field_validator

from student_tracker.schemas.base import BaseSchema

UserRoleType = Literal["student", "teacher"]

BCRYPT_MAX_BYTES = 72


class UserCreate(BaseSchema):
    """Schema for registering an account. New accounts are always students."""

    name: str = Field(..., min_length=1, max_length=255)
    admission_number: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=6, max_length=72)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        # bcrypt only accepts 72 bytes, and non-ASCII characters take several
        if len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes when UTF-8 encoded")
        return value


class UserRead(BaseSchema):
    """Schema for reading user data."""

    id: int
    name: str
    admission_number: str
    profile_image_url: str | None
    rank: int | None
    role: UserRoleType
    created_at: datetime


class UserUpdate(BaseSchema):
    """Schema for updating user profile."""

    name: str | None = Field(None, min_length=1, max_length=255)
    profile_image_url: str | None = None
