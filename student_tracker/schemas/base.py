"""Base schema configuration."""

from datetime import timedelta

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,  # Enable ORM mode
        str_strip_whitespace=True,
        validate_assignment=True,
    )


def to_seconds(value: object) -> object:
    """Coerce a timedelta to float seconds; leave anything else for pydantic."""
    if isinstance(value, timedelta):
        return value.total_seconds()
    return value
