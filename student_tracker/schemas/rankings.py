"""Leaderboard schemas."""

from datetime import datetime
from typing import Literal

from pydantic import Field, field_validator

from student_tracker.schemas.base import BaseSchema, to_seconds


class RecentCompletionRead(BaseSchema):
    """One of a student's latest completions in the unit."""

    title: str
    completed_at: datetime
    completion_time: float = Field(..., description="Seconds between posting and completion")

    @field_validator("completion_time", mode="before")
    @classmethod
    def completion_time_in_seconds(cls, value: object) -> object:
        return to_seconds(value)


class RankingEntryRead(BaseSchema):
    """A student's position and statistics in a unit leaderboard."""

    user_id: int
    name: str
    profile_image_url: str | None
    position: int
    overall_rank: int | None
    average_completion_time: float = Field(..., description="Mean seconds from posting to completion")
    average_completion_time_label: str
    completed_assignments: int
    badge: Literal["gold", "silver"] | None
    recent_completions: list[RecentCompletionRead]

    @field_validator("average_completion_time", mode="before")
    @classmethod
    def average_completion_time_in_seconds(cls, value: object) -> object:
        return to_seconds(value)
