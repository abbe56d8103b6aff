"""Content search schemas."""

from typing import Literal

from student_tracker.schemas.base import BaseSchema

SearchType = Literal["all", "notes", "assignments", "pastpapers"]


class SearchResultRead(BaseSchema):
    """A note, assignment or past paper whose title matched."""

    id: int
    type: Literal["note", "assignment", "pastpaper"]
    title: str
    unit_code: str
    url: str | None = None


class SearchResponse(BaseSchema):
    results: list[SearchResultRead]


class SearchSuggestions(BaseSchema):
    """Earlier queries starting with the typed prefix, most frequent first."""

    suggestions: list[str]
