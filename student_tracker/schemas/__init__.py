"""Pydantic schemas for API request/response validation."""

from student_tracker.schemas.user import UserCreate, UserRead, UserUpdate
from student_tracker.schemas.auth import LoginRequest, TokenResponse
from student_tracker.schemas.units import UnitCreate, UnitRead, UnitSummary
from student_tracker.schemas.notes import NoteCreate, NoteRead
from student_tracker.schemas.past_papers import PastPaperCreate, PastPaperRead
from student_tracker.schemas.assignments import AssignmentCreate, AssignmentRead, CompletionRead
from student_tracker.schemas.rankings import RankingEntryRead, RecentCompletionRead
from student_tracker.schemas.dashboard import ActivityRead, DashboardStats
from student_tracker.schemas.files import FileUploadResponse
from student_tracker.schemas.search import (
    SearchResponse,
    SearchResultRead,
    SearchSuggestions,
    SearchType,
)

__all__ = [
    # User
    "UserCreate",
    "UserRead",
    "UserUpdate",
    # Auth
    "LoginRequest",
    "TokenResponse",
    # Units
    "UnitCreate",
    "UnitRead",
    "UnitSummary",
    # Notes
    "NoteCreate",
    "NoteRead",
    # Past papers
    "PastPaperCreate",
    "PastPaperRead",
    # Assignments
    "AssignmentCreate",
    "AssignmentRead",
    "CompletionRead",
    # Rankings
    "RankingEntryRead",
    "RecentCompletionRead",
    # Dashboard
    "ActivityRead",
    "DashboardStats",
    # Files
    "FileUploadResponse",
    # Search
    "SearchResponse",
    "SearchResultRead",
    "SearchSuggestions",
    "SearchType",
]
