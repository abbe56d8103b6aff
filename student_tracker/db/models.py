"""
SQLAlchemy 2.0 Models for Student Tracker.

Uses modern declarative syntax with Mapped[] type annotations.
Content items (notes, assignments, past papers) hang off a unit by its
unit code. View and completion records are unique per (item, user) at the
database level so duplicate submissions collapse into one row.
"""

from datetime import datetime
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from student_tracker.db.base import Base, UTCDateTime, utcnow


# =============================================================================
# ENUMS
# =============================================================================


class UserRole(str, PyEnum):
    """Role of an account."""

    STUDENT = "student"
    TEACHER = "teacher"


class ItemKind(str, PyEnum):
    """Kind of viewable content item."""

    NOTE = "note"
    PAPER = "paper"


# =============================================================================
# MODELS
# =============================================================================


class User(Base):
    """
    Student or teacher account.

    `rank` is a cached overall position refreshed after completions; the
    per-unit leaderboard never reads it as ground truth.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('student', 'teacher')", name="valid_role"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    admission_number: Mapped[str] = mapped_column(
        String(64), unique=True, index=True, nullable=False
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    profile_image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    rank: Mapped[Optional[int]] = mapped_column(nullable=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=UserRole.STUDENT.value)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False
    )

    # Relationships
    notes: Mapped[list["Note"]] = relationship("Note", back_populates="user")
    assignments: Mapped[list["Assignment"]] = relationship("Assignment", back_populates="user")
    past_papers: Mapped[list["PastPaper"]] = relationship("PastPaper", back_populates="user")


class Unit(Base):
    """A course unit, identified by its unique code (e.g. "MAT 2101")."""

    __tablename__ = "units"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    unit_code: Mapped[str] = mapped_column(String(32), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(100), nullable=False)  # Mathematics, Statistics, ...


class Note(Base):
    """Lecture note uploaded to a unit."""

    __tablename__ = "notes"
    __table_args__ = (
        Index("idx_notes_unit_created_at", "unit_code", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    file_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    unit_code: Mapped[str] = mapped_column(
        String(32), ForeignKey("units.unit_code", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="notes")
    views: Mapped[list["NoteView"]] = relationship(
        "NoteView", back_populates="note", cascade="all, delete-orphan", passive_deletes=True
    )


class PastPaper(Base):
    """Past examination paper uploaded to a unit."""

    __tablename__ = "past_papers"
    __table_args__ = (
        Index("idx_past_papers_unit_year", "unit_code", "year"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    year: Mapped[str] = mapped_column(String(16), nullable=False)
    file_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    unit_code: Mapped[str] = mapped_column(
        String(32), ForeignKey("units.unit_code", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="past_papers")
    views: Mapped[list["PaperView"]] = relationship(
        "PaperView", back_populates="paper", cascade="all, delete-orphan", passive_deletes=True
    )


class Assignment(Base):
    """
    Assignment posted to a unit.

    `created_at` is the posting time that completion durations are
    measured from.
    """

    __tablename__ = "assignments"
    __table_args__ = (
        Index("idx_assignments_unit_deadline", "unit_code", "deadline"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    deadline: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    file_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    unit_code: Mapped[str] = mapped_column(
        String(32), ForeignKey("units.unit_code", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="assignments")
    completions: Mapped[list["AssignmentCompletion"]] = relationship(
        "AssignmentCompletion",
        back_populates="assignment",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class NoteView(Base):
    """A user has opened a note. Existence means "viewed"."""

    __tablename__ = "note_views"
    __table_args__ = (
        UniqueConstraint("note_id", "user_id", name="unique_note_view"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    note_id: Mapped[int] = mapped_column(
        ForeignKey("notes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    viewed_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False
    )

    note: Mapped["Note"] = relationship("Note", back_populates="views")


class PaperView(Base):
    """A user has opened a past paper. Existence means "viewed"."""

    __tablename__ = "paper_views"
    __table_args__ = (
        UniqueConstraint("paper_id", "user_id", name="unique_paper_view"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    paper_id: Mapped[int] = mapped_column(
        ForeignKey("past_papers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    viewed_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False
    )

    paper: Mapped["PastPaper"] = relationship("PastPaper", back_populates="views")


class AssignmentCompletion(Base):
    """
    First completion of an assignment by a user.

    completed_at is never updated; repeat submissions keep the original row.
    """

    __tablename__ = "assignment_completions"
    __table_args__ = (
        UniqueConstraint("assignment_id", "user_id", name="unique_assignment_completion"),
        Index("idx_assignment_completions_completed_at", "completed_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    assignment_id: Mapped[int] = mapped_column(
        ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    completed_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False
    )

    assignment: Mapped["Assignment"] = relationship("Assignment", back_populates="completions")


class SearchQuery(Base):
    """A content search a user ran, kept to rank query suggestions."""

    __tablename__ = "search_queries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    query: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    result_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False
    )
