"""Tracking, ranking and storage services."""

from student_tracker.services.storage import storage_service

__all__ = ["storage_service"]
