# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Error taxonomy shared by the attendance, portfolio and eligibility domains.

Every error raised by a domain service derives from CampusServiceError and
falls into one category:

- ValidationError: the caller sent input the engine refuses. InvalidStateError
  is the subtype for disallowed workflow transitions.
- NotFoundError: a referenced entity does not exist.
- ConflictError: a uniqueness guarantee was violated where the engine expected
  to settle it itself. Treated as a defect, never as a normal outcome.

The API layer maps the categories onto HTTP statuses in src.api.errors.
"""

from typing import Any


class CampusServiceError(Exception):
    """Base exception for campus domain errors.

    Attributes:
        message: Human-readable reason.
        details: Structured context for the response body.
    """

    error_type = "campus_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(CampusServiceError):
    """Input rejected by the engine."""

    error_type = "validation_error"


class InvalidStateError(ValidationError):
    """Requested transition is not allowed from the current state."""

    error_type = "invalid_state"


class NotFoundError(CampusServiceError):
    """Referenced entity does not exist."""

    error_type = "not_found"


class ConflictError(CampusServiceError):
    """Unique key violated despite an atomic write."""

    error_type = "conflict"


class StudentNotFoundError(NotFoundError):
    """Raised when a student is not found."""

    def __init__(self, student_id: str) -> None:
        super().__init__(f"Student {student_id} not found", {"student_id": student_id})


class BatchNotFoundError(NotFoundError):
    """Raised when a batch is not found."""

    def __init__(self, batch_id: str) -> None:
        super().__init__(f"Batch {batch_id} not found", {"batch_id": batch_id})


class CourseNotFoundError(NotFoundError):
    """Raised when a course is not found."""

    def __init__(self, course_id: str) -> None:
        super().__init__(f"Course {course_id} not found", {"course_id": course_id})


class TaskNotFoundError(NotFoundError):
    """Raised when a portfolio task is not found."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Portfolio task {task_id} not found", {"task_id": task_id})


class SubmissionNotFoundError(NotFoundError):
    """Raised when a portfolio submission is not found."""

    def __init__(self, submission_id: str) -> None:
        super().__init__(
            f"Submission {submission_id} not found", {"submission_id": submission_id}
        )


class AttendanceRecordNotFoundError(NotFoundError):
    """Raised when an attendance record is not found."""

    def __init__(self, record_id: str) -> None:
        super().__init__(f"Attendance record {record_id} not found", {"record_id": record_id})


class UnknownTaskError(ValidationError):
    """Work submitted against a task that does not exist."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Unknown portfolio task {task_id}", {"task_id": task_id})


class AttendanceConflictError(ConflictError):
    """Two rows ended up claiming one (student, day, period) slot."""
