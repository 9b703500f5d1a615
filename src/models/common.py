# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared enumerations and thresholds.

Every status in the engine is a closed enumeration. Branching on them is
done with ``match`` statements that end in an ``assert_never`` arm, so adding
a member without handling it is caught by the type checker.
"""

from enum import StrEnum

from pydantic import BaseModel, Field

# Eligibility gates. Fixed by campus policy, deliberately not configurable.
ATTENDANCE_THRESHOLD = 75
PORTFOLIO_COMPLETE = 100
CONSECUTIVE_ABSENCE_ALERT = 3

MISSING_ATTENDANCE = "Attendance below 75%"
MISSING_PORTFOLIO = "Portfolio not completed"
MISSING_TESTS = "Tests not passed"


class AttendanceStatus(StrEnum):
    """Status of one student in one period."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    EXCUSED = "EXCUSED"


class SubmissionStatus(StrEnum):
    """Review state of a portfolio submission."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    @property
    def is_terminal(self) -> bool:
        """APPROVED and REJECTED cannot transition further."""
        return self is not SubmissionStatus.PENDING


class TaskProgress(StrEnum):
    """Per-task view of a student's portfolio."""

    NOT_STARTED = "NOT_STARTED"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class TestStatus(StrEnum):
    """Aggregate pass state of a student's recorded tests."""

    __test__ = False

    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    PASSED = "PASSED"


class EligibilityStatus(StrEnum):
    """Display status of an eligibility gate."""

    ELIGIBLE = "ELIGIBLE"
    NOT_ELIGIBLE = "NOT_ELIGIBLE"


def percent(part: int, whole: int) -> int:
    """Integer percentage rounded half up, 0 when whole is 0.

    Args:
        part: Numerator count.
        whole: Denominator count.

    Returns:
        round(part / whole * 100) with .5 rounded up.
    """
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)


class ErrorBody(BaseModel):
    """Error payload of a failed request."""

    type: str = Field(description="Error category, e.g. validation_error")
    message: str = Field(description="Human-readable reason")
    details: dict = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Uniform failure response."""

    success: bool = False
    error: ErrorBody
