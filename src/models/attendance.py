# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance request and response models."""

from datetime import date as date_type
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.common import AttendanceStatus, EligibilityStatus


class MarkAttendanceRequest(BaseModel):
    """Request to mark one student for one period."""

    student_id: str = Field(description="Student being marked")
    course_id: str | None = Field(
        default=None, description="Course of the session, defaults to the student's course"
    )
    date: datetime | date_type = Field(
        description="Day of the session; datetimes are reduced to the campus calendar day"
    )
    period: int = Field(default=1, ge=1, description="Period of the day, starting at 1")
    status: AttendanceStatus
    remarks: str | None = Field(default=None, max_length=1000)
    trainer_id: str | None = Field(default=None, description="Trainer recording the mark")
    check_in_at: datetime | None = None
    check_out_at: datetime | None = None
    is_verified: bool | None = Field(
        default=None, description="Verification flag, None keeps the stored value"
    )


class BulkAttendanceEntry(BaseModel):
    """One slot of a bulk marking request.

    Period and status are validated per entry by the service so that one
    bad entry is reported without rejecting the whole request.
    """

    student_id: str
    period: int = 1
    status: str
    remarks: str | None = None


class BulkMarkRequest(BaseModel):
    """Mark a whole session at once."""

    course_id: str
    date: datetime | date_type
    trainer_id: str | None = None
    records: list[BulkAttendanceEntry] = Field(min_length=1)


class UpdateAttendanceRequest(BaseModel):
    """Administrative correction of an existing record."""

    status: AttendanceStatus | None = None
    remarks: str | None = Field(default=None, max_length=1000)
    is_verified: bool | None = None


class AttendanceRecordResponse(BaseModel):
    """Stored attendance record."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    course_id: str
    batch_id: str | None = None
    date: date_type
    period: int
    status: AttendanceStatus
    remarks: str | None = None
    trainer_id: str | None = None
    check_in_at: datetime | None = None
    check_out_at: datetime | None = None
    is_verified: bool = False
    created_at: datetime
    updated_at: datetime


class BulkMarkResult(BaseModel):
    """Outcome of one bulk entry."""

    student_id: str
    period: int
    success: bool
    record_id: str | None = None
    error_type: str | None = None
    reason: str | None = None


class BulkMarkResponse(BaseModel):
    """Per-slot outcomes of a bulk marking request."""

    results: list[BulkMarkResult]
    total_marked: int
    total_failed: int


class AttendanceSummary(BaseModel):
    """Aggregate attendance of a student over a date range."""

    student_id: str
    start_date: date_type | None = None
    end_date: date_type | None = None
    total_periods: int
    present_count: int
    absent_count: int
    late_count: int
    excused_count: int
    percentage: int = Field(ge=0, le=100)
    eligibility_status: EligibilityStatus
    max_consecutive_absences: int
    alerts: list[str] = Field(default_factory=list)
