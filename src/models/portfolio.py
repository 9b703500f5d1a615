# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Portfolio task, submission and review models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.common import SubmissionStatus, TaskProgress


class CreateTaskRequest(BaseModel):
    """Define a new deliverable for a course."""

    course_id: str
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    order: int = Field(default=0, ge=0)


class UpdateTaskRequest(BaseModel):
    """Partial update of a task. Unset fields are left untouched."""

    course_id: str | None = None
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    order: int | None = Field(default=None, ge=0)


class TaskResponse(BaseModel):
    """Portfolio task."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    course_id: str
    title: str
    description: str | None = None
    order: int
    created_at: datetime
    updated_at: datetime


class SubmitWorkRequest(BaseModel):
    """Upload of work for a task."""

    student_id: str
    task_id: str
    work_url: str = Field(max_length=1024)
    remarks: str | None = None


class ReviewSubmissionRequest(BaseModel):
    """Reviewer decision on a pending submission.

    ``status`` is kept as a plain string; anything other than APPROVED or
    REJECTED is refused by the workflow as an invalid transition.
    """

    status: str
    remarks: str | None = None
    reviewer_id: str | None = None


class SubmissionResponse(BaseModel):
    """Stored submission."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    task_id: str
    work_url: str
    remarks: str | None = None
    status: SubmissionStatus
    reviewer_id: str | None = None
    rejection_count: int = 0
    submitted_at: datetime
    reviewed_at: datetime | None = None


class ReviewResponse(BaseModel):
    """Reviewed submission and whether the review unlocked the certificate."""

    submission: SubmissionResponse
    certificate_unlocked: bool = False


class TaskProgressItem(BaseModel):
    """One task of a student's portfolio with the submission that represents it."""

    task_id: str
    title: str
    description: str | None = None
    order: int
    status: TaskProgress
    submission: SubmissionResponse | None = None
    rejection_count: int = Field(default=0, description="Rejected submissions of this task")


class StudentPortfolioResponse(BaseModel):
    """A student's progress over every task of their course."""

    student_id: str
    course_id: str
    tasks: list[TaskProgressItem]
    total_tasks: int
    approved_tasks: int
    pending_tasks: int
    rejected_tasks: int
    completion_rate: int
    certificate_locked: bool


class StudentPortfolioStats(BaseModel):
    """Per-student row of the batch portfolio overview."""

    student_id: str
    student_name: str
    enrollment_number: str
    approved_tasks: int
    total_tasks: int
    pending_review: int
    completion_rate: int
    last_upload_at: datetime | None = None
    delayed: bool
    certificate_locked: bool
    placement_eligible: bool


class BatchPortfolioStatsResponse(BaseModel):
    """Portfolio overview of a batch."""

    batch_id: str
    total_tasks: int
    students: list[StudentPortfolioStats]
    total_students: int
    completed_students: int
    students_pending_review: int
    students_delayed: int
    overall_completion_rate: int
