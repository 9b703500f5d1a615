# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Portfolio API endpoints.

Task endpoints:
- POST /tasks - Define a task
- GET /courses/{course_id}/tasks - List a course's tasks
- PATCH /tasks/{task_id} - Update a task

Submission endpoints:
- POST /submissions - Submit work
- POST /submissions/{submission_id}/review - Approve or reject

Views:
- GET /students/{student_id} - A student's portfolio
- GET /batches/{batch_id}/stats - Batch completion overview
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db
from src.domains.portfolio import PortfolioService
from src.models.portfolio import (
    BatchPortfolioStatsResponse,
    CreateTaskRequest,
    ReviewResponse,
    ReviewSubmissionRequest,
    StudentPortfolioResponse,
    SubmissionResponse,
    SubmitWorkRequest,
    TaskResponse,
    UpdateTaskRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession) -> PortfolioService:
    """Get portfolio service instance.

    Args:
        db: Database session.

    Returns:
        Configured PortfolioService instance.
    """
    return PortfolioService(db=db)


@router.post(
    "/tasks",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create portfolio task",
)
async def create_task(
    data: CreateTaskRequest,
    db: AsyncSession = Depends(get_db),
) -> TaskResponse:
    """Define a new task for a course."""
    return await _get_service(db).create_task(data)


@router.get(
    "/courses/{course_id}/tasks",
    response_model=list[TaskResponse],
    summary="List course tasks",
)
async def list_course_tasks(
    course_id: str,
    db: AsyncSession = Depends(get_db),
) -> list[TaskResponse]:
    """List the tasks of a course in display order."""
    return await _get_service(db).list_course_tasks(course_id)


@router.patch(
    "/tasks/{task_id}",
    response_model=TaskResponse,
    summary="Update portfolio task",
)
async def update_task(
    task_id: str,
    data: UpdateTaskRequest,
    db: AsyncSession = Depends(get_db),
) -> TaskResponse:
    """Update a task definition."""
    return await _get_service(db).update_task(task_id, data)


@router.post(
    "/submissions",
    response_model=SubmissionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit portfolio work",
    description="Creates a new PENDING submission. Earlier submissions are kept as history.",
)
async def submit_work(
    data: SubmitWorkRequest,
    db: AsyncSession = Depends(get_db),
) -> SubmissionResponse:
    """Submit work for a task.

    Args:
        data: Student, task and work URL.
        db: Database session.

    Returns:
        The new submission.
    """
    return await _get_service(db).submit_work(data)


@router.post(
    "/submissions/{submission_id}/review",
    response_model=ReviewResponse,
    summary="Review portfolio submission",
    description=(
        "Approve or reject a pending submission. Approving the last open task "
        "of a course unlocks the student's certificate."
    ),
)
async def review_submission(
    submission_id: str,
    data: ReviewSubmissionRequest,
    db: AsyncSession = Depends(get_db),
) -> ReviewResponse:
    """Review a submission.

    Args:
        submission_id: Submission identifier.
        data: Decision, remarks and reviewer.
        db: Database session.

    Returns:
        Reviewed submission and whether the certificate was unlocked.
    """
    return await _get_service(db).review_submission(submission_id, data)


@router.get(
    "/students/{student_id}",
    response_model=StudentPortfolioResponse,
    summary="Student portfolio",
)
async def get_student_portfolio(
    student_id: str,
    db: AsyncSession = Depends(get_db),
) -> StudentPortfolioResponse:
    """Get every task of the student's course with its submission state."""
    return await _get_service(db).get_student_portfolio(student_id)


@router.get(
    "/batches/{batch_id}/stats",
    response_model=BatchPortfolioStatsResponse,
    summary="Batch portfolio stats",
)
async def get_batch_portfolio_stats(
    batch_id: str,
    db: AsyncSession = Depends(get_db),
) -> BatchPortfolioStatsResponse:
    """Get completion, pending reviews and delayed students of a batch."""
    return await _get_service(db).get_batch_portfolio_stats(batch_id)
