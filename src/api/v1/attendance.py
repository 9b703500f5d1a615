# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance API endpoints.

This module provides endpoints for the attendance ledger:
- POST / - Mark one student for one period
- POST /bulk - Mark a whole session
- GET /students/{student_id}/summary - Attendance aggregate
- PATCH /{record_id} - Correct a record
- DELETE /{record_id} - Remove a record

Domain errors are translated by the handlers in src.api.errors.
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db
from src.api.middleware.rate_limit import RATE_LIMIT_BULK, limiter
from src.domains.attendance import AttendanceService
from src.models.attendance import (
    AttendanceRecordResponse,
    AttendanceSummary,
    BulkMarkRequest,
    BulkMarkResponse,
    MarkAttendanceRequest,
    UpdateAttendanceRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession) -> AttendanceService:
    """Get attendance service instance.

    Args:
        db: Database session.

    Returns:
        Configured AttendanceService instance.
    """
    return AttendanceService(db=db)


@router.post(
    "",
    response_model=AttendanceRecordResponse,
    summary="Mark attendance",
    description="Create or overwrite the record of one student for one period of one day.",
)
async def mark_attendance(
    data: MarkAttendanceRequest,
    db: AsyncSession = Depends(get_db),
) -> AttendanceRecordResponse:
    """Mark attendance.

    Args:
        data: Student, day, period and status.
        db: Database session.

    Returns:
        The stored record.
    """
    service = _get_service(db)
    return await service.mark(**data.model_dump())


@router.post(
    "/bulk",
    response_model=BulkMarkResponse,
    summary="Bulk mark attendance",
    description="Mark many students for one session. Every entry reports its own outcome.",
)
@limiter.limit(RATE_LIMIT_BULK)
async def bulk_mark_attendance(
    request: Request,
    data: BulkMarkRequest,
    db: AsyncSession = Depends(get_db),
) -> BulkMarkResponse:
    """Bulk mark attendance.

    Args:
        request: HTTP request (used by the rate limiter).
        data: Session and entries.
        db: Database session.

    Returns:
        Per-entry outcomes.
    """
    service = _get_service(db)
    return await service.bulk_mark(data)


@router.get(
    "/students/{student_id}/summary",
    response_model=AttendanceSummary,
    summary="Attendance summary",
    description="Counts, percentage and consecutive-absence alerts of a student.",
)
async def get_attendance_summary(
    student_id: str,
    start_date: date | None = Query(None, description="Inclusive lower bound"),
    end_date: date | None = Query(None, description="Inclusive upper bound"),
    db: AsyncSession = Depends(get_db),
) -> AttendanceSummary:
    """Get a student's attendance summary."""
    service = _get_service(db)
    return await service.aggregate(student_id, start_date, end_date)


@router.patch(
    "/{record_id}",
    response_model=AttendanceRecordResponse,
    summary="Update attendance record",
)
async def update_attendance_record(
    record_id: str,
    data: UpdateAttendanceRequest,
    updated_by: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
) -> AttendanceRecordResponse:
    """Correct status, remarks or verification of a record."""
    service = _get_service(db)
    return await service.update_record(record_id, data, updated_by)


@router.delete(
    "/{record_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete attendance record",
)
async def delete_attendance_record(
    record_id: str,
    deleted_by: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
) -> None:
    """Remove a record."""
    service = _get_service(db)
    await service.delete_record(record_id, deleted_by)
