# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Eligibility API endpoints.

- GET /students/{student_id} - Evaluate a student
- POST /batches/{batch_id}/sweep - Persist placement eligibility for a batch
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db
from src.api.middleware.rate_limit import RATE_LIMIT_EXPENSIVE, limiter
from src.domains.eligibility import BatchEligibilitySweep, EligibilityService
from src.models.eligibility import EligibilityResult, SweepResult

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/students/{student_id}",
    response_model=EligibilityResult,
    summary="Student eligibility",
    description="Certificate and placement eligibility, computed on every call.",
)
async def get_student_eligibility(
    student_id: str,
    db: AsyncSession = Depends(get_db),
) -> EligibilityResult:
    """Evaluate a student's eligibility.

    Args:
        student_id: Student identifier.
        db: Database session.

    Returns:
        Freshly computed eligibility with missing requirements.
    """
    service = EligibilityService(db=db)
    return await service.evaluate(student_id)


@router.post(
    "/batches/{batch_id}/sweep",
    response_model=SweepResult,
    summary="Sweep batch eligibility",
    description="Re-evaluate every active student of a batch and store changed placement flags.",
)
@limiter.limit(RATE_LIMIT_EXPENSIVE)
async def sweep_batch_eligibility(
    request: Request,
    batch_id: str,
    db: AsyncSession = Depends(get_db),
) -> SweepResult:
    """Run the batch eligibility sweep.

    Args:
        request: HTTP request (used by the rate limiter).
        batch_id: Batch identifier.
        db: Database session.

    Returns:
        Students evaluated and flags changed.
    """
    sweep = BatchEligibilitySweep(db=db)
    return await sweep.sweep_batch(batch_id)
