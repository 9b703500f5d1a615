# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Certificate unlock cascade.

This module is the only writer of ``Student.certificate_locked``. The flag
only ever moves from locked to unlocked, through a conditional UPDATE, so
repeated or concurrent approvals flip it at most once.
"""

import logging

from sqlalchemy import distinct, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.models import PortfolioSubmission, PortfolioTask, Student
from src.models.common import SubmissionStatus
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


async def course_task_count(db: AsyncSession, course_id: str) -> int:
    """Number of tasks currently defined for a course."""
    result = await db.execute(
        select(func.count(PortfolioTask.id)).where(PortfolioTask.course_id == course_id)
    )
    return result.scalar_one()


async def approved_task_count(db: AsyncSession, student_id: str, course_id: str) -> int:
    """Distinct tasks of a course with at least one approved submission by the student."""
    result = await db.execute(
        select(func.count(distinct(PortfolioSubmission.task_id)))
        .join(PortfolioTask, PortfolioTask.id == PortfolioSubmission.task_id)
        .where(
            PortfolioSubmission.student_id == student_id,
            PortfolioSubmission.status == SubmissionStatus.APPROVED,
            PortfolioTask.course_id == course_id,
        )
    )
    return result.scalar_one()


async def unlock_certificate_if_complete(
    db: AsyncSession,
    student_id: str,
    course_id: str,
) -> bool:
    """Unlock the student's certificate when every course task is approved.

    Counts are recomputed from storage on every call. A course without
    tasks never unlocks. The caller owns the transaction.

    The student row is locked before counting, so concurrent approvals for
    one student run their checks one after another and the last of them
    sees every committed approval.

    Args:
        db: Session of the transaction that approved the submission.
        student_id: Student whose portfolio is checked.
        course_id: Course of the approved task.

    Returns:
        True if this call moved the flag from locked to unlocked.
    """
    await db.execute(select(Student.id).where(Student.id == student_id).with_for_update())

    total = await course_task_count(db, course_id)
    if total == 0:
        return False

    approved = await approved_task_count(db, student_id, course_id)
    if approved < total:
        logger.debug(
            "Portfolio incomplete: student=%s, course=%s, approved=%d/%d",
            student_id,
            course_id,
            approved,
            total,
        )
        return False

    result = await db.execute(
        update(Student)
        .where(Student.id == student_id, Student.certificate_locked.is_(True))
        .values(certificate_locked=False, updated_at=utc_now())
        .execution_options(synchronize_session=False)
    )
    unlocked = result.rowcount == 1

    if unlocked:
        logger.info(
            "Certificate unlocked: student=%s, course=%s, tasks=%d",
            student_id,
            course_id,
            total,
        )

    return unlocked
