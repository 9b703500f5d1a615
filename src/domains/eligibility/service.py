# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Eligibility evaluator.

Certificate eligibility is the conjunction of three gates:

- attendance percentage of at least 75
- every task of the student's course approved
- every recorded test passed

Placement eligibility additionally requires the certificate to be unlocked
by the portfolio workflow. Nothing here is written back; the result is
recomputed on every call.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.attendance.service import AttendanceService, summarize
from src.domains.eligibility.sources import AssessmentReader, FeeReader, TestOutcome
from src.domains.exceptions import StudentNotFoundError
from src.domains.portfolio.certificate import approved_task_count, course_task_count
from src.infrastructure.database.models import Student
from src.models.common import (
    ATTENDANCE_THRESHOLD,
    MISSING_ATTENDANCE,
    MISSING_PORTFOLIO,
    MISSING_TESTS,
    PORTFOLIO_COMPLETE,
    TestStatus,
    percent,
)
from src.models.eligibility import EligibilityResult, FeeSummary

logger = logging.getLogger(__name__)


def compose_result(
    student: Student,
    attendance_percentage: int,
    approved_tasks: int,
    total_tasks: int,
    tests: TestOutcome,
    fee: FeeSummary | None = None,
) -> EligibilityResult:
    """Combine the gate inputs into an eligibility decision.

    Args:
        student: Student row; supplies the two stored flags.
        attendance_percentage: Rounded attendance percentage.
        approved_tasks: Distinct course tasks with an approved submission.
        total_tasks: Tasks currently defined for the course.
        tests: Recorded test outcome.
        fee: Fee figures for display.

    Returns:
        The decision with one missing-requirement entry per failed gate.
    """
    portfolio_percentage = percent(approved_tasks, total_tasks)

    attendance_eligible = attendance_percentage >= ATTENDANCE_THRESHOLD
    portfolio_complete = portfolio_percentage == PORTFOLIO_COMPLETE
    tests_passed = tests.status is TestStatus.PASSED

    missing: list[str] = []
    if not attendance_eligible:
        missing.append(MISSING_ATTENDANCE)
    if not portfolio_complete:
        missing.append(MISSING_PORTFOLIO)
    if not tests_passed:
        missing.append(MISSING_TESTS)

    certificate_eligible = attendance_eligible and portfolio_complete and tests_passed

    return EligibilityResult(
        student_id=student.id,
        attendance_percentage=attendance_percentage,
        attendance_eligible=attendance_eligible,
        portfolio_percentage=portfolio_percentage,
        portfolio_complete=portfolio_complete,
        approved_tasks=approved_tasks,
        total_tasks=total_tasks,
        test_status=tests.status,
        tests_passed=tests.passed,
        tests_total=tests.total,
        certificate_locked=student.certificate_locked,
        certificate_eligible=certificate_eligible,
        placement_eligible=certificate_eligible and not student.certificate_locked,
        stored_placement_eligible=student.placement_eligible,
        missing_requirements=missing,
        fee=fee,
    )


class EligibilityService:
    """Computes certificate and placement eligibility on read.

    Attributes:
        db: Async database session.
        assessments: Reader for test scores.
        fees: Reader for fee figures.
    """

    def __init__(
        self,
        db: AsyncSession,
        assessments: AssessmentReader | None = None,
        fees: FeeReader | None = None,
    ) -> None:
        """Initialize eligibility service.

        Args:
            db: Async database session.
            assessments: Test score reader, defaults to one on the same session.
            fees: Fee reader, defaults to one on the same session.
        """
        self.db = db
        self.assessments = assessments or AssessmentReader(db)
        self.fees = fees or FeeReader(db)
        self._attendance = AttendanceService(db)

    async def evaluate(self, student_id: str) -> EligibilityResult:
        """Evaluate a student's certificate and placement eligibility.

        Args:
            student_id: Student identifier.

        Returns:
            Freshly computed eligibility.

        Raises:
            StudentNotFoundError: If the student does not exist.
        """
        student = await self._get_student(student_id)
        return await self.evaluate_student(student)

    async def evaluate_student(self, student: Student) -> EligibilityResult:
        """Evaluate an already loaded student."""
        records = await self._attendance.list_records(student.id)
        attendance = summarize(student.id, records)

        total = await course_task_count(self.db, student.course_id)
        approved = await approved_task_count(self.db, student.id, student.course_id)
        tests = await self.assessments.outcome(student.id)
        fee = await self.fees.summary(student.id)

        result = compose_result(
            student,
            attendance_percentage=attendance.percentage,
            approved_tasks=approved,
            total_tasks=total,
            tests=tests,
            fee=fee,
        )

        logger.debug(
            "Evaluated eligibility: student=%s, certificate=%s, placement=%s, missing=%s",
            student.id,
            result.certificate_eligible,
            result.placement_eligible,
            result.missing_requirements,
        )

        return result

    async def _get_student(self, student_id: str) -> Student:
        """Get student by ID.

        Raises:
            StudentNotFoundError: If not found.
        """
        result = await self.db.execute(
            select(Student)
            .where(Student.id == student_id)
            .execution_options(populate_existing=True)
        )
        student = result.scalar_one_or_none()

        if not student:
            raise StudentNotFoundError(student_id)

        return student
