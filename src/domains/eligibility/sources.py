# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Read-only views onto data owned by neighbouring subsystems.

Test scores belong to the test-management subsystem and fee figures to
admissions. The evaluator reads them through these small readers and never
writes to either.
"""

from dataclasses import dataclass

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.models import Admission, TestScore
from src.models.common import TestStatus
from src.models.eligibility import FeeSummary


@dataclass(frozen=True)
class TestOutcome:
    """Pass counts over every recorded score of a student."""

    __test__ = False

    passed: int
    total: int

    @property
    def status(self) -> TestStatus:
        """PENDING without scores, PASSED when all passed, PARTIAL otherwise."""
        if self.total == 0:
            return TestStatus.PENDING
        if self.passed == self.total:
            return TestStatus.PASSED
        return TestStatus.PARTIAL


class AssessmentReader:
    """Reads pass/fail state of a student's test scores."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def outcome(self, student_id: str) -> TestOutcome:
        """Count recorded and passed scores of a student."""
        result = await self.db.execute(
            select(
                func.count(TestScore.id),
                func.coalesce(func.sum(case((TestScore.is_pass.is_(True), 1), else_=0)), 0),
            ).where(TestScore.student_id == student_id)
        )
        total, passed = result.one()
        return TestOutcome(passed=int(passed), total=int(total))


class FeeReader:
    """Reads the fee balance recorded at admission."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def summary(self, student_id: str) -> FeeSummary | None:
        """Fee figures of a student, or None when no admission is recorded."""
        result = await self.db.execute(
            select(Admission).where(Admission.student_id == student_id)
        )
        admission = result.scalar_one_or_none()
        if admission is None:
            return None
        return FeeSummary(
            fee_amount=admission.fee_amount,
            fee_paid=admission.fee_paid,
            fee_balance=admission.fee_balance,
        )
