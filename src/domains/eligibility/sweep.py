# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Batch eligibility sweep.

The only writer of ``Student.placement_eligible``. A sweep evaluates every
active student of a batch and writes the flag only where the fresh decision
differs from the stored one, so a second run over unchanged data writes
nothing. Concurrent sweeps of one batch are last-write-wins.
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.eligibility.service import EligibilityService
from src.domains.exceptions import BatchNotFoundError
from src.infrastructure.database.models import Batch, Student
from src.models.eligibility import SweepResult
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class BatchEligibilitySweep:
    """Persists placement eligibility for a batch.

    Attributes:
        db: Async database session.
        evaluator: Eligibility evaluator sharing the session.
    """

    def __init__(self, db: AsyncSession, evaluator: EligibilityService | None = None) -> None:
        self.db = db
        self.evaluator = evaluator or EligibilityService(db)

    async def sweep_batch(self, batch_id: str) -> SweepResult:
        """Re-evaluate the active students of a batch and store the changes.

        Args:
            batch_id: Batch identifier.

        Returns:
            Number of students evaluated and of flags changed.

        Raises:
            BatchNotFoundError: If the batch does not exist.
        """
        batch = await self.db.get(Batch, batch_id)
        if batch is None:
            raise BatchNotFoundError(batch_id)

        result = await self.db.execute(
            select(Student)
            .where(Student.batch_id == batch_id, Student.is_active.is_(True))
            .order_by(Student.enrollment_number)
            .execution_options(populate_existing=True)
        )
        students = list(result.scalars().all())

        changed: list[str] = []
        for student in students:
            decision = await self.evaluator.evaluate_student(student)
            if decision.placement_eligible == student.placement_eligible:
                continue

            outcome = await self.db.execute(
                update(Student)
                .where(
                    Student.id == student.id,
                    Student.placement_eligible.is_(student.placement_eligible),
                )
                .values(placement_eligible=decision.placement_eligible, updated_at=utc_now())
                .execution_options(synchronize_session=False)
            )
            if outcome.rowcount == 1:
                changed.append(student.id)

        await self.db.commit()

        logger.info(
            "Swept batch eligibility: batch=%s, evaluated=%d, changed=%d",
            batch_id,
            len(students),
            len(changed),
        )

        return SweepResult(
            batch_id=batch_id,
            evaluated=len(students),
            changed=len(changed),
            changed_student_ids=changed,
        )
