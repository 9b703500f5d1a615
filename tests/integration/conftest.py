# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest fixtures for database integration tests.

Runs against an in-memory SQLite database by default. Point
TEST_DATABASE_URL at a PostgreSQL database (asyncpg driver) to run the same
tests against the production dialect.
"""

import os
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.infrastructure.database.models import (
    Admission,
    AttendanceRecord,
    Base,
    Batch,
    Course,
    PortfolioSubmission,
    PortfolioTask,
    Student,
    Test,
    TestScore,
)
from src.models.common import AttendanceStatus, SubmissionStatus
from src.utils.datetime import utc_now


@pytest.fixture(scope="session")
def db_url() -> str:
    """Get database URL for tests."""
    return os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


@pytest_asyncio.fixture(scope="function")
async def db_engine(db_url: str):
    """Create async engine with a fresh schema."""
    if db_url.startswith("sqlite"):
        engine = create_async_engine(
            db_url,
            echo=False,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_async_engine(db_url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    """Sessionmaker bound to the test engine."""
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create async session for tests."""
    async with session_factory() as session:
        yield session
        await session.rollback()


class CampusFactory:
    """Inserts campus rows for tests.

    Every helper commits so that the rows are visible to services using
    other sessions on the same engine.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    async def _save(self, obj):
        self.session.add(obj)
        await self.session.commit()
        return obj

    async def course(self, code: str | None = None) -> Course:
        n = self._next()
        return await self._save(Course(code=code or f"C-{n}", name=f"Course {n}"))

    async def batch(self, course: Course, code: str | None = None) -> Batch:
        n = self._next()
        return await self._save(Batch(code=code or f"B-{n}", name=f"Batch {n}", course_id=course.id))

    async def student(
        self,
        course: Course,
        batch: Batch | None = None,
        enrollment_number: str | None = None,
        is_active: bool = True,
        certificate_locked: bool = True,
        placement_eligible: bool = False,
    ) -> Student:
        n = self._next()
        return await self._save(
            Student(
                enrollment_number=enrollment_number or f"S-{n:04d}",
                first_name="Student",
                last_name=str(n),
                course_id=course.id,
                batch_id=batch.id if batch else None,
                is_active=is_active,
                certificate_locked=certificate_locked,
                placement_eligible=placement_eligible,
            )
        )

    async def tasks(self, course: Course, count: int) -> list[PortfolioTask]:
        created = []
        for i in range(count):
            task = PortfolioTask(course_id=course.id, title=f"Task {i + 1}", order=i)
            self.session.add(task)
            created.append(task)
        await self.session.commit()
        return created

    async def submission(
        self,
        student: Student,
        task: PortfolioTask,
        status: SubmissionStatus = SubmissionStatus.PENDING,
        submitted_at: datetime | None = None,
    ) -> PortfolioSubmission:
        return await self._save(
            PortfolioSubmission(
                student_id=student.id,
                task_id=task.id,
                work_url=f"https://work.example.com/{self._next()}",
                status=status,
                submitted_at=submitted_at or utc_now(),
            )
        )

    async def attendance(
        self,
        student: Student,
        statuses: list[AttendanceStatus],
        start: date = date(2025, 1, 1),
    ) -> None:
        """One period per day, consecutive days from ``start``."""
        for offset, status in enumerate(statuses):
            self.session.add(
                AttendanceRecord(
                    student_id=student.id,
                    course_id=student.course_id,
                    batch_id=student.batch_id,
                    date=start + timedelta(days=offset),
                    period=1,
                    status=status,
                )
            )
        await self.session.commit()

    async def scores(self, student: Student, batch: Batch, results: list[bool]) -> None:
        for i, passed in enumerate(results):
            test = Test(
                batch_id=batch.id,
                title=f"Test {self._next()}",
                date=date(2025, 2, 1) + timedelta(days=i),
                total_marks=100,
                pass_marks=40,
            )
            self.session.add(test)
            await self.session.flush()
            self.session.add(
                TestScore(
                    test_id=test.id,
                    student_id=student.id,
                    marks_obtained=80 if passed else 20,
                    is_pass=passed,
                )
            )
        await self.session.commit()

    async def admission(self, student: Student, amount: str, paid: str) -> Admission:
        fee_amount, fee_paid = Decimal(amount), Decimal(paid)
        return await self._save(
            Admission(
                student_id=student.id,
                admission_number=f"ADM-{self._next()}",
                fee_amount=fee_amount,
                fee_paid=fee_paid,
                fee_balance=fee_amount - fee_paid,
            )
        )


@pytest.fixture
def factory(db_session) -> CampusFactory:
    """Campus row factory on the test session."""
    return CampusFactory(db_session)
