# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Campus structure models: courses, batches and students.

Course and batch rows are maintained by the course-management CRUD layer;
the engine only reads them. On Student the engine owns exactly two columns:

- ``certificate_locked``: written only by the portfolio workflow
  (src.domains.portfolio.certificate).
- ``placement_eligible``: written only by the batch sweep
  (src.domains.eligibility.sweep).
"""

from datetime import date

from sqlalchemy import Boolean, Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, IdMixin, TimestampMixin


class Course(IdMixin, TimestampMixin, Base):
    """A course whose deliverables are portfolio tasks."""

    __tablename__ = "courses"

    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    tasks = relationship("PortfolioTask", back_populates="course", lazy="raise")


class Batch(IdMixin, TimestampMixin, Base):
    """A cohort of students taking one course together."""

    __tablename__ = "batches"

    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="RESTRICT"), nullable=False
    )
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)


class Student(IdMixin, TimestampMixin, Base):
    """The aggregation root eligibility is evaluated for."""

    __tablename__ = "students"
    __table_args__ = (Index("ix_students_batch_active", "batch_id", "is_active"),)

    enrollment_number: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="RESTRICT"), nullable=False
    )
    batch_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("batches.id", ondelete="SET NULL"), nullable=True
    )
    branch_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    certificate_locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    placement_eligible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    @property
    def full_name(self) -> str:
        """First and last name joined."""
        return f"{self.first_name} {self.last_name}".strip()
