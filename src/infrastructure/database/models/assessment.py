# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Test and score models.

Owned by the test-management subsystem. The engine only reads them.
"""

from datetime import date as date_type

from sqlalchemy import Boolean, Date, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, IdMixin, TimestampMixin


class Test(IdMixin, TimestampMixin, Base):
    """A test conducted for a batch."""

    __tablename__ = "tests"
    __test__ = False

    batch_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("batches.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[date_type] = mapped_column(Date, nullable=False)
    total_marks: Mapped[int] = mapped_column(Integer, nullable=False)
    pass_marks: Mapped[int] = mapped_column(Integer, nullable=False)


class TestScore(IdMixin, TimestampMixin, Base):
    """One student's result in one test."""

    __tablename__ = "test_scores"
    __table_args__ = (UniqueConstraint("test_id", "student_id", name="uq_test_scores_test_student"),)
    __test__ = False

    test_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tests.id", ondelete="CASCADE"), nullable=False
    )
    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True
    )
    marks_obtained: Mapped[int] = mapped_column(Integer, nullable=False)
    is_pass: Mapped[bool] = mapped_column(Boolean, nullable=False)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
