# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Portfolio task and submission models."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, IdMixin, TimestampMixin, enum_column
from src.models.common import SubmissionStatus
from src.utils.datetime import utc_now


class PortfolioTask(IdMixin, TimestampMixin, Base):
    """A deliverable every student of a course must get approved."""

    __tablename__ = "portfolio_tasks"

    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # "order" is reserved in SQL
    order: Mapped[int] = mapped_column("sort_order", Integer, nullable=False, default=0)

    course = relationship("Course", back_populates="tasks", lazy="raise")


class PortfolioSubmission(IdMixin, Base):
    """One upload of work for a task.

    A student may hold several submissions per task; rejected ones stay as
    history next to the resubmission.
    """

    __tablename__ = "portfolio_submissions"
    __table_args__ = (
        Index("ix_submissions_student_task_status", "student_id", "task_id", "status"),
    )

    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("students.id", ondelete="CASCADE"), nullable=False
    )
    task_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("portfolio_tasks.id", ondelete="CASCADE"), nullable=False
    )
    work_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[SubmissionStatus] = mapped_column(
        enum_column(SubmissionStatus, "submission_status"),
        nullable=False,
        default=SubmissionStatus.PENDING,
    )
    reviewer_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    # Rejections of this task by this student up to and including this one.
    rejection_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
