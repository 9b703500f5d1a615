# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance ledger model."""

from datetime import date as date_type
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, IdMixin, TimestampMixin, enum_column
from src.models.common import AttendanceStatus

ATTENDANCE_KEY = ("student_id", "date", "period")


class AttendanceRecord(IdMixin, TimestampMixin, Base):
    """One student's status in one period of one calendar day.

    (student_id, date, period) is unique; marking the same key again updates
    the row in place.
    """

    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint(*ATTENDANCE_KEY, name="uq_attendance_student_date_period"),
        Index("ix_attendance_course_date", "course_id", "date"),
        CheckConstraint("period >= 1", name="attendance_period_positive"),
    )

    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("students.id", ondelete="CASCADE"), nullable=False
    )
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="RESTRICT"), nullable=False
    )
    batch_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("batches.id", ondelete="SET NULL"), nullable=True
    )
    date: Mapped[date_type] = mapped_column(Date, nullable=False)
    period: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[AttendanceStatus] = mapped_column(
        enum_column(AttendanceStatus, "attendance_status"), nullable=False
    )
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    trainer_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    check_in_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    check_out_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
