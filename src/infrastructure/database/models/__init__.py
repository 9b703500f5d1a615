# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ORM models for the campus store.

Importing this package registers every table on ``Base.metadata``.
"""

from src.infrastructure.database.models.admission import Admission
from src.infrastructure.database.models.assessment import Test, TestScore
from src.infrastructure.database.models.attendance import ATTENDANCE_KEY, AttendanceRecord
from src.infrastructure.database.models.base import Base, IdMixin, TimestampMixin
from src.infrastructure.database.models.campus import Batch, Course, Student
from src.infrastructure.database.models.portfolio import PortfolioSubmission, PortfolioTask

__all__ = [
    "ATTENDANCE_KEY",
    "Admission",
    "AttendanceRecord",
    "Base",
    "Batch",
    "Course",
    "IdMixin",
    "PortfolioSubmission",
    "PortfolioTask",
    "Student",
    "Test",
    "TestScore",
    "TimestampMixin",
]
