# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for database models.

Tests table definitions, keys and constraints.
"""

from sqlalchemy import CheckConstraint, UniqueConstraint

from src.infrastructure.database.models import (
    ATTENDANCE_KEY,
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
from src.infrastructure.database.models.base import TimestampMixin, new_id


def _unique_columns(model) -> list[tuple[str, ...]]:
    return [
        tuple(c.name for c in constraint.columns)
        for constraint in model.__table__.constraints
        if isinstance(constraint, UniqueConstraint)
    ]


class TestBase:
    """Test base model functionality."""

    def test_base_inherits_declarative_base(self):
        """Verify Base is a declarative base."""
        assert hasattr(Base, "metadata")
        assert hasattr(Base, "registry")

    def test_timestamp_mixin_has_created_at(self):
        """Verify TimestampMixin has created_at field."""
        assert hasattr(TimestampMixin, "created_at")
        assert hasattr(TimestampMixin, "updated_at")

    def test_new_id_is_unique(self):
        assert new_id() != new_id()
        assert len(new_id()) == 36

    def test_all_tables_registered(self):
        assert set(Base.metadata.tables) == {
            "courses",
            "batches",
            "students",
            "attendance_records",
            "portfolio_tasks",
            "portfolio_submissions",
            "tests",
            "test_scores",
            "admissions",
        }


class TestStudentModel:
    """Test the student table."""

    def test_enrollment_number_unique(self):
        assert Student.__table__.c.enrollment_number.unique

    def test_new_student_defaults(self):
        columns = Student.__table__.c
        assert columns.certificate_locked.default.arg is True
        assert columns.placement_eligible.default.arg is False
        assert columns.is_active.default.arg is True

    def test_full_name(self):
        student = Student(first_name="Asha", last_name="Raman")
        assert student.full_name == "Asha Raman"


class TestAttendanceModel:
    """Test the attendance table."""

    def test_one_row_per_student_day_period(self):
        assert ATTENDANCE_KEY == ("student_id", "date", "period")
        assert ATTENDANCE_KEY in _unique_columns(AttendanceRecord)

    def test_period_check_constraint(self):
        checks = [
            c for c in AttendanceRecord.__table__.constraints if isinstance(c, CheckConstraint)
        ]
        assert any("period >= 1" in str(c.sqltext) for c in checks)


class TestPortfolioModels:
    """Test the portfolio tables."""

    def test_submissions_allow_history(self):
        assert _unique_columns(PortfolioSubmission) == []

    def test_task_order_column_name(self):
        assert "sort_order" in PortfolioTask.__table__.c

    def test_submission_references_task(self):
        fks = {fk.target_fullname for fk in PortfolioSubmission.__table__.foreign_keys}
        assert "portfolio_tasks.id" in fks
        assert "students.id" in fks


class TestNeighbourModels:
    """Test tables owned by neighbouring subsystems."""

    def test_one_score_per_test_and_student(self):
        assert ("test_id", "student_id") in _unique_columns(TestScore)

    def test_one_admission_per_student(self):
        assert Admission.__table__.c.student_id.unique

    def test_batch_and_test_tables(self):
        assert Batch.__tablename__ == "batches"
        assert Course.__tablename__ == "courses"
        assert Test.__tablename__ == "tests"
