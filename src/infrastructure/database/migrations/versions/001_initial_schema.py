# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial campus schema.

Revision ID: 001_initial
Revises: None
Create Date: 2025-06-02

Creates the campus structure, attendance ledger, portfolio workflow,
assessment and admission tables matching the SQLAlchemy models in
src/infrastructure/database/models/.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Create campus tables."""
    # ==========================================================================
    # 1. courses, batches, students
    # ==========================================================================
    op.create_table(
        "courses",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("code", sa.String(50), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "batches",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("code", sa.String(50), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column(
            "course_id",
            sa.String(36),
            sa.ForeignKey("courses.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("start_date", sa.Date, nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "students",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("enrollment_number", sa.String(50), nullable=False, unique=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False, server_default=""),
        sa.Column(
            "course_id",
            sa.String(36),
            sa.ForeignKey("courses.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "batch_id",
            sa.String(36),
            sa.ForeignKey("batches.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("branch_id", sa.String(36), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("certificate_locked", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("placement_eligible", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_students_batch_active", "students", ["batch_id", "is_active"])

    # ==========================================================================
    # 2. attendance_records
    # ==========================================================================
    op.create_table(
        "attendance_records",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "student_id",
            sa.String(36),
            sa.ForeignKey("students.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "course_id",
            sa.String(36),
            sa.ForeignKey("courses.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "batch_id",
            sa.String(36),
            sa.ForeignKey("batches.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("date", sa.Date, nullable=False),
        sa.Column("period", sa.Integer, nullable=False, server_default="1"),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("remarks", sa.Text, nullable=True),
        sa.Column("trainer_id", sa.String(36), nullable=True),
        sa.Column("check_in_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("check_out_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_verified", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.UniqueConstraint(
            "student_id", "date", "period", name="uq_attendance_student_date_period"
        ),
        sa.CheckConstraint(
            "status IN ('PRESENT', 'ABSENT', 'LATE', 'EXCUSED')",
            name="attendance_status",
        ),
        sa.CheckConstraint("period >= 1", name="attendance_period_positive"),
    )
    op.create_index("ix_attendance_course_date", "attendance_records", ["course_id", "date"])

    # ==========================================================================
    # 3. portfolio_tasks, portfolio_submissions
    # ==========================================================================
    op.create_table(
        "portfolio_tasks",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "course_id",
            sa.String(36),
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("sort_order", sa.Integer, nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_portfolio_tasks_course_id", "portfolio_tasks", ["course_id"])

    op.create_table(
        "portfolio_submissions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "student_id",
            sa.String(36),
            sa.ForeignKey("students.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "task_id",
            sa.String(36),
            sa.ForeignKey("portfolio_tasks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("work_url", sa.String(1024), nullable=False),
        sa.Column("remarks", sa.Text, nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="PENDING"),
        sa.Column("reviewer_id", sa.String(36), nullable=True),
        sa.Column("rejection_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('PENDING', 'APPROVED', 'REJECTED')",
            name="submission_status",
        ),
    )
    op.create_index(
        "ix_submissions_student_task_status",
        "portfolio_submissions",
        ["student_id", "task_id", "status"],
    )

    # ==========================================================================
    # 4. tests, test_scores (owned by test management)
    # ==========================================================================
    op.create_table(
        "tests",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "batch_id",
            sa.String(36),
            sa.ForeignKey("batches.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("date", sa.Date, nullable=False),
        sa.Column("total_marks", sa.Integer, nullable=False),
        sa.Column("pass_marks", sa.Integer, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "test_scores",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "test_id",
            sa.String(36),
            sa.ForeignKey("tests.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "student_id",
            sa.String(36),
            sa.ForeignKey("students.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("marks_obtained", sa.Integer, nullable=False),
        sa.Column("is_pass", sa.Boolean, nullable=False),
        sa.Column("remarks", sa.Text, nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("test_id", "student_id", name="uq_test_scores_test_student"),
    )
    op.create_index("ix_test_scores_student_id", "test_scores", ["student_id"])

    # ==========================================================================
    # 5. admissions (owned by admissions)
    # ==========================================================================
    op.create_table(
        "admissions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "student_id",
            sa.String(36),
            sa.ForeignKey("students.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("admission_number", sa.String(50), nullable=False, unique=True),
        sa.Column("fee_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("fee_paid", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("fee_balance", sa.Numeric(12, 2), nullable=False, server_default="0"),
        *_timestamps(),
    )


def downgrade() -> None:
    """Drop campus tables."""
    op.drop_table("admissions")
    op.drop_index("ix_test_scores_student_id", table_name="test_scores")
    op.drop_table("test_scores")
    op.drop_table("tests")
    op.drop_index("ix_submissions_student_task_status", table_name="portfolio_submissions")
    op.drop_table("portfolio_submissions")
    op.drop_index("ix_portfolio_tasks_course_id", table_name="portfolio_tasks")
    op.drop_table("portfolio_tasks")
    op.drop_index("ix_attendance_course_date", table_name="attendance_records")
    op.drop_table("attendance_records")
    op.drop_index("ix_students_batch_active", table_name="students")
    op.drop_table("students")
    op.drop_table("batches")
    op.drop_table("courses")
