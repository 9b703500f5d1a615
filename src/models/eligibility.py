# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Eligibility evaluation and batch sweep models."""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.models.common import TestStatus


class FeeSummary(BaseModel):
    """Fee figures of a student. Informational only."""

    fee_amount: Decimal
    fee_paid: Decimal
    fee_balance: Decimal


class EligibilityResult(BaseModel):
    """Certificate and placement decision for one student, computed on read."""

    student_id: str
    attendance_percentage: int
    attendance_eligible: bool
    portfolio_percentage: int
    portfolio_complete: bool
    approved_tasks: int
    total_tasks: int
    test_status: TestStatus
    tests_passed: int
    tests_total: int
    certificate_locked: bool
    certificate_eligible: bool
    placement_eligible: bool
    stored_placement_eligible: bool = Field(
        description="Value last persisted by the batch sweep"
    )
    missing_requirements: list[str] = Field(default_factory=list)
    fee: FeeSummary | None = None


class SweepResult(BaseModel):
    """Outcome of a batch eligibility sweep."""

    batch_id: str
    evaluated: int
    changed: int
    changed_student_ids: list[str] = Field(default_factory=list)
