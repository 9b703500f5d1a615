# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Eligibility domain package.

This package provides:
- Pull-based certificate and placement eligibility evaluation
- Read-only access to test scores and fee figures
- The batch sweep that persists placement eligibility
"""

from src.domains.eligibility.service import EligibilityService, compose_result
from src.domains.eligibility.sources import AssessmentReader, FeeReader, TestOutcome
from src.domains.eligibility.sweep import BatchEligibilitySweep

__all__ = [
    "AssessmentReader",
    "BatchEligibilitySweep",
    "EligibilityService",
    "FeeReader",
    "TestOutcome",
    "compose_result",
]
