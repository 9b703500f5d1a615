# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Portfolio workflow domain package.

This package provides:
- Portfolio task definitions per course
- Submission and review state machine
- Certificate unlock cascade on full-course approval
"""

from src.domains.portfolio.certificate import (
    approved_task_count,
    course_task_count,
    unlock_certificate_if_complete,
)
from src.domains.portfolio.service import (
    PortfolioService,
    representative_submission,
    task_progress,
)

__all__ = [
    "PortfolioService",
    "approved_task_count",
    "course_task_count",
    "representative_submission",
    "task_progress",
    "unlock_certificate_if_complete",
]
