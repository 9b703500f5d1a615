# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance ledger domain package.

This package provides:
- Idempotent per-period attendance marking
- Bulk session marking with per-slot results
- Attendance aggregation with consecutive-absence detection
"""

from src.domains.attendance.service import AttendanceService, longest_absence_run, summarize

__all__ = [
    "AttendanceService",
    "longest_absence_run",
    "summarize",
]
