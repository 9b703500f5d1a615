# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for the campus eligibility engine.

This package contains domain services that encapsulate business logic.
Each domain module provides services that work on one async database
session and raise the errors defined in ``src.domains.exceptions``.

Domains:
    attendance: Attendance ledger keyed by student, day and period.
    portfolio: Task definitions, submissions, reviews and the certificate cascade.
    eligibility: Certificate and placement evaluation and the batch sweep.
"""
