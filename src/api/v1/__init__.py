# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

This package contains all v1 API endpoint definitions.
Each module provides a FastAPI router for a specific domain.

Modules:
    attendance: Attendance marking, bulk marking and summaries.
    portfolio: Portfolio tasks, submissions, reviews and progress views.
    eligibility: Eligibility evaluation and batch sweeps.
"""

from fastapi import APIRouter

from src.api.v1 import attendance, eligibility, portfolio

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(attendance.router, prefix="/attendance", tags=["Attendance"])
router.include_router(portfolio.router, prefix="/portfolio", tags=["Portfolio"])
router.include_router(eligibility.router, prefix="/eligibility", tags=["Eligibility"])

__all__ = ["router"]
