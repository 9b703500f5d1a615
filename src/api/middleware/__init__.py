# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware components.

This package provides middleware for request processing:
- RequestIdMiddleware: Request id for logs and responses.
- limiter: slowapi rate limiter shared by the routers.
"""

from src.api.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from src.api.middleware.request_id import RequestIdMiddleware

__all__ = [
    "RequestIdMiddleware",
    "limiter",
    "rate_limit_exceeded_handler",
]
