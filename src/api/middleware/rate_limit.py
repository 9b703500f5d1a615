# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Rate limiting using slowapi.

Limits are applied per client IP address to the endpoints that do a lot of
work per request.

Example:
    # Limit batch sweeps
    @limiter.limit(RATE_LIMIT_EXPENSIVE)
    async def sweep_batch(request: Request, ...):
        ...
"""

import logging
from typing import Callable

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from src.api.errors import error_response
from src.core.config import get_settings

logger = logging.getLogger(__name__)


def get_client_identifier(request: Request) -> str:
    """Get a unique identifier for the client.

    Args:
        request: HTTP request.

    Returns:
        Client identifier string.
    """
    return f"ip:{get_remote_address(request)}"


# Create the limiter instance
settings = get_settings()
limiter = Limiter(
    key_func=get_client_identifier,
    default_limits=[f"{settings.rate_limit.requests_per_minute}/minute"],
    storage_uri=settings.rate_limit.storage_uri,
)


async def rate_limit_exceeded_handler(
    request: Request,
    exc: RateLimitExceeded,
) -> Response:
    """Handle rate limit exceeded errors.

    Returns a 429 Too Many Requests response in the uniform error format.

    Args:
        request: HTTP request.
        exc: Rate limit exceeded exception.

    Returns:
        JSON response with error details.
    """
    logger.warning(
        "Rate limit exceeded: %s for %s",
        exc.detail,
        get_client_identifier(request),
    )

    response = error_response(
        429,
        "rate_limited",
        "Too many requests. Please try again later.",
        {"limit": str(exc.detail)},
    )
    response.headers["Retry-After"] = "60"
    return response


def rate_limit(limit_string: str) -> Callable:
    """Create a rate limit decorator.

    Args:
        limit_string: Rate limit string (e.g., "5/minute", "100/hour").

    Returns:
        Decorator function.
    """
    return limiter.limit(limit_string)


# Common rate limit configurations
RATE_LIMIT_BULK = "30/minute"  # Whole-session attendance marking
RATE_LIMIT_EXPENSIVE = "10/minute"  # Batch-wide evaluation
