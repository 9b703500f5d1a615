# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Initialize and close the shared database engine
- Get a database session per request

Example:
    @router.get("/students/{student_id}")
    async def get_student_eligibility(
        student_id: str,
        db: AsyncSession = Depends(get_db),
    ):
        ...
"""

import logging
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import get_settings
from src.infrastructure.database.connection import close_database, get_session, init_database

logger = logging.getLogger(__name__)


async def init_db() -> None:
    """Initialize the database engine."""
    await init_database(get_settings())


async def close_db() -> None:
    """Close the database engine."""
    await close_database()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session for the current request.

    Yields:
        AsyncSession committed when the request succeeds and rolled back
        when it raises.
    """
    async with get_session() as session:
        yield session
