# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for the campus eligibility engine.

Example:
    >>> from src.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.campus.timezone)
    'Asia/Kolkata'
"""

from src.core.config.settings import (
    APISettings,
    CampusSettings,
    CORSSettings,
    DatabaseSettings,
    RateLimitSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "APISettings",
    "CampusSettings",
    "CORSSettings",
    "DatabaseSettings",
    "RateLimitSettings",
    "Settings",
    "clear_settings_cache",
    "get_settings",
]
