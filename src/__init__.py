"""Campus eligibility engine.

Attendance ledger, portfolio approval workflow and certificate/placement
eligibility evaluation for a multi-branch training campus.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
