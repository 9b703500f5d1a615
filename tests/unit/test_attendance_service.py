# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for attendance input validation."""

from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.domains.attendance import AttendanceService
from src.domains.exceptions import (
    AttendanceConflictError,
    StudentNotFoundError,
    ValidationError,
)
from src.models.attendance import BulkMarkRequest


@pytest.fixture
def attendance_service(mock_db, campus_tz):
    """Create attendance service with mock database."""
    return AttendanceService(db=mock_db, campus_tz=campus_tz)


class TestMarkValidation:
    """Tests for checks made before anything is written."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("period", [0, -1])
    async def test_non_positive_period_rejected(self, attendance_service, mock_db, period):
        with pytest.raises(ValidationError) as exc_info:
            await attendance_service.mark("s-1", date(2025, 1, 1), "PRESENT", period=period)

        assert exc_info.value.details == {"period": period}
        mock_db.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_status_rejected(self, attendance_service, mock_db):
        with pytest.raises(ValidationError) as exc_info:
            await attendance_service.mark("s-1", date(2025, 1, 1), "HOLIDAY")

        assert "HOLIDAY" in exc_info.value.message
        mock_db.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_student_rejected(self, attendance_service, mock_db):
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        mock_db.execute.return_value = result

        with pytest.raises(StudentNotFoundError):
            await attendance_service.mark("missing", date(2025, 1, 1), "PRESENT")

        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_inverted_range_rejected(self, attendance_service, mock_db):
        with pytest.raises(ValidationError):
            await attendance_service.aggregate(
                "s-1", start_date=date(2025, 2, 1), end_date=date(2025, 1, 1)
            )

        mock_db.execute.assert_not_called()


class TestBulkMarkValidation:
    """Tests for bulk request checks."""

    @pytest.mark.asyncio
    async def test_empty_request_rejected(self, attendance_service):
        request = BulkMarkRequest.model_construct(
            course_id="c-1", date=date(2025, 1, 1), trainer_id=None, records=[]
        )

        with pytest.raises(ValidationError):
            await attendance_service.bulk_mark(request)

    @pytest.mark.asyncio
    async def test_invalid_entries_reported_per_slot(self, attendance_service, mock_db):
        request = BulkMarkRequest(
            course_id="c-1",
            date=date(2025, 1, 1),
            records=[
                {"student_id": "s-1", "period": 0, "status": "PRESENT"},
                {"student_id": "s-2", "period": 1, "status": "NOPE"},
            ],
        )

        response = await attendance_service.bulk_mark(request)

        assert response.total_marked == 0
        assert response.total_failed == 2
        assert [r.error_type for r in response.results] == ["validation_error"] * 2
        mock_db.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_conflict_reported_as_internal_error(self, attendance_service):
        request = BulkMarkRequest(
            course_id="c-1",
            date=date(2025, 1, 1),
            records=[{"student_id": "s-1", "status": "PRESENT"}],
        )
        conflict = AttendanceConflictError("Slot s-1/2025-01-01/1 resolved to two rows")

        with patch.object(attendance_service, "mark", AsyncMock(side_effect=conflict)):
            response = await attendance_service.bulk_mark(request)

        [result] = response.results
        assert result.success is False
        assert result.error_type == "internal_error"
        assert result.reason == "The entry could not be recorded"
        assert "two rows" not in result.reason
