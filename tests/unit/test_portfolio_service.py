# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the portfolio workflow service."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from src.domains.exceptions import InvalidStateError, UnknownTaskError, ValidationError
from src.domains.portfolio import (
    PortfolioService,
    representative_submission,
    task_progress,
    unlock_certificate_if_complete,
)
from src.models.common import SubmissionStatus, TaskProgress
from src.models.portfolio import ReviewSubmissionRequest, SubmitWorkRequest

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def _submission(status, minutes_ago=0):
    return SimpleNamespace(status=status, submitted_at=NOW - timedelta(minutes=minutes_ago))


@pytest.fixture
def portfolio_service(mock_db):
    """Create portfolio service with mock database."""
    return PortfolioService(db=mock_db, delay_days=7)


class TestRepresentativeSubmission:
    """Tests for choosing the submission that stands for a task."""

    def test_none_without_submissions(self):
        assert representative_submission([]) is None
        assert task_progress(None) is TaskProgress.NOT_STARTED

    def test_latest_wins_without_approval(self):
        old = _submission(SubmissionStatus.REJECTED, minutes_ago=60)
        new = _submission(SubmissionStatus.PENDING, minutes_ago=5)

        chosen = representative_submission([old, new])

        assert chosen is new
        assert task_progress(chosen) is TaskProgress.PENDING

    def test_approved_wins_over_newer_upload(self):
        approved = _submission(SubmissionStatus.APPROVED, minutes_ago=60)
        newer = _submission(SubmissionStatus.REJECTED, minutes_ago=5)

        chosen = representative_submission([approved, newer])

        assert chosen is approved
        assert task_progress(chosen) is TaskProgress.APPROVED

    def test_naive_timestamps_compare(self):
        naive = SimpleNamespace(status=SubmissionStatus.PENDING, submitted_at=datetime(2025, 3, 2))
        aware = _submission(SubmissionStatus.REJECTED)

        assert representative_submission([aware, naive]) is naive


class TestReviewValidation:
    """Tests for decisions refused before any storage access."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["PENDING", "approved", "DONE", ""])
    async def test_invalid_decision_rejected(self, portfolio_service, mock_db, status):
        request = ReviewSubmissionRequest(status=status, reviewer_id="r-1")

        with pytest.raises(InvalidStateError):
            await portfolio_service.review_submission("sub-1", request)

        mock_db.execute.assert_not_called()
        mock_db.commit.assert_not_called()

    def test_invalid_state_is_a_validation_error(self):
        assert issubclass(InvalidStateError, ValidationError)


class TestSubmitWorkValidation:
    """Tests for submission input checks."""

    @pytest.mark.asyncio
    async def test_blank_work_url_rejected(self, portfolio_service, mock_db):
        request = SubmitWorkRequest(student_id="s-1", task_id="t-1", work_url="   ")

        with pytest.raises(ValidationError):
            await portfolio_service.submit_work(request)

        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_task_rejected(self, portfolio_service, mock_db):
        mock_db.get.return_value = None
        request = SubmitWorkRequest(student_id="s-1", task_id="missing", work_url="https://x.io/w")

        with pytest.raises(UnknownTaskError) as exc_info:
            await portfolio_service.submit_work(request)

        assert isinstance(exc_info.value, ValidationError)
        assert exc_info.value.details == {"task_id": "missing"}
        mock_db.add.assert_not_called()
        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_task_from_other_course_rejected(self, portfolio_service, mock_db):
        mock_db.get.return_value = SimpleNamespace(id="t-1", course_id="course-b")
        student = SimpleNamespace(id="s-1", course_id="course-a")
        result = MagicMock()
        result.scalar_one_or_none.return_value = student
        mock_db.execute.return_value = result
        request = SubmitWorkRequest(student_id="s-1", task_id="t-1", work_url="https://x.io/w")

        with pytest.raises(ValidationError):
            await portfolio_service.submit_work(request)

        mock_db.add.assert_not_called()


class TestCertificateCascadeLocking:
    """Tests for serialising concurrent cascades on one student."""

    @pytest.mark.asyncio
    async def test_student_row_locked_before_counting(self, mock_db):
        result = MagicMock()
        result.scalar_one.return_value = 0
        mock_db.execute.return_value = result

        unlocked = await unlock_certificate_if_complete(mock_db, "s-1", "course-a")

        assert unlocked is False
        first, count = [call.args[0] for call in mock_db.execute.await_args_list]
        assert "FOR UPDATE" in str(first.compile(dialect=postgresql.dialect()))
        assert "FOR UPDATE" not in str(count.compile(dialect=postgresql.dialect()))
