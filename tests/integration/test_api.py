# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""End-to-end API tests over the ASGI app with a test database."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.api.app import create_app
from src.api.dependencies import get_db
from src.api.middleware.rate_limit import limiter
from src.models.common import SubmissionStatus

pytestmark = pytest.mark.integration


@pytest_asyncio.fixture
async def client(session_factory):
    """HTTP client whose requests use the test database."""
    app = create_app()

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    limiter.reset()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    limiter.reset()


@pytest_asyncio.fixture
async def enrolled(factory):
    course = await factory.course("FSWD")
    batch = await factory.batch(course)
    student = await factory.student(course, batch, enrollment_number="FSWD-101")
    return course, batch, student


def _assert_error(response, status_code: int, error_type: str) -> dict:
    assert response.status_code == status_code
    body = response.json()
    assert body["success"] is False
    assert body["error"]["type"] == error_type
    assert isinstance(body["error"]["message"], str)
    return body["error"]


class TestHealth:
    """Tests for health endpoints."""

    @pytest.mark.asyncio
    async def test_health_reports_database(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["version"] == "1.0.0"
        assert body["status"] in {"healthy", "degraded"}
        assert "database" in body

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, client):
        response = await client.get("/health", headers={"X-Request-ID": "req-42"})

        assert response.headers["X-Request-ID"] == "req-42"


class TestAttendanceApi:
    """Tests for attendance endpoints."""

    @pytest.mark.asyncio
    async def test_mark_twice_keeps_one_record(self, client, enrolled):
        _, _, student = enrolled
        payload = {"student_id": student.id, "date": "2025-01-06", "status": "PRESENT"}

        first = await client.post("/api/v1/attendance", json=payload)
        second = await client.post("/api/v1/attendance", json={**payload, "status": "ABSENT"})

        assert first.status_code == 200
        assert second.status_code == 200
        assert second.json()["id"] == first.json()["id"]
        assert second.json()["status"] == "ABSENT"
        assert second.json()["date"] == "2025-01-06"

    @pytest.mark.asyncio
    async def test_schema_error_is_422(self, client, enrolled):
        _, _, student = enrolled

        response = await client.post(
            "/api/v1/attendance",
            json={"student_id": student.id, "date": "2025-01-06", "status": "HOLIDAY"},
        )

        error = _assert_error(response, 422, "request_validation_error")
        assert error["details"]["errors"]

    @pytest.mark.asyncio
    async def test_unknown_student_is_404(self, client):
        response = await client.post(
            "/api/v1/attendance",
            json={"student_id": "missing", "date": "2025-01-06", "status": "PRESENT"},
        )

        error = _assert_error(response, 404, "not_found")
        assert error["details"] == {"student_id": "missing"}

    @pytest.mark.asyncio
    async def test_bulk_reports_each_entry(self, client, enrolled):
        course, _, student = enrolled

        response = await client.post(
            "/api/v1/attendance/bulk",
            json={
                "course_id": course.id,
                "date": "2025-01-06",
                "records": [
                    {"student_id": student.id, "status": "PRESENT"},
                    {"student_id": student.id, "period": 2, "status": "NOPE"},
                ],
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["total_marked"] == 1
        assert body["total_failed"] == 1
        assert body["results"][1]["error_type"] == "validation_error"

    @pytest.mark.asyncio
    async def test_summary_and_inverted_range(self, client, enrolled):
        _, _, student = enrolled
        await client.post(
            "/api/v1/attendance",
            json={"student_id": student.id, "date": "2025-01-06", "status": "PRESENT"},
        )

        summary = await client.get(f"/api/v1/attendance/students/{student.id}/summary")
        inverted = await client.get(
            f"/api/v1/attendance/students/{student.id}/summary",
            params={"start_date": "2025-02-01", "end_date": "2025-01-01"},
        )

        assert summary.status_code == 200
        assert summary.json()["percentage"] == 100
        assert summary.json()["eligibility_status"] == "ELIGIBLE"
        _assert_error(inverted, 400, "validation_error")

    @pytest.mark.asyncio
    async def test_update_and_delete(self, client, enrolled):
        _, _, student = enrolled
        created = await client.post(
            "/api/v1/attendance",
            json={"student_id": student.id, "date": "2025-01-06", "status": "ABSENT"},
        )
        record_id = created.json()["id"]

        patched = await client.patch(
            f"/api/v1/attendance/{record_id}", json={"status": "EXCUSED"}
        )
        deleted = await client.delete(f"/api/v1/attendance/{record_id}")
        missing = await client.delete(f"/api/v1/attendance/{record_id}")

        assert patched.json()["status"] == "EXCUSED"
        assert deleted.status_code == 204
        _assert_error(missing, 404, "not_found")


class TestPortfolioApi:
    """Tests for portfolio endpoints."""

    @pytest.mark.asyncio
    async def test_submit_review_and_unlock(self, client, enrolled):
        course, batch, student = enrolled
        task = await client.post(
            "/api/v1/portfolio/tasks", json={"course_id": course.id, "title": "Landing page"}
        )
        assert task.status_code == 201

        submission = await client.post(
            "/api/v1/portfolio/submissions",
            json={
                "student_id": student.id,
                "task_id": task.json()["id"],
                "work_url": "https://github.com/asha/landing",
            },
        )
        assert submission.status_code == 201
        assert submission.json()["status"] == SubmissionStatus.PENDING

        review = await client.post(
            f"/api/v1/portfolio/submissions/{submission.json()['id']}/review",
            json={"status": "APPROVED", "reviewer_id": "trainer-1"},
        )
        assert review.status_code == 200
        assert review.json()["certificate_unlocked"] is True

        portfolio = await client.get(f"/api/v1/portfolio/students/{student.id}")
        assert portfolio.json()["completion_rate"] == 100
        assert portfolio.json()["certificate_locked"] is False

        stats = await client.get(f"/api/v1/portfolio/batches/{batch.id}/stats")
        assert stats.json()["completed_students"] == 1

    @pytest.mark.asyncio
    async def test_invalid_review_status_is_400(self, client, enrolled, factory):
        course, _, student = enrolled
        [task] = await factory.tasks(course, 1)
        submission = await factory.submission(student, task)

        response = await client.post(
            f"/api/v1/portfolio/submissions/{submission.id}/review",
            json={"status": "PENDING"},
        )

        _assert_error(response, 400, "invalid_state")

    @pytest.mark.asyncio
    async def test_unknown_task_is_400(self, client, enrolled):
        _, _, student = enrolled

        response = await client.post(
            "/api/v1/portfolio/submissions",
            json={"student_id": student.id, "task_id": "missing", "work_url": "https://x.io"},
        )

        _assert_error(response, 400, "validation_error")


class TestEligibilityApi:
    """Tests for eligibility endpoints."""

    @pytest.mark.asyncio
    async def test_student_eligibility(self, client, enrolled):
        _, _, student = enrolled

        response = await client.get(f"/api/v1/eligibility/students/{student.id}")

        assert response.status_code == 200
        body = response.json()
        assert body["certificate_eligible"] is False
        assert body["placement_eligible"] is False
        assert body["missing_requirements"] == [
            "Attendance below 75%",
            "Portfolio not completed",
            "Tests not passed",
        ]

    @pytest.mark.asyncio
    async def test_sweep(self, client, enrolled):
        _, batch, _ = enrolled

        response = await client.post(f"/api/v1/eligibility/batches/{batch.id}/sweep")

        assert response.status_code == 200
        assert response.json() == {
            "batch_id": batch.id,
            "evaluated": 1,
            "changed": 0,
            "changed_student_ids": [],
        }

    @pytest.mark.asyncio
    async def test_sweep_unknown_batch(self, client):
        response = await client.post("/api/v1/eligibility/batches/missing/sweep")

        _assert_error(response, 404, "not_found")

    @pytest.mark.asyncio
    async def test_sweep_is_rate_limited(self, client, enrolled):
        _, batch, _ = enrolled

        statuses = [
            (await client.post(f"/api/v1/eligibility/batches/{batch.id}/sweep")).status_code
            for _ in range(11)
        ]

        assert statuses[:10] == [200] * 10
        error = _assert_error(
            await client.post(f"/api/v1/eligibility/batches/{batch.id}/sweep"), 429, "rate_limited"
        )
        assert error["details"]["limit"]
        assert statuses[10] == 429
