# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance ledger service.

This module provides the AttendanceService class for:
- Idempotent marking of one student for one period of one day
- Bulk marking of a session with per-slot outcomes
- Aggregation into counts, percentage and consecutive-absence alerts
- Administrative correction and deletion of records
"""

from __future__ import annotations

import logging
from datetime import date, datetime, tzinfo

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import get_settings
from src.domains.exceptions import (
    AttendanceConflictError,
    AttendanceRecordNotFoundError,
    CampusServiceError,
    ConflictError,
    CourseNotFoundError,
    StudentNotFoundError,
    ValidationError,
)
from src.infrastructure.database.models import (
    ATTENDANCE_KEY,
    AttendanceRecord,
    Course,
    Student,
)
from src.infrastructure.database.upsert import upsert
from src.models.attendance import (
    AttendanceRecordResponse,
    AttendanceSummary,
    BulkMarkRequest,
    BulkMarkResponse,
    BulkMarkResult,
    UpdateAttendanceRequest,
)
from src.models.common import (
    ATTENDANCE_THRESHOLD,
    CONSECUTIVE_ABSENCE_ALERT,
    AttendanceStatus,
    EligibilityStatus,
    percent,
)
from src.utils.datetime import to_campus_day

logger = logging.getLogger(__name__)

# Overwritten on every re-mark of a slot.
_ALWAYS_UPDATED = ("course_id", "batch_id", "status", "remarks")
# Overwritten only when the caller supplies a value.
_UPDATED_WHEN_GIVEN = ("trainer_id", "check_in_at", "check_out_at", "is_verified")


def longest_absence_run(statuses: list[AttendanceStatus]) -> int:
    """Length of the longest unbroken run of ABSENT in the given order.

    Any non-absent status ends a run.
    """
    longest = current = 0
    for status in statuses:
        if status is AttendanceStatus.ABSENT:
            current += 1
            longest = max(longest, current)
        else:
            current = 0
    return longest


def summarize(
    student_id: str,
    records: list[AttendanceRecord],
    start_date: date | None = None,
    end_date: date | None = None,
) -> AttendanceSummary:
    """Fold attendance records into a summary.

    Args:
        student_id: Student the records belong to.
        records: Records ordered most recent first.
        start_date: Lower bound the records were filtered with, if any.
        end_date: Upper bound the records were filtered with, if any.

    Returns:
        Counts, half-up rounded percentage of PRESENT over all periods,
        eligibility status and alerts.
    """
    statuses = [AttendanceStatus(r.status) for r in records]
    counts = {status: 0 for status in AttendanceStatus}
    for status in statuses:
        counts[status] += 1

    total = len(statuses)
    percentage = percent(counts[AttendanceStatus.PRESENT], total)
    max_absences = longest_absence_run(statuses)

    alerts: list[str] = []
    if percentage < ATTENDANCE_THRESHOLD:
        alerts.append(
            f"Attendance below {ATTENDANCE_THRESHOLD}% - Certificate and placement locked"
        )
    if max_absences >= CONSECUTIVE_ABSENCE_ALERT:
        alerts.append(f"{max_absences} consecutive absences detected")

    return AttendanceSummary(
        student_id=student_id,
        start_date=start_date,
        end_date=end_date,
        total_periods=total,
        present_count=counts[AttendanceStatus.PRESENT],
        absent_count=counts[AttendanceStatus.ABSENT],
        late_count=counts[AttendanceStatus.LATE],
        excused_count=counts[AttendanceStatus.EXCUSED],
        percentage=percentage,
        eligibility_status=(
            EligibilityStatus.ELIGIBLE
            if percentage >= ATTENDANCE_THRESHOLD
            else EligibilityStatus.NOT_ELIGIBLE
        ),
        max_consecutive_absences=max_absences,
        alerts=alerts,
    )


class AttendanceService:
    """Service owning the attendance ledger.

    Every write settles on the (student, day, period) key in the database
    with a single INSERT ... ON CONFLICT statement, so retries and
    concurrent trainers converge on one row.

    Attributes:
        db: Async database session.
        campus_tz: Timezone used to reduce datetimes to calendar days.
    """

    def __init__(self, db: AsyncSession, campus_tz: tzinfo | None = None) -> None:
        """Initialize attendance service.

        Args:
            db: Async database session.
            campus_tz: Campus timezone, defaults to the configured one.
        """
        self.db = db
        self.campus_tz = campus_tz or get_settings().campus.tzinfo

    async def mark(
        self,
        student_id: str,
        date: date | datetime,
        status: AttendanceStatus | str,
        period: int = 1,
        course_id: str | None = None,
        remarks: str | None = None,
        trainer_id: str | None = None,
        check_in_at: datetime | None = None,
        check_out_at: datetime | None = None,
        is_verified: bool | None = None,
    ) -> AttendanceRecordResponse:
        """Record a student's status for one period of one day.

        Marking the same (student, day, period) again overwrites status and
        remarks of the existing row; nothing else is created. Trainer,
        check-in/check-out times and verification are kept unless the caller
        supplies new values.

        Args:
            student_id: Student being marked.
            date: Day of the session. Datetimes are reduced to the campus day.
            status: PRESENT, ABSENT, LATE or EXCUSED.
            period: Period of the day, starting at 1.
            course_id: Course of the session, defaults to the student's course.
            remarks: Optional trainer remarks.
            trainer_id: Trainer recording the mark.
            check_in_at: Optional check-in time.
            check_out_at: Optional check-out time.
            is_verified: Whether the mark has been verified. None keeps the
                stored value.

        Returns:
            The stored record.

        Raises:
            ValidationError: If period or status is invalid.
            StudentNotFoundError: If the student does not exist.
            CourseNotFoundError: If an explicit course does not exist.
            AttendanceConflictError: If the unique key is violated anyway.
        """
        status = self._validate_slot(period, status)
        student = await self._get_student(student_id)
        if course_id and course_id != student.course_id:
            await self._ensure_course(course_id)
        day = to_campus_day(date, self.campus_tz)

        values = {
            "student_id": student.id,
            "course_id": course_id or student.course_id,
            "batch_id": student.batch_id,
            "date": day,
            "period": period,
            "status": status,
            "remarks": remarks,
            "trainer_id": trainer_id,
            "check_in_at": check_in_at,
            "check_out_at": check_out_at,
            "is_verified": bool(is_verified),
        }
        supplied = {
            "trainer_id": trainer_id,
            "check_in_at": check_in_at,
            "check_out_at": check_out_at,
            "is_verified": is_verified,
        }
        update_columns = _ALWAYS_UPDATED + tuple(
            column for column in _UPDATED_WHEN_GIVEN if supplied[column] is not None
        )

        try:
            record_id = await upsert(
                self.db,
                AttendanceRecord,
                values=values,
                conflict_on=ATTENDANCE_KEY,
                update=update_columns,
            )
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(
                "Attendance key violated despite upsert: student=%s, date=%s, period=%d: %s",
                student_id,
                day,
                period,
                e,
            )
            raise AttendanceConflictError(
                "Attendance slot could not be written",
                {"student_id": student_id, "date": day.isoformat(), "period": period},
            ) from e

        record = await self._get_record(record_id)

        logger.info(
            "Marked attendance: student=%s, date=%s, period=%d, status=%s, by=%s",
            student_id,
            day,
            period,
            status,
            trainer_id,
        )

        return AttendanceRecordResponse.model_validate(record)

    async def bulk_mark(self, request: BulkMarkRequest) -> BulkMarkResponse:
        """Mark many students for one session.

        Entries are applied one after another, each committed on its own,
        so a failed entry leaves earlier ones in place.

        Args:
            request: Session date, course, trainer and the entries.

        Returns:
            Outcome of every entry, in request order.

        Raises:
            ValidationError: If the request holds no entries.
        """
        if not request.records:
            raise ValidationError("No attendance records provided")

        results: list[BulkMarkResult] = []

        for entry in request.records:
            try:
                record = await self.mark(
                    student_id=entry.student_id,
                    date=request.date,
                    status=entry.status,
                    period=entry.period,
                    course_id=request.course_id,
                    remarks=entry.remarks,
                    trainer_id=request.trainer_id,
                )
                results.append(
                    BulkMarkResult(
                        student_id=entry.student_id,
                        period=entry.period,
                        success=True,
                        record_id=record.id,
                    )
                )
            except ConflictError as e:
                logger.error(
                    "Bulk attendance entry hit a consistency defect: student=%s, period=%d: %s",
                    entry.student_id,
                    entry.period,
                    e.message,
                )
                results.append(
                    BulkMarkResult(
                        student_id=entry.student_id,
                        period=entry.period,
                        success=False,
                        error_type="internal_error",
                        reason="The entry could not be recorded",
                    )
                )
            except CampusServiceError as e:
                results.append(
                    BulkMarkResult(
                        student_id=entry.student_id,
                        period=entry.period,
                        success=False,
                        error_type=e.error_type,
                        reason=e.message,
                    )
                )
            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.error(
                    "Bulk attendance entry failed: student=%s, period=%d: %s",
                    entry.student_id,
                    entry.period,
                    e,
                )
                results.append(
                    BulkMarkResult(
                        student_id=entry.student_id,
                        period=entry.period,
                        success=False,
                        error_type="database_error",
                        reason="Database operation failed",
                    )
                )

        marked = sum(1 for r in results if r.success)

        logger.info(
            "Bulk attendance: course=%s, marked=%d, failed=%d, by=%s",
            request.course_id,
            marked,
            len(results) - marked,
            request.trainer_id,
        )

        return BulkMarkResponse(
            results=results,
            total_marked=marked,
            total_failed=len(results) - marked,
        )

    async def aggregate(
        self,
        student_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> AttendanceSummary:
        """Summarize a student's attendance, optionally within a date range.

        Args:
            student_id: Student identifier.
            start_date: Inclusive lower bound.
            end_date: Inclusive upper bound.

        Returns:
            Attendance summary.

        Raises:
            ValidationError: If start_date is after end_date.
            StudentNotFoundError: If the student does not exist.
        """
        if start_date and end_date and start_date > end_date:
            raise ValidationError(
                "start_date must not be after end_date",
                {"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
            )

        await self._get_student(student_id)
        records = await self.list_records(student_id, start_date, end_date)
        return summarize(student_id, records, start_date, end_date)

    async def list_records(
        self,
        student_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[AttendanceRecord]:
        """Attendance rows of a student, most recent day and period first."""
        query = select(AttendanceRecord).where(AttendanceRecord.student_id == student_id)
        if start_date:
            query = query.where(AttendanceRecord.date >= start_date)
        if end_date:
            query = query.where(AttendanceRecord.date <= end_date)
        query = query.order_by(
            AttendanceRecord.date.desc(), AttendanceRecord.period.desc()
        ).execution_options(populate_existing=True)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def update_record(
        self,
        record_id: str,
        request: UpdateAttendanceRequest,
        updated_by: str | None = None,
    ) -> AttendanceRecordResponse:
        """Correct status, remarks or verification of an existing record.

        Raises:
            AttendanceRecordNotFoundError: If the record does not exist.
        """
        record = await self._get_record(record_id)

        changes = request.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in changes.items():
            setattr(record, field, value)

        await self.db.commit()
        await self.db.refresh(record)

        logger.info(
            "Updated attendance record: record=%s, fields=%s, by=%s",
            record_id,
            sorted(changes),
            updated_by,
        )

        return AttendanceRecordResponse.model_validate(record)

    async def delete_record(self, record_id: str, deleted_by: str | None = None) -> None:
        """Remove a record. The only path that deletes attendance.

        Raises:
            AttendanceRecordNotFoundError: If the record does not exist.
        """
        record = await self._get_record(record_id)
        slot = (record.student_id, record.date, record.period)

        await self.db.delete(record)
        await self.db.commit()

        logger.info(
            "Deleted attendance record: record=%s, student=%s, date=%s, period=%d, by=%s",
            record_id,
            *slot,
            deleted_by,
        )

    @staticmethod
    def _validate_slot(period: int, status: AttendanceStatus | str) -> AttendanceStatus:
        """Check period and status before anything is written.

        Raises:
            ValidationError: If the period is below 1 or the status unknown.
        """
        if isinstance(period, bool) or not isinstance(period, int) or period < 1:
            raise ValidationError("Period must be a positive integer", {"period": period})
        try:
            return AttendanceStatus(status)
        except ValueError:
            raise ValidationError(
                f"Invalid attendance status '{status}'",
                {"allowed": [s.value for s in AttendanceStatus]},
            ) from None

    async def _get_student(self, student_id: str) -> Student:
        """Get student by ID.

        Raises:
            StudentNotFoundError: If not found.
        """
        result = await self.db.execute(select(Student).where(Student.id == student_id))
        student = result.scalar_one_or_none()

        if not student:
            raise StudentNotFoundError(student_id)

        return student

    async def _ensure_course(self, course_id: str) -> None:
        """Check that a course exists.

        Raises:
            CourseNotFoundError: If not found.
        """
        result = await self.db.execute(select(Course.id).where(Course.id == course_id))
        if result.scalar_one_or_none() is None:
            raise CourseNotFoundError(course_id)

    async def _get_record(self, record_id: str) -> AttendanceRecord:
        """Get attendance record by ID, bypassing the identity map.

        Raises:
            AttendanceRecordNotFoundError: If not found.
        """
        query = (
            select(AttendanceRecord)
            .where(AttendanceRecord.id == record_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        record = result.scalar_one_or_none()

        if not record:
            raise AttendanceRecordNotFoundError(record_id)

        return record
