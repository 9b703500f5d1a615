# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Portfolio workflow service.

This module provides the PortfolioService class for:
- Task definition per course
- Work submission by students
- Review of submissions (PENDING -> APPROVED | REJECTED)
- Portfolio progress views per student and per batch

Approving a submission runs the certificate cascade in the same
transaction (see src.domains.portfolio.certificate).
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import assert_never

from sqlalchemy import distinct, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from src.core.config import get_settings
from src.domains.exceptions import (
    BatchNotFoundError,
    CourseNotFoundError,
    InvalidStateError,
    StudentNotFoundError,
    SubmissionNotFoundError,
    TaskNotFoundError,
    UnknownTaskError,
    ValidationError,
)
from src.domains.portfolio.certificate import unlock_certificate_if_complete
from src.infrastructure.database.models import (
    Batch,
    Course,
    PortfolioSubmission,
    PortfolioTask,
    Student,
)
from src.models.common import PORTFOLIO_COMPLETE, SubmissionStatus, TaskProgress, percent
from src.models.portfolio import (
    BatchPortfolioStatsResponse,
    CreateTaskRequest,
    ReviewResponse,
    ReviewSubmissionRequest,
    StudentPortfolioResponse,
    StudentPortfolioStats,
    SubmissionResponse,
    SubmitWorkRequest,
    TaskProgressItem,
    TaskResponse,
    UpdateTaskRequest,
)
from src.utils.datetime import ensure_utc, utc_now

logger = logging.getLogger(__name__)


def representative_submission(
    submissions: list[PortfolioSubmission],
) -> PortfolioSubmission | None:
    """Pick the submission that stands for a task.

    An approved submission wins, since approval completes the task for
    good. Otherwise the most recent upload is shown.
    """
    if not submissions:
        return None
    approved = [s for s in submissions if s.status == SubmissionStatus.APPROVED]
    pool = approved or submissions
    return max(pool, key=lambda s: ensure_utc(s.submitted_at))


def _prior_rejections():
    """Rejected submissions sharing the student and task of the row being updated."""
    prior = aliased(PortfolioSubmission)
    return (
        select(func.count(prior.id))
        .where(
            prior.student_id == PortfolioSubmission.student_id,
            prior.task_id == PortfolioSubmission.task_id,
            prior.status == SubmissionStatus.REJECTED,
        )
        .correlate(PortfolioSubmission)
        .scalar_subquery()
    )


def task_progress(submission: PortfolioSubmission | None) -> TaskProgress:
    """Progress state of a task given its representative submission."""
    if submission is None:
        return TaskProgress.NOT_STARTED
    match SubmissionStatus(submission.status):
        case SubmissionStatus.PENDING:
            return TaskProgress.PENDING
        case SubmissionStatus.APPROVED:
            return TaskProgress.APPROVED
        case SubmissionStatus.REJECTED:
            return TaskProgress.REJECTED
        case _ as unreachable:
            assert_never(unreachable)


class PortfolioService:
    """Service for portfolio tasks, submissions and reviews.

    Attributes:
        db: Async database session.
        delay_days: Days without an upload after which an incomplete
            portfolio is reported as delayed.
    """

    def __init__(self, db: AsyncSession, delay_days: int | None = None) -> None:
        """Initialize portfolio service.

        Args:
            db: Async database session.
            delay_days: Stalled-portfolio window, defaults to the configured one.
        """
        self.db = db
        self.delay_days = (
            delay_days if delay_days is not None else get_settings().campus.portfolio_delay_days
        )

    # =========================================================================
    # Tasks
    # =========================================================================

    async def create_task(self, request: CreateTaskRequest) -> TaskResponse:
        """Define a new task for a course.

        Adding a task to a course re-locks nobody; students already unlocked
        keep their certificate.

        Raises:
            CourseNotFoundError: If the course does not exist.
        """
        await self._get_course(request.course_id)

        task = PortfolioTask(
            course_id=request.course_id,
            title=request.title.strip(),
            description=request.description,
            order=request.order,
        )
        self.db.add(task)
        await self.db.commit()
        await self.db.refresh(task)

        logger.info("Created portfolio task: task=%s, course=%s", task.id, task.course_id)

        return TaskResponse.model_validate(task)

    async def update_task(self, task_id: str, request: UpdateTaskRequest) -> TaskResponse:
        """Update a task definition.

        Raises:
            TaskNotFoundError: If the task does not exist.
            CourseNotFoundError: If moved to a course that does not exist.
            InvalidStateError: If the course changes while submissions exist.
        """
        task = await self._get_task(task_id)
        changes = request.model_dump(exclude_unset=True, exclude_none=True)

        new_course = changes.get("course_id")
        if new_course and new_course != task.course_id:
            await self._get_course(new_course)
            if await self._submission_count(task_id) > 0:
                raise InvalidStateError(
                    "Task course cannot change once work has been submitted",
                    {"task_id": task_id, "course_id": task.course_id},
                )

        if "title" in changes:
            changes["title"] = changes["title"].strip()
        for field, value in changes.items():
            setattr(task, field, value)

        await self.db.commit()
        await self.db.refresh(task)

        logger.info("Updated portfolio task: task=%s, fields=%s", task_id, sorted(changes))

        return TaskResponse.model_validate(task)

    async def list_course_tasks(self, course_id: str) -> list[TaskResponse]:
        """Tasks of a course in display order.

        Raises:
            CourseNotFoundError: If the course does not exist.
        """
        await self._get_course(course_id)
        tasks = await self._course_tasks(course_id)
        return [TaskResponse.model_validate(t) for t in tasks]

    # =========================================================================
    # Submissions
    # =========================================================================

    async def submit_work(self, request: SubmitWorkRequest) -> SubmissionResponse:
        """Record a new upload for a task.

        Always creates a new PENDING submission; earlier ones, rejected or
        not, stay as history.

        Raises:
            ValidationError: If the work URL is empty or the task belongs to
                another course.
            UnknownTaskError: If the task does not exist.
            StudentNotFoundError: If the student does not exist.
        """
        work_url = request.work_url.strip()
        if not work_url:
            raise ValidationError("Work URL is required")

        task = await self.db.get(PortfolioTask, request.task_id)
        if task is None:
            raise UnknownTaskError(request.task_id)

        student = await self._get_student(request.student_id)
        if student.course_id != task.course_id:
            raise ValidationError(
                "Task does not belong to the student's course",
                {"task_id": task.id, "student_course_id": student.course_id},
            )

        submission = PortfolioSubmission(
            student_id=student.id,
            task_id=task.id,
            work_url=work_url,
            remarks=request.remarks,
            status=SubmissionStatus.PENDING,
            submitted_at=utc_now(),
        )
        self.db.add(submission)
        await self.db.commit()
        await self.db.refresh(submission)

        logger.info(
            "Portfolio work submitted: submission=%s, student=%s, task=%s",
            submission.id,
            student.id,
            task.id,
        )

        return SubmissionResponse.model_validate(submission)

    async def review_submission(
        self,
        submission_id: str,
        request: ReviewSubmissionRequest,
    ) -> ReviewResponse:
        """Approve or reject a pending submission.

        The transition is a conditional UPDATE guarded on PENDING, so two
        reviewers racing on one submission cannot both succeed. Re-sending
        the decision a submission already carries returns it unchanged.
        Approval re-runs the certificate cascade in the same transaction.

        Args:
            submission_id: Submission identifier.
            request: Decision, remarks and reviewer.

        Returns:
            The reviewed submission and whether the certificate was unlocked.

        Raises:
            InvalidStateError: If the decision is not APPROVED or REJECTED,
                or the submission already carries the other decision.
            SubmissionNotFoundError: If the submission does not exist.
        """
        decision = self._parse_decision(request.status)

        values: dict = {
            "status": decision,
            "reviewer_id": request.reviewer_id,
            "reviewed_at": utc_now(),
        }
        if request.remarks is not None:
            values["remarks"] = request.remarks
        if decision is SubmissionStatus.REJECTED:
            values["rejection_count"] = _prior_rejections() + 1

        result = await self.db.execute(
            update(PortfolioSubmission)
            .where(
                PortfolioSubmission.id == submission_id,
                PortfolioSubmission.status == SubmissionStatus.PENDING,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        transitioned = result.rowcount == 1

        submission = await self._get_submission(submission_id)
        if not transitioned and submission.status != decision:
            await self.db.rollback()
            raise InvalidStateError(
                f"Submission is already {submission.status}",
                {"submission_id": submission_id, "status": str(submission.status)},
            )

        unlocked = False
        if decision is SubmissionStatus.APPROVED:
            task = await self._get_task(submission.task_id)
            unlocked = await unlock_certificate_if_complete(
                self.db, submission.student_id, task.course_id
            )

        response = ReviewResponse(
            submission=SubmissionResponse.model_validate(submission),
            certificate_unlocked=unlocked,
        )
        await self.db.commit()

        if transitioned:
            logger.info(
                "Submission reviewed: submission=%s, status=%s, by=%s",
                submission_id,
                decision,
                request.reviewer_id,
            )
        else:
            logger.info(
                "Review retry ignored: submission=%s, status=%s",
                submission_id,
                decision,
            )

        return response

    # =========================================================================
    # Views
    # =========================================================================

    async def get_student_portfolio(self, student_id: str) -> StudentPortfolioResponse:
        """Every task of the student's course merged with its submission.

        Raises:
            StudentNotFoundError: If the student does not exist.
        """
        student = await self._get_student(student_id)
        tasks = await self._course_tasks(student.course_id)

        result = await self.db.execute(
            select(PortfolioSubmission).where(
                PortfolioSubmission.student_id == student_id,
                PortfolioSubmission.task_id.in_([t.id for t in tasks]),
            )
        )
        by_task: dict[str, list[PortfolioSubmission]] = {}
        for submission in result.scalars().all():
            by_task.setdefault(submission.task_id, []).append(submission)

        items: list[TaskProgressItem] = []
        for task in tasks:
            history = by_task.get(task.id, [])
            chosen = representative_submission(history)
            items.append(
                TaskProgressItem(
                    task_id=task.id,
                    title=task.title,
                    description=task.description,
                    order=task.order,
                    status=task_progress(chosen),
                    submission=SubmissionResponse.model_validate(chosen) if chosen else None,
                    rejection_count=sum(
                        1 for s in history if s.status == SubmissionStatus.REJECTED
                    ),
                )
            )

        approved = sum(1 for i in items if i.status is TaskProgress.APPROVED)

        return StudentPortfolioResponse(
            student_id=student.id,
            course_id=student.course_id,
            tasks=items,
            total_tasks=len(tasks),
            approved_tasks=approved,
            pending_tasks=sum(1 for i in items if i.status is TaskProgress.PENDING),
            rejected_tasks=sum(1 for i in items if i.status is TaskProgress.REJECTED),
            completion_rate=percent(approved, len(tasks)),
            certificate_locked=student.certificate_locked,
        )

    async def get_batch_portfolio_stats(self, batch_id: str) -> BatchPortfolioStatsResponse:
        """Portfolio completion overview of the active students of a batch.

        Each student is measured against the tasks of their own course, as
        the eligibility evaluator does. A student is delayed when their
        portfolio is incomplete and they have not uploaded anything within
        the configured window.

        Raises:
            BatchNotFoundError: If the batch does not exist.
        """
        batch = await self.db.get(Batch, batch_id)
        if batch is None:
            raise BatchNotFoundError(batch_id)

        result = await self.db.execute(
            select(Student)
            .where(Student.batch_id == batch_id, Student.is_active.is_(True))
            .order_by(Student.enrollment_number)
            .execution_options(populate_existing=True)
        )
        students = list(result.scalars().all())
        ids = [s.id for s in students]

        course_ids = {batch.course_id, *(s.course_id for s in students)}
        task_counts = await self._task_counts(course_ids)
        approved = await self._per_student(
            func.count(distinct(PortfolioSubmission.task_id)),
            ids,
            PortfolioSubmission.status == SubmissionStatus.APPROVED,
        )
        pending = await self._per_student(
            func.count(PortfolioSubmission.id),
            ids,
            PortfolioSubmission.status == SubmissionStatus.PENDING,
        )
        last_upload = await self._per_student(func.max(PortfolioSubmission.submitted_at), ids)

        cutoff = utc_now() - timedelta(days=self.delay_days)
        rows: list[StudentPortfolioStats] = []
        for student in students:
            total = task_counts.get(student.course_id, 0)
            done = approved.get(student.id, 0)
            rate = percent(done, total)
            last: datetime | None = ensure_utc(last_upload.get(student.id))
            rows.append(
                StudentPortfolioStats(
                    student_id=student.id,
                    student_name=student.full_name,
                    enrollment_number=student.enrollment_number,
                    approved_tasks=done,
                    total_tasks=total,
                    pending_review=pending.get(student.id, 0),
                    completion_rate=rate,
                    last_upload_at=last,
                    delayed=rate < PORTFOLIO_COMPLETE and (last is None or last < cutoff),
                    certificate_locked=student.certificate_locked,
                    placement_eligible=student.placement_eligible,
                )
            )

        return BatchPortfolioStatsResponse(
            batch_id=batch_id,
            total_tasks=task_counts.get(batch.course_id, 0),
            students=rows,
            total_students=len(rows),
            completed_students=sum(1 for r in rows if r.completion_rate >= PORTFOLIO_COMPLETE),
            students_pending_review=sum(1 for r in rows if r.pending_review > 0),
            students_delayed=sum(1 for r in rows if r.delayed),
            overall_completion_rate=percent(
                sum(r.approved_tasks for r in rows), sum(r.total_tasks for r in rows)
            ),
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _parse_decision(status: str) -> SubmissionStatus:
        """Accept only the terminal review decisions.

        Raises:
            InvalidStateError: For PENDING or any unknown value.
        """
        try:
            decision = SubmissionStatus(status)
        except ValueError:
            decision = None
        if decision is None or not decision.is_terminal:
            raise InvalidStateError(
                f"Invalid review status '{status}'",
                {"allowed": [SubmissionStatus.APPROVED.value, SubmissionStatus.REJECTED.value]},
            )
        return decision

    async def _per_student(self, aggregate, student_ids: list[str], *criteria) -> dict:
        """Run a per-student aggregate over submissions to tasks of the student's course."""
        if not student_ids:
            return {}
        result = await self.db.execute(
            select(PortfolioSubmission.student_id, aggregate)
            .join(PortfolioTask, PortfolioTask.id == PortfolioSubmission.task_id)
            .join(Student, Student.id == PortfolioSubmission.student_id)
            .where(
                PortfolioSubmission.student_id.in_(student_ids),
                PortfolioTask.course_id == Student.course_id,
                *criteria,
            )
            .group_by(PortfolioSubmission.student_id)
        )
        return {student_id: value for student_id, value in result.all()}

    async def _task_counts(self, course_ids: set[str]) -> dict[str, int]:
        """Number of tasks per course."""
        result = await self.db.execute(
            select(PortfolioTask.course_id, func.count(PortfolioTask.id))
            .where(PortfolioTask.course_id.in_(course_ids))
            .group_by(PortfolioTask.course_id)
        )
        return {course_id: count for course_id, count in result.all()}

    async def _course_tasks(self, course_id: str) -> list[PortfolioTask]:
        """Tasks of a course in display order."""
        result = await self.db.execute(
            select(PortfolioTask)
            .where(PortfolioTask.course_id == course_id)
            .order_by(PortfolioTask.order, PortfolioTask.created_at)
        )
        return list(result.scalars().all())

    async def _submission_count(self, task_id: str) -> int:
        result = await self.db.execute(
            select(func.count(PortfolioSubmission.id)).where(PortfolioSubmission.task_id == task_id)
        )
        return result.scalar_one()

    async def _get_course(self, course_id: str) -> Course:
        """Get course by ID.

        Raises:
            CourseNotFoundError: If not found.
        """
        course = await self.db.get(Course, course_id)
        if course is None:
            raise CourseNotFoundError(course_id)
        return course

    async def _get_task(self, task_id: str) -> PortfolioTask:
        """Get task by ID.

        Raises:
            TaskNotFoundError: If not found.
        """
        task = await self.db.get(PortfolioTask, task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    async def _get_student(self, student_id: str) -> Student:
        """Get student by ID.

        Raises:
            StudentNotFoundError: If not found.
        """
        result = await self.db.execute(
            select(Student)
            .where(Student.id == student_id)
            .execution_options(populate_existing=True)
        )
        student = result.scalar_one_or_none()

        if not student:
            raise StudentNotFoundError(student_id)

        return student

    async def _get_submission(self, submission_id: str) -> PortfolioSubmission:
        """Get submission by ID, reloading any cached copy.

        Raises:
            SubmissionNotFoundError: If not found.
        """
        result = await self.db.execute(
            select(PortfolioSubmission)
            .where(PortfolioSubmission.id == submission_id)
            .execution_options(populate_existing=True)
        )
        submission = result.scalar_one_or_none()

        if not submission:
            raise SubmissionNotFoundError(submission_id)

        return submission
