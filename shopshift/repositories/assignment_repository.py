"""Shift Assignment Repository: assignment queries.

Every read that feeds a listing excludes rejected rows; rejected rows are
history (declined or superseded) and are only reachable by id.
"""

from datetime import date
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.models.assignment import (
    PENDING_STATUSES,
    PENDING_WORKER_APPROVAL,
    REJECTED,
    ShiftAssignment,
)
from shopshift.repositories.base import BaseRepository


class AssignmentRepository(BaseRepository[ShiftAssignment]):
    """Shift assignment repository.

    Extends:
        BaseRepository[ShiftAssignment]
    """

    def __init__(self) -> None:
        super().__init__(ShiftAssignment)

    async def find_active(
        self,
        db: AsyncSession,
        worker_id: UUID,
        shift_template_id: UUID,
        shift_date: date,
    ) -> ShiftAssignment | None:
        """Find the non-rejected assignment for a (worker, template, date) tuple.

        The partial unique index guarantees there is at most one.

        Args:
            db: Async database session
            worker_id: Worker UUID
            shift_template_id: Template UUID
            shift_date: Calendar date

        Returns:
            ShiftAssignment | None: The active assignment, if any
        """
        result = await db.execute(
            select(ShiftAssignment).where(
                ShiftAssignment.worker_id == worker_id,
                ShiftAssignment.shift_template_id == shift_template_id,
                ShiftAssignment.date == shift_date,
                ShiftAssignment.status != REJECTED,
            )
        )
        return result.scalar_one_or_none()

    async def get_for_date(
        self,
        db: AsyncSession,
        shift_date: date,
    ) -> Sequence[ShiftAssignment]:
        """Retrieve all non-rejected assignments on a date."""
        result = await db.execute(
            select(ShiftAssignment)
            .where(
                ShiftAssignment.date == shift_date,
                ShiftAssignment.status != REJECTED,
            )
            .order_by(ShiftAssignment.assigned_at)
        )
        return result.scalars().all()

    async def get_for_worker(
        self,
        db: AsyncSession,
        worker_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Sequence[ShiftAssignment]:
        """Retrieve a worker's non-rejected assignments, optionally in an inclusive date range.

        Args:
            db: Async database session
            worker_id: Worker UUID
            start_date: Range start (inclusive), optional
            end_date: Range end (inclusive), optional

        Returns:
            Sequence[ShiftAssignment]: Assignments ordered by date
        """
        query: Select = select(ShiftAssignment).where(
            ShiftAssignment.worker_id == worker_id,
            ShiftAssignment.status != REJECTED,
        )
        if start_date is not None:
            query = query.where(ShiftAssignment.date >= start_date)
        if end_date is not None:
            query = query.where(ShiftAssignment.date <= end_date)

        result = await db.execute(query.order_by(ShiftAssignment.date, ShiftAssignment.assigned_at))
        return result.scalars().all()

    async def get_pending(
        self,
        db: AsyncSession,
        worker_id: UUID | None = None,
    ) -> Sequence[ShiftAssignment]:
        """Retrieve pending assignments.

        Args:
            db: Async database session
            worker_id: When given, only this worker's rows awaiting worker approval

        Returns:
            Sequence[ShiftAssignment]: Pending assignments ordered by date
        """
        query: Select = select(ShiftAssignment)
        if worker_id is None:
            query = query.where(ShiftAssignment.status.in_(PENDING_STATUSES))
        else:
            query = query.where(
                ShiftAssignment.worker_id == worker_id,
                ShiftAssignment.status == PENDING_WORKER_APPROVAL,
            )

        result = await db.execute(query.order_by(ShiftAssignment.date, ShiftAssignment.assigned_at))
        return result.scalars().all()


# Singleton instance
assignment_repository: AssignmentRepository = AssignmentRepository()
