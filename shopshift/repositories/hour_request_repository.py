"""Hour Request Repository: worker request queries."""

from datetime import date
from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.models.hour_request import PENDING, SWITCH_REQUEST, HourRequest
from shopshift.repositories.base import BaseRepository


class HourRequestRepository(BaseRepository[HourRequest]):
    """Hour request repository.

    Extends:
        BaseRepository[HourRequest]
    """

    def __init__(self) -> None:
        super().__init__(HourRequest)

    async def find_pending(
        self,
        db: AsyncSession,
        worker_id: UUID,
        shift_template_id: UUID,
        request_date: date,
    ) -> HourRequest | None:
        """Find the pending request for a (worker, template, date) tuple, if any."""
        result = await db.execute(
            select(HourRequest).where(
                HourRequest.worker_id == worker_id,
                HourRequest.shift_template_id == shift_template_id,
                HourRequest.date == request_date,
                HourRequest.status == PENDING,
            )
        )
        return result.scalar_one_or_none()

    async def get_pending(self, db: AsyncSession) -> Sequence[HourRequest]:
        """Retrieve every pending request, oldest first (manager review queue)."""
        result = await db.execute(
            select(HourRequest)
            .where(HourRequest.status == PENDING)
            .order_by(HourRequest.created_at)
        )
        return result.scalars().all()

    async def get_for_worker(self, db: AsyncSession, worker_id: UUID) -> Sequence[HourRequest]:
        """Retrieve a worker's own requests, newest first."""
        result = await db.execute(
            select(HourRequest)
            .where(HourRequest.worker_id == worker_id)
            .order_by(HourRequest.created_at.desc())
        )
        return result.scalars().all()

    async def get_pending_switches_for_target(
        self,
        db: AsyncSession,
        target_worker_id: UUID,
    ) -> list[HourRequest]:
        """Retrieve pending switch requests that name a worker as the swap target.

        The target lives inside the switch_details JSON document, which is
        matched after loading so the query stays portable across dialects.

        Args:
            db: Async database session
            target_worker_id: UUID of the worker asked to swap

        Returns:
            list[HourRequest]: Matching requests, oldest first
        """
        result = await db.execute(
            select(HourRequest)
            .where(
                HourRequest.request_type == SWITCH_REQUEST,
                HourRequest.status == PENDING,
            )
            .order_by(HourRequest.created_at)
        )
        target: str = str(target_worker_id)
        return [
            r for r in result.scalars().all()
            if (r.switch_details or {}).get("target_worker_id") == target
        ]


# Singleton instance
hour_request_repository: HourRequestRepository = HourRequestRepository()
