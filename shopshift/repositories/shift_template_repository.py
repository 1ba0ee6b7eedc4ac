"""Shift Template Repository: template lookups and lifecycle queries."""

from typing import Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.models.assignment import ShiftAssignment
from shopshift.models.shift_template import ShiftTemplate
from shopshift.repositories.base import BaseRepository


class ShiftTemplateRepository(BaseRepository[ShiftTemplate]):
    """Shift template repository.

    Extends:
        BaseRepository[ShiftTemplate]
    """

    def __init__(self) -> None:
        super().__init__(ShiftTemplate)

    async def get_active(self, db: AsyncSession) -> Sequence[ShiftTemplate]:
        """Retrieve active templates ordered by opening time, then name.

        Args:
            db: Async database session

        Returns:
            Sequence[ShiftTemplate]: Active templates
        """
        result = await db.execute(
            select(ShiftTemplate)
            .where(ShiftTemplate.is_active.is_(True))
            .order_by(ShiftTemplate.open_time, ShiftTemplate.name)
        )
        return result.scalars().all()

    async def count_assignments(self, db: AsyncSession, template_id: UUID) -> int:
        """Count assignments (any status) that reference a template."""
        result = await db.execute(
            select(func.count())
            .select_from(ShiftAssignment)
            .where(ShiftAssignment.shift_template_id == template_id)
        )
        return result.scalar() or 0

    async def delete(self, db: AsyncSession, template: ShiftTemplate) -> None:
        """Hard-delete a template that nothing references."""
        await db.delete(template)
        await db.flush()


# Singleton instance
shift_template_repository: ShiftTemplateRepository = ShiftTemplateRepository()
