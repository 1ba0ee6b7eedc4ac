"""Base CRUD Repository: Parent class for all domain repositories.

Provides generic create and read operations. Records of the approval
workflow are never deleted, so deletion lives only where a domain allows it.

Usage:
    class ShiftTemplateRepository(BaseRepository[ShiftTemplate]):
        def __init__(self) -> None:
            super().__init__(ShiftTemplate)
"""

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.database import Base
from shopshift.utils.exceptions import DuplicateError

# Generic type variable representing a SQLAlchemy model
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Generic repository providing common database operations.

    Attributes:
        model: The SQLAlchemy model class
    """

    def __init__(self, model: type[ModelType]) -> None:
        """Initialize the repository with a model class.

        Args:
            model: SQLAlchemy model class this repository manages
        """
        self.model: type[ModelType] = model

    async def get_by_id(
        self,
        db: AsyncSession,
        record_id: UUID,
    ) -> ModelType | None:
        """Retrieve a single record by its UUID.

        Args:
            db: Async database session
            record_id: UUID of the record to retrieve

        Returns:
            ModelType | None: Found record or None
        """
        result = await db.execute(select(self.model).where(self.model.id == record_id))
        return result.scalar_one_or_none()

    async def get_many(
        self,
        db: AsyncSession,
        record_ids: set[UUID],
    ) -> dict[UUID, ModelType]:
        """Fetch several records at once, keyed by id.

        Used to enrich responses without one query per reference.

        Args:
            db: Async database session
            record_ids: UUIDs to fetch; unknown ids are simply absent

        Returns:
            dict[UUID, ModelType]: Records keyed by their id
        """
        if not record_ids:
            return {}
        result = await db.execute(select(self.model).where(self.model.id.in_(record_ids)))
        return {record.id: record for record in result.scalars().all()}

    async def create(
        self,
        db: AsyncSession,
        obj_data: dict[str, Any],
        duplicate_detail: str = "Resource already exists",
    ) -> ModelType:
        """Create a new record in the database.

        A unique-index violation at flush time is reported as DuplicateError.
        The session must then be discarded; the request's transaction is
        never committed.

        Args:
            db: Async database session
            obj_data: Dictionary of data for the new record
            duplicate_detail: Message used when a unique index rejects the row

        Returns:
            ModelType: The created record

        Raises:
            DuplicateError: When a unique constraint rejects the row
        """
        db_obj: ModelType = self.model(**obj_data)
        db.add(db_obj)
        try:
            await db.flush()
        except IntegrityError:
            raise DuplicateError(duplicate_detail)
        await db.refresh(db_obj)
        return db_obj
