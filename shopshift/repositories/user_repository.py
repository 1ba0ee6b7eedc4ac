"""User Repository: user directory lookups."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shopshift.models.user import User
from shopshift.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """User repository with lookup by identity subject."""

    def __init__(self) -> None:
        super().__init__(User)

    async def get_by_external_id(
        self,
        db: AsyncSession,
        external_id: str,
    ) -> User | None:
        """Look up a user by identity provider subject.

        Args:
            db: Async database session
            external_id: Identity subject (JWT "sub")

        Returns:
            User | None: Matching user or None
        """
        result = await db.execute(select(User).where(User.external_id == external_id))
        return result.scalar_one_or_none()


# Singleton instance
user_repository: UserRepository = UserRepository()
