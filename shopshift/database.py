"""Database engine and session configuration module.

Sets up the async SQLAlchemy engine, session factory, and ORM base class
for the PostgreSQL database connection via asyncpg.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from shopshift.config import settings

# Async database engine
# pool_pre_ping=True: validates pooled connections before use
engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
    pool_size=5,
    max_overflow=10,
)

# expire_on_commit=False: attributes stay readable after commit without a refresh
async_session: async_sessionmaker[AsyncSession] = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base class for all ORM models.

    All models inherit from this class to register with the metadata.
    """

    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session for the duration of one request.

    Each request is one transaction: routers commit after the service
    returns, and a session closed without commit rolls back every
    flushed statement, so a failed guard never leaves a partial write.

    Yields:
        AsyncSession: SQLAlchemy async session instance
    """
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()
