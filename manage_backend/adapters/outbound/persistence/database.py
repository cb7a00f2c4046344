# manage_backend/adapters/outbound/persistence/database.py

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from manage_backend.adapters.outbound.persistence.models import Base

logger = logging.getLogger(__name__)


class Database:
    """
    Async engine and session factory built from the configured URL.

    The engine is created on first use, so building the application does
    not require a reachable database.
    """

    def __init__(self, url: str, *, echo: bool = False):
        self.url = url
        self.echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker] = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            logger.info(f"Connecting to database: {self.url.split('@')[-1]}")
            try:
                self._engine = create_async_engine(
                    self.url,
                    echo=self.echo,
                    pool_size=20,
                    max_overflow=10,
                    pool_timeout=30,
                    pool_recycle=1800,
                    pool_pre_ping=True,
                )
            except SQLAlchemyError as e:
                logger.error(f"Error connecting to database: {str(e)}")
                raise
            self._session_factory = async_sessionmaker(
                bind=self._engine,
                autoflush=False,
                expire_on_commit=False,
            )
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker:
        if self._session_factory is None:
            _ = self.engine
        return self._session_factory

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Provides an async session, committing on success and rolling back
        on any error.

        Example:
            ```python
            async with database.session() as db:
                users = await db.execute(select(User))
            ```
        """
        session = self.session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured")

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
