"""Unit of Work implementation for the validator store."""

import asyncio
from collections.abc import Callable
from types import TracebackType
from typing import Any, Self

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel

from chain_tracker.db.repositories import ValidatorRepository

# Type alias for UoW factory function
UOWFactoryType = Callable[[], "UnitOfWork"]


def setup_db_engine(
    db_connection: str,
    engine_kwargs: dict[str, Any] | None = None,
) -> AsyncEngine:
    """Create a SQLAlchemy async engine. No connection is opened here."""
    return create_async_engine(db_connection, **(engine_kwargs or {}))


class UnitOfWorkFactory:
    """Produces UnitOfWork instances bound to one shared engine."""

    def __init__(
        self,
        engine: AsyncEngine,
        session_kwargs: dict[str, Any] | None = None,
    ) -> None:
        self.engine = engine
        self._session_factory = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            **{"expire_on_commit": False, **(session_kwargs or {})},
        )

    def __call__(self) -> "UnitOfWork":
        return UnitOfWork(self._session_factory)

    async def create_schema(self) -> None:
        """Create missing tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


def create_uow_factory(
    db_connection: str,
    session_kwargs: dict[str, Any] | None = None,
    engine_kwargs: dict[str, Any] | None = None,
) -> UnitOfWorkFactory:
    """Create a factory that produces UnitOfWork instances.

    Args:
        db_connection: Database connection string
        session_kwargs: Additional kwargs for async_sessionmaker (optional)
        engine_kwargs: Additional kwargs for create_async_engine (optional)

    Returns:
        A callable factory that creates UnitOfWork instances
    """
    engine = setup_db_engine(db_connection, engine_kwargs=engine_kwargs)
    return UnitOfWorkFactory(engine, session_kwargs=session_kwargs)


class UnitOfWork:
    """Unit of Work for the validator store.

    Repositories:
        - validators: Validator records of every chain

    Usage:
        async with uow_factory() as uow:
            validators = await uow.validators.get_by_chain("osmosis")
    """

    validators: ValidatorRepository

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory: async_sessionmaker[AsyncSession] = session_factory

    async def __aenter__(self) -> Self:
        self._session: AsyncSession = self._session_factory()
        self.validators = ValidatorRepository(self._session)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Commits if no exception occurred, otherwise rolls back. Always closes the session."""
        try:
            if exc_val:
                await self.rollback()
            else:
                await self.commit()
        finally:
            await self._close()

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()

    async def _close(self) -> None:
        # Shielded so that a cancelled task still returns its connection to the pool.
        await asyncio.shield(self._session.close())
