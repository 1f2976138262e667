"""Transactional access to the SQL credential store."""

from types import TracebackType

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from infrastructure.database.repositories.sqlalchemy_user_repo import (
    SQLAlchemyUserRepository,
    translate_errors,
)

logger = structlog.get_logger()


class SQLAlchemyUnitOfWork:
    """IUnitOfWork over one AsyncSession.

    Leaving the block without ``commit`` discards the changes, the same as
    the JSON backend. Username uniqueness is left to the database index.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._session: AsyncSession | None = None
        self._users: SQLAlchemyUserRepository | None = None
        self._committed = False

    @property
    def users(self) -> SQLAlchemyUserRepository:
        if self._users is None:
            raise RuntimeError("SQLAlchemyUnitOfWork must be entered with 'async with'")
        return self._users

    async def commit(self) -> None:
        if self._session is None:
            return
        with translate_errors():
            await self._session.commit()
        self._committed = True

    async def rollback(self) -> None:
        if self._session is None:
            return
        with translate_errors():
            await self._session.rollback()

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        self._session = self._session_factory()
        self._users = SQLAlchemyUserRepository(self._session)
        self._committed = False
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        session, self._session, self._users = self._session, None, None
        if session is None:
            return
        try:
            if exc_type is not None or not self._committed:
                await session.rollback()
                if exc_type is not None:
                    logger.debug("store_rolled_back", error_type=exc_type.__name__)
        finally:
            await session.close()
