"""Unit of Work protocol for the credential store."""

from types import TracebackType
from typing import Protocol

from domain.repositories.user_repository import IUserRepository


class IUnitOfWork(Protocol):
    """One read-check-write cycle against the credential store.

    Everything done through ``users`` inside an ``async with`` block is
    applied atomically on ``commit`` or not at all. Implementations must
    make the block exclusive with respect to other writers, either by
    holding a lock for its whole duration (JSON file) or by relying on
    database constraints (SQL), so that a uniqueness check and the write
    that follows it cannot interleave with another update.
    """

    @property
    def users(self) -> IUserRepository: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...

    async def __aenter__(self) -> "IUnitOfWork": ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None: ...
