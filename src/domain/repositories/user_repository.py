"""User repository protocol."""

from typing import Protocol

from domain.entities.user import User


class IUserRepository(Protocol):
    """Repository interface for User entities."""

    async def get(self, id: str) -> User | None:
        """Get a user by ID."""
        ...

    async def list(self) -> list[User]:
        """Get every user, in store order."""
        ...

    async def find_by_username(self, username: str) -> User | None:
        """Get a user by exact username."""
        ...

    async def upsert(self, user: User) -> User:
        """Insert a new user or replace the stored record with the same ID."""
        ...
