"""Session store protocol."""

from typing import Protocol

from domain.entities.session import Session


class ISessionStore(Protocol):
    """Opaque token -> session blob store.

    Implementations raise ``SessionStoreError`` on I/O failure; a missing
    token is not an error and yields ``None``.
    """

    async def get(self, token: str) -> Session | None:
        """Get a session by token."""
        ...

    async def set(self, session: Session) -> None:
        """Create or overwrite a session."""
        ...

    async def delete(self, token: str) -> None:
        """Delete a session; deleting an unknown token is a no-op."""
        ...

    async def purge_expired(self) -> int:
        """Delete every expired session and return how many were removed."""
        ...
