"""Avatar file storage protocol."""

from collections.abc import AsyncIterator
from typing import Protocol


class IAvatarStorage(Protocol):
    """Storage for avatar image files addressed by relative reference."""

    def is_managed(self, reference: str | None) -> bool:
        """True if the reference points into the managed avatar directory."""
        ...

    async def save(self, original_name: str, chunks: AsyncIterator[bytes], max_bytes: int) -> str:
        """Persist an upload under a generated name and return its reference.

        Raises ``OverflowError`` (after removing the partial file) when more
        than ``max_bytes`` bytes arrive.
        """
        ...

    async def delete(self, reference: str) -> bool:
        """Delete a managed file. Returns False if it was already gone."""
        ...

    async def exists(self, reference: str) -> bool:
        """True if the referenced managed file is on disk."""
        ...


class IAvatarCleanup(Protocol):
    """Deferred, retried deletion of avatar files."""

    def schedule(self, reference: str) -> None:
        """Queue a managed reference for deletion."""
        ...
