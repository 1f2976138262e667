"""Avatar lifecycle: removal, retirement of superseded files, upload discard."""

from collections.abc import Callable

import structlog

from core.exceptions import NothingToDeleteError, UserNotFoundError
from domain.entities.avatar import StoredUpload
from domain.entities.user import User
from domain.repositories.avatar_storage import IAvatarCleanup, IAvatarStorage
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


class AvatarService:
    """Owns every deletion of avatar files.

    Files are only removed after the store no longer references them, so a
    failed commit can never leave a record pointing at a deleted file. The
    opposite case (an unreferenced file) is tolerated and retried through
    the cleanup queue.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        storage: IAvatarStorage,
        cleanup: IAvatarCleanup,
    ) -> None:
        self._uow_factory = uow_factory
        self._storage = storage
        self._cleanup = cleanup

    async def remove_avatar(self, user_id: str) -> User:
        """Clear the user's uploaded avatar and delete its file.

        Raises:
            UserNotFoundError: the record is gone
            NothingToDeleteError: no avatar, or only a default asset
        """
        async with self._uow_factory() as uow:
            user = await uow.users.get(user_id)
            if user is None:
                raise UserNotFoundError(user_id)

            reference = user.avatar
            if reference is None or not self._storage.is_managed(reference):
                raise NothingToDeleteError()

            user.avatar = None
            updated = await uow.users.upsert(user)
            await uow.commit()

        await self._delete_now(reference)
        return updated

    def retire(self, reference: str | None) -> None:
        """Schedule deletion of an avatar that was just replaced."""
        if reference and self._storage.is_managed(reference):
            self._cleanup.schedule(reference)

    async def discard(self, upload: StoredUpload) -> None:
        """Remove an upload whose profile update did not go through."""
        logger.info("upload_discarded", reference=upload.reference)
        await self._delete_now(upload.reference)

    async def _delete_now(self, reference: str) -> None:
        try:
            await self._storage.delete(reference)
        except OSError as e:
            logger.warning("avatar_delete_failed", reference=reference, error=str(e))
            self._cleanup.schedule(reference)
