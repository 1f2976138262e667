"""Avatar upload intake: type and size checks, then persistence."""

from collections.abc import AsyncIterator, Sequence

import structlog

from core.exceptions import UploadRejectedError, UploadRejectReason
from domain.entities.avatar import StoredUpload
from domain.repositories.avatar_storage import IAvatarStorage

logger = structlog.get_logger()


class UploadReceiver:
    """Accepts a single avatar image and stores it under a generated name.

    The file is completely on disk before a reference is returned, so a user
    record can never point at a half-written upload.
    """

    def __init__(
        self,
        storage: IAvatarStorage,
        allowed_types: Sequence[str],
        max_bytes: int,
    ) -> None:
        self._storage = storage
        self._allowed_types = frozenset(t.lower() for t in allowed_types)
        self._max_bytes = max_bytes

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    async def receive(
        self,
        filename: str | None,
        content_type: str | None,
        chunks: AsyncIterator[bytes],
    ) -> StoredUpload | None:
        """Validate and persist one upload.

        An empty file name means the form carried no file; returns None.
        """
        if not filename:
            return None

        mime = (content_type or "").split(";", 1)[0].strip().lower()
        if mime not in self._allowed_types:
            logger.info("upload_rejected", reason=UploadRejectReason.UNSUPPORTED_TYPE, content_type=mime)
            raise UploadRejectedError(UploadRejectReason.UNSUPPORTED_TYPE)

        size = 0

        async def counted() -> AsyncIterator[bytes]:
            nonlocal size
            async for chunk in chunks:
                size += len(chunk)
                yield chunk

        try:
            reference = await self._storage.save(filename, counted(), self._max_bytes)
        except OverflowError:
            logger.info("upload_rejected", reason=UploadRejectReason.TOO_LARGE, limit=self._max_bytes)
            raise UploadRejectedError(UploadRejectReason.TOO_LARGE, self._max_bytes) from None

        logger.info("upload_stored", reference=reference, size=size, content_type=mime)
        return StoredUpload(
            reference=reference,
            original_name=filename,
            content_type=mime,
            size=size,
        )
