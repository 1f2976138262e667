"""Background deletion of superseded avatar files."""

import asyncio
from dataclasses import dataclass

import structlog

from domain.repositories.avatar_storage import IAvatarStorage

logger = structlog.get_logger()


@dataclass
class _CleanupJob:
    reference: str
    attempts: int = 0


class AvatarCleanupQueue:
    """Retrying delete queue for avatar files nobody references any more.

    ``run`` is the long-lived worker started from the application lifespan.
    ``drain`` processes whatever is pending right now (shutdown, tests).
    References that still cannot be deleted after ``max_attempts`` are
    logged as orphaned and kept in ``orphans``.
    """

    def __init__(
        self,
        storage: IAvatarStorage,
        max_attempts: int = 3,
        retry_delay: float = 1.0,
    ) -> None:
        self._storage = storage
        self._max_attempts = max(1, max_attempts)
        self._retry_delay = retry_delay
        self._queue: asyncio.Queue[_CleanupJob] = asyncio.Queue()
        self.orphans: list[str] = []

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def schedule(self, reference: str) -> None:
        """Queue a managed avatar reference for deletion."""
        self._queue.put_nowait(_CleanupJob(reference))
        logger.debug("avatar_delete_scheduled", reference=reference)

    async def run(self) -> None:
        while True:
            job = await self._queue.get()
            try:
                await self._process(job, wait=True)
            finally:
                self._queue.task_done()

    async def drain(self) -> None:
        while not self._queue.empty():
            job = self._queue.get_nowait()
            try:
                await self._process(job, wait=False)
            finally:
                self._queue.task_done()

    async def _process(self, job: _CleanupJob, wait: bool) -> None:
        while True:
            job.attempts += 1
            try:
                deleted = await self._storage.delete(job.reference)
            except OSError as e:
                logger.warning(
                    "avatar_delete_failed",
                    reference=job.reference,
                    attempt=job.attempts,
                    error=str(e),
                )
                if job.attempts >= self._max_attempts:
                    self.orphans.append(job.reference)
                    logger.error(
                        "avatar_orphaned",
                        reference=job.reference,
                        attempts=job.attempts,
                    )
                    return
                if wait and self._retry_delay > 0:
                    await asyncio.sleep(self._retry_delay)
                continue
            logger.info(
                "avatar_deleted" if deleted else "avatar_already_gone",
                reference=job.reference,
            )
            return
