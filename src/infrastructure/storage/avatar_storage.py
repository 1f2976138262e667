"""Local-disk avatar storage."""

import re
import time
from collections.abc import AsyncIterator
from pathlib import Path

import aiofiles
import aiofiles.os

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_filename(original_name: str) -> str:
    """Reduce a client-supplied file name to a harmless basename."""
    base = original_name.replace("\\", "/").rsplit("/", 1)[-1]
    base = _UNSAFE_CHARS.sub("_", base).lstrip(".")
    return base[-100:] or "avatar"


class LocalAvatarStorage:
    """IAvatarStorage writing files into a single directory.

    References look like ``<url_prefix><millis>-<name>``; only references
    with that prefix that resolve inside the directory are managed.
    """

    def __init__(self, directory: Path, url_prefix: str = "/uploads/") -> None:
        self._dir = Path(directory)
        self._prefix = url_prefix if url_prefix.endswith("/") else f"{url_prefix}/"

    @property
    def directory(self) -> Path:
        return self._dir

    def is_managed(self, reference: str | None) -> bool:
        return self._resolve(reference) is not None

    def path_for(self, reference: str) -> Path:
        path = self._resolve(reference)
        if path is None:
            raise ValueError(f"not a managed avatar reference: {reference!r}")
        return path

    def _resolve(self, reference: str | None) -> Path | None:
        if not reference or not reference.startswith(self._prefix):
            return None
        name = reference[len(self._prefix):]
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            return None
        return self._dir / name

    async def save(self, original_name: str, chunks: AsyncIterator[bytes], max_bytes: int) -> str:
        name = f"{int(time.time() * 1000)}-{safe_filename(original_name)}"
        final_path = self._dir / name
        partial_path = self._dir / f".{name}.part"

        await aiofiles.os.makedirs(self._dir, exist_ok=True)
        written = 0
        try:
            async with aiofiles.open(partial_path, "wb") as f:
                async for chunk in chunks:
                    written += len(chunk)
                    if written > max_bytes:
                        raise OverflowError(f"upload exceeds {max_bytes} bytes")
                    await f.write(chunk)
            await aiofiles.os.replace(partial_path, final_path)
        except BaseException:
            try:
                await aiofiles.os.remove(partial_path)
            except FileNotFoundError:
                pass
            raise
        return f"{self._prefix}{name}"

    async def delete(self, reference: str) -> bool:
        try:
            await aiofiles.os.remove(self.path_for(reference))
        except FileNotFoundError:
            return False
        return True

    async def exists(self, reference: str) -> bool:
        path = self._resolve(reference)
        return path is not None and await aiofiles.os.path.isfile(path)
