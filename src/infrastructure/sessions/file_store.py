"""File-backed session store: one JSON document per session token."""

import re
import uuid
from contextlib import suppress
from datetime import datetime
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os
import orjson
import structlog

from core.exceptions import SessionStoreError
from domain.entities.session import Session, utcnow

logger = structlog.get_logger()

# Tokens come from secrets.token_urlsafe; anything else never names a file
_TOKEN_RE = re.compile(r"^[A-Za-z0-9_-]{16,128}$")


def _to_document(session: Session) -> dict[str, Any]:
    return {
        "token": session.token,
        "user_id": session.user_id,
        "ttl_seconds": session.ttl_seconds,
        "created_at": session.created_at,
        "last_seen": session.last_seen,
    }


def _from_document(doc: dict[str, Any]) -> Session:
    return Session(
        token=doc["token"],
        user_id=str(doc["user_id"]),
        ttl_seconds=int(doc["ttl_seconds"]),
        created_at=datetime.fromisoformat(doc["created_at"]),
        last_seen=datetime.fromisoformat(doc["last_seen"]),
    )


class FileSessionStore:
    """ISessionStore persisting sessions under a directory."""

    def __init__(self, directory: Path) -> None:
        self._dir = Path(directory)

    def _path(self, token: str) -> Path | None:
        if not _TOKEN_RE.match(token):
            return None
        return self._dir / f"{token}.json"

    async def get(self, token: str) -> Session | None:
        path = self._path(token)
        if path is None:
            return None
        try:
            async with aiofiles.open(path, "rb") as f:
                raw = await f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise SessionStoreError(f"failed to read session file {path}: {e}") from e

        try:
            return _from_document(orjson.loads(raw))
        except (ValueError, KeyError, TypeError):
            logger.warning("session_file_corrupt", path=str(path))
            await self.delete(token)
            return None

    async def set(self, session: Session) -> None:
        path = self._path(session.token)
        if path is None:
            raise SessionStoreError(f"refusing to store malformed token {session.token!r}")
        # Concurrent requests touch the same session; each write gets its own temp file
        tmp_path = path.with_name(f".{session.token}.{uuid.uuid4().hex}.tmp")
        try:
            await aiofiles.os.makedirs(self._dir, exist_ok=True)
            async with aiofiles.open(tmp_path, "wb") as f:
                await f.write(orjson.dumps(_to_document(session)))
            await aiofiles.os.replace(tmp_path, path)
        except OSError as e:
            with suppress(OSError):
                await aiofiles.os.remove(tmp_path)
            raise SessionStoreError(f"failed to write session file {path}: {e}") from e

    async def delete(self, token: str) -> None:
        path = self._path(token)
        if path is None:
            return
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise SessionStoreError(f"failed to delete session file {path}: {e}") from e

    async def purge_expired(self) -> int:
        if not await aiofiles.os.path.isdir(self._dir):
            return 0
        try:
            names = await aiofiles.os.listdir(self._dir)
        except OSError as e:
            raise SessionStoreError(f"failed to list {self._dir}: {e}") from e

        now = utcnow()
        removed = 0
        for name in names:
            if not name.endswith(".json"):
                continue
            token = name[: -len(".json")]
            session = await self.get(token)
            if session is not None and session.is_expired(now):
                await self.delete(token)
                removed += 1
        return removed
