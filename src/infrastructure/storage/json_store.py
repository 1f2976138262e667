"""Flat-file JSON implementation of the credential store.

The whole user collection lives in one JSON array and every commit rewrites
it in full. Within one process, units of work on the same file are
serialised by a per-path lock held from load to commit, so a
read-check-write sequence cannot interleave with another writer. Separate
processes sharing the file are NOT coordinated: the later commit replaces
the whole collection (last write wins).
"""

import asyncio
import os
from pathlib import Path
from typing import Any, Optional

import aiofiles
import aiofiles.os
import orjson
import structlog

from core.exceptions import StoreError
from domain.entities.user import User

logger = structlog.get_logger()

# One writer lock per resolved store path
_locks: dict[Path, asyncio.Lock] = {}


def _lock_for(path: Path) -> asyncio.Lock:
    key = path.resolve()
    lock = _locks.get(key)
    if lock is None:
        lock = _locks[key] = asyncio.Lock()
    return lock


def user_from_record(record: dict[str, Any]) -> User:
    """Map a stored JSON record onto a User."""
    return User(
        id=str(record["id"]),
        username=record.get("username", ""),
        password=record.get("password", ""),
        email=record.get("email", ""),
        first_name=record.get("firstName", ""),
        last_name=record.get("lastName", ""),
        avatar=record.get("avatar"),
    )


def user_to_record(user: User) -> dict[str, Any]:
    """Map a User onto its stored JSON record."""
    return {
        "id": user.id,
        "username": user.username,
        "password": user.password,
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "avatar": user.avatar,
    }


class JsonUserRepository:
    """IUserRepository over an in-memory snapshot of the collection."""

    def __init__(self, users: list[User]) -> None:
        self._users = users

    async def get(self, id: str) -> User | None:
        """Get a user by ID."""
        for user in self._users:
            if user.id == id:
                return user.copy()
        return None

    async def list(self) -> list[User]:
        """Get every user, in store order."""
        return [user.copy() for user in self._users]

    async def find_by_username(self, username: str) -> User | None:
        """Get a user by exact username."""
        for user in self._users:
            if user.username == username:
                return user.copy()
        return None

    async def upsert(self, user: User) -> User:
        """Replace the record with the same ID in place, or append it."""
        for index, existing in enumerate(self._users):
            if existing.id == user.id:
                self._users[index] = user.copy()
                return user.copy()
        self._users.append(user.copy())
        return user.copy()


class JsonFileUnitOfWork:
    """Unit of Work over a JSON file holding the whole user collection."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._lock = _lock_for(self._path)
        self._snapshot: Optional[list[User]] = None
        self._working: Optional[list[User]] = None

    @property
    def users(self) -> JsonUserRepository:
        """Get user repository."""
        if self._working is None:
            raise RuntimeError("UnitOfWork not initialized. Use as context manager.")
        return JsonUserRepository(self._working)

    async def _load(self) -> list[User]:
        if not await aiofiles.os.path.exists(self._path):
            logger.info("user_store_missing", path=str(self._path))
            return []
        try:
            async with aiofiles.open(self._path, "rb") as f:
                raw = await f.read()
            records = orjson.loads(raw) if raw.strip() else []
            if not isinstance(records, list):
                raise ValueError("user store must hold a JSON array")
            return [user_from_record(record) for record in records]
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise StoreError(f"failed to read {self._path}: {e}") from e

    async def _write(self, users: list[User]) -> None:
        payload = orjson.dumps(
            [user_to_record(user) for user in users],
            option=orjson.OPT_INDENT_2,
        )
        tmp_path = self._path.with_name(f".{self._path.name}.{os.getpid()}.tmp")
        try:
            await aiofiles.os.makedirs(self._path.parent, exist_ok=True)
            async with aiofiles.open(tmp_path, "wb") as f:
                await f.write(payload)
            await aiofiles.os.replace(tmp_path, self._path)
        except OSError as e:
            raise StoreError(f"failed to write {self._path}: {e}") from e

    async def commit(self) -> None:
        """Rewrite the whole collection."""
        if self._working is None:
            return
        await self._write(self._working)
        self._snapshot = [user.copy() for user in self._working]

    async def rollback(self) -> None:
        """Discard uncommitted changes."""
        if self._snapshot is not None:
            self._working = [user.copy() for user in self._snapshot]

    async def __aenter__(self) -> "JsonFileUnitOfWork":
        """Take the writer lock and load the collection."""
        await self._lock.acquire()
        try:
            self._snapshot = await self._load()
        except BaseException:
            self._lock.release()
            raise
        self._working = [user.copy() for user in self._snapshot]
        return self

    async def __aexit__(self, exc_type: Optional[type], exc_val: Optional[Exception], exc_tb: Any) -> None:
        """Discard anything uncommitted and release the writer lock."""
        try:
            if exc_type:
                await self.rollback()
        finally:
            self._snapshot = None
            self._working = None
            self._lock.release()
