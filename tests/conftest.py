"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from typing import Any

# Keep the process-wide defaults away from real directories
os.environ["SESSION_BACKEND"] = "memory"
os.environ["APP_ENV"] = "test"

import orjson
import pytest
from httpx import ASGITransport, AsyncClient

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.services.auth_service import AuthService
from domain.services.avatar_service import AvatarService
from domain.services.profile_service import ProfileService
from domain.services.session_service import SessionManager
from domain.services.upload_service import UploadReceiver
from infrastructure.sessions.memory_store import InMemorySessionStore
from infrastructure.storage.avatar_storage import LocalAvatarStorage
from infrastructure.storage.cleanup import AvatarCleanupQueue
from infrastructure.storage.json_store import JsonFileUnitOfWork

MAX_AVATAR_BYTES = 2 * 1024 * 1024
DEFAULT_AVATAR = "/images/default-avatar.png"

SEED_USERS: list[dict[str, Any]] = [
    {
        "id": "1",
        "username": "alice",
        "password": "secret",
        "email": "alice@example.com",
        "firstName": "Alice",
        "lastName": "Liddell",
        "avatar": None,
    },
    {
        "id": "2",
        "username": "bob",
        "password": "hunter2",
        "email": "bob@example.com",
        "firstName": "Bob",
        "lastName": "Builder",
        "avatar": DEFAULT_AVATAR,
    },
]


def read_users(path: Path) -> list[dict[str, Any]]:
    """Load the raw user collection from disk."""
    return orjson.loads(path.read_bytes())


@pytest.fixture
def users_file(tmp_path: Path) -> Path:
    """A seeded JSON credential store."""
    path = tmp_path / "users.json"
    path.write_bytes(orjson.dumps(SEED_USERS, option=orjson.OPT_INDENT_2))
    return path


@pytest.fixture
def uow_factory(users_file: Path) -> Callable[[], JsonFileUnitOfWork]:
    """Unit of Work factory over the seeded store."""

    def factory() -> JsonFileUnitOfWork:
        return JsonFileUnitOfWork(users_file)

    return factory


@pytest.fixture
def avatar_storage(tmp_path: Path) -> LocalAvatarStorage:
    """Avatar storage in a temporary uploads directory."""
    return LocalAvatarStorage(tmp_path / "uploads", "/uploads/")


@pytest.fixture
def cleanup_queue(avatar_storage: LocalAvatarStorage) -> AvatarCleanupQueue:
    """Cleanup queue that retries without sleeping."""
    return AvatarCleanupQueue(avatar_storage, max_attempts=2, retry_delay=0)


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def session_manager(
    session_store: InMemorySessionStore,
    uow_factory: Callable[[], JsonFileUnitOfWork],
) -> SessionManager:
    return SessionManager(session_store, uow_factory, ttl_seconds=3600)


@pytest.fixture
def avatar_service(
    uow_factory: Callable[[], JsonFileUnitOfWork],
    avatar_storage: LocalAvatarStorage,
    cleanup_queue: AvatarCleanupQueue,
) -> AvatarService:
    return AvatarService(uow_factory, storage=avatar_storage, cleanup=cleanup_queue)


@pytest.fixture
async def client(
    uow_factory: Callable[[], JsonFileUnitOfWork],
    avatar_storage: LocalAvatarStorage,
    cleanup_queue: AvatarCleanupQueue,
    session_store: InMemorySessionStore,
    session_manager: SessionManager,
    avatar_service: AvatarService,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client wired to temporary stores.

    This client:
    - Uses a seeded JSON user file under tmp_path
    - Keeps sessions in memory
    - Writes avatars into tmp_path/uploads
    - Overrides every service factory with those instances
    """
    from api.dependencies.services import (
        get_auth_service,
        get_avatar_service,
        get_cleanup_queue,
        get_profile_service,
        get_session_manager,
        get_session_store,
        get_uow_factory,
        get_upload_receiver,
    )
    from main import create_app

    app = create_app()

    app.dependency_overrides[get_uow_factory] = lambda: uow_factory
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_cleanup_queue] = lambda: cleanup_queue
    app.dependency_overrides[get_auth_service] = lambda: AuthService(uow_factory)
    app.dependency_overrides[get_session_manager] = lambda: session_manager
    app.dependency_overrides[get_upload_receiver] = lambda: UploadReceiver(
        avatar_storage,
        allowed_types=["image/jpeg", "image/png", "image/webp"],
        max_bytes=MAX_AVATAR_BYTES,
    )
    app.dependency_overrides[get_avatar_service] = lambda: avatar_service
    app.dependency_overrides[get_profile_service] = lambda: ProfileService(
        uow_factory, avatars=avatar_service
    )

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
async def alice_client(client: AsyncClient) -> AsyncClient:
    """Test client already logged in as alice."""
    response = await client.post(
        "/api/login", json={"username": "alice", "password": "secret"}
    )
    assert response.status_code == 200
    return client
