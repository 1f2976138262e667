"""Dependency injection factories for the API."""

from functools import lru_cache
from typing import Callable

from core.config import settings
from domain.repositories.session_store import ISessionStore
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.auth_service import AuthService
from domain.services.avatar_service import AvatarService
from domain.services.profile_service import ProfileService
from domain.services.session_service import SessionManager
from domain.services.upload_service import UploadReceiver
from infrastructure.database.session import get_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.sessions.file_store import FileSessionStore
from infrastructure.sessions.memory_store import InMemorySessionStore
from infrastructure.storage.avatar_storage import LocalAvatarStorage
from infrastructure.storage.cleanup import AvatarCleanupQueue
from infrastructure.storage.json_store import JsonFileUnitOfWork


def get_uow_factory() -> Callable[[], IUnitOfWork]:
    """Factory for creating Unit of Work instances for the configured backend."""
    if settings.store_backend == "sql":
        session_factory = get_session_factory()

        def sql_factory() -> SQLAlchemyUnitOfWork:
            return SQLAlchemyUnitOfWork(session_factory)

        return sql_factory

    users_file = settings.users_file

    def json_factory() -> JsonFileUnitOfWork:
        return JsonFileUnitOfWork(users_file)

    return json_factory


@lru_cache
def get_session_store() -> ISessionStore:
    """Get the session store for the configured backend."""
    if settings.session_backend == "memory":
        return InMemorySessionStore()
    return FileSessionStore(settings.sessions_dir)


@lru_cache
def get_avatar_storage() -> LocalAvatarStorage:
    """Get avatar file storage."""
    return LocalAvatarStorage(settings.avatar_dir, settings.avatar_url_prefix)


@lru_cache
def get_cleanup_queue() -> AvatarCleanupQueue:
    """Get the avatar cleanup queue."""
    return AvatarCleanupQueue(
        get_avatar_storage(),
        max_attempts=settings.avatar_cleanup_max_attempts,
        retry_delay=settings.avatar_cleanup_retry_delay,
    )


@lru_cache
def get_auth_service() -> AuthService:
    """Get Auth service instance."""
    return AuthService(get_uow_factory())


@lru_cache
def get_session_manager() -> SessionManager:
    """Get Session manager instance."""
    return SessionManager(
        get_session_store(),
        get_uow_factory(),
        ttl_seconds=settings.session_ttl_seconds,
    )


@lru_cache
def get_upload_receiver() -> UploadReceiver:
    """Get avatar Upload receiver instance."""
    return UploadReceiver(
        get_avatar_storage(),
        allowed_types=settings.avatar_allowed_types_list,
        max_bytes=settings.avatar_max_bytes,
    )


@lru_cache
def get_avatar_service() -> AvatarService:
    """Get Avatar service instance."""
    return AvatarService(
        get_uow_factory(),
        storage=get_avatar_storage(),
        cleanup=get_cleanup_queue(),
    )


@lru_cache
def get_profile_service() -> ProfileService:
    """Get Profile service instance."""
    return ProfileService(get_uow_factory(), avatars=get_avatar_service())
