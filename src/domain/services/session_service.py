"""Session lifecycle: establish, restore, rebind, invalidate."""

import secrets
from collections.abc import Callable

import structlog

from domain.entities.session import Session, SessionState
from domain.entities.user import User
from domain.repositories.session_store import ISessionStore
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()

TOKEN_BYTES = 32


class SessionManager:
    """Maps opaque session tokens to users across requests.

    The session only remembers the user id; ``restore`` always reloads the
    current record from the credential store.
    """

    def __init__(
        self,
        store: ISessionStore,
        uow_factory: Callable[[], IUnitOfWork],
        ttl_seconds: int = 86400,
    ) -> None:
        self._store = store
        self._uow_factory = uow_factory
        self._ttl_seconds = ttl_seconds

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    async def establish(self, user_id: str) -> Session:
        """Create an active session for the user."""
        session = Session(
            token=secrets.token_urlsafe(TOKEN_BYTES),
            user_id=user_id,
            ttl_seconds=self._ttl_seconds,
        )
        await self._store.set(session)
        logger.info("session_established", user_id=user_id)
        return session

    async def restore(self, token: str | None) -> User | None:
        """Resolve a token to the current user record.

        Returns None for every "not logged in" case: no token, unknown or
        expired session, or a session whose user has since disappeared.
        """
        if not token:
            return None

        session = await self._store.get(token)
        if session is None:
            return None

        if session.is_expired():
            await self._store.delete(token)
            logger.info("session_ended", user_id=session.user_id, state=SessionState.EXPIRED)
            return None

        async with self._uow_factory() as uow:
            user = await uow.users.get(session.user_id)

        if user is None:
            await self._store.delete(token)
            logger.warning("session_user_missing", user_id=session.user_id)
            return None

        session.touch()
        await self._store.set(session)
        return user

    async def rebind(self, token: str, user_id: str) -> None:
        """Re-stamp an existing session with the user's identity.

        A session that vanished meanwhile is not recreated.
        """
        session = await self._store.get(token)
        if session is None:
            return
        session.user_id = user_id
        session.touch()
        await self._store.set(session)

    async def invalidate(self, token: str | None) -> None:
        """Log the session out; unknown tokens are ignored."""
        if not token:
            return
        await self._store.delete(token)
        logger.info("session_ended", state=SessionState.LOGGED_OUT)

    async def purge_expired(self) -> int:
        """Drop every expired session from the store."""
        return await self._store.purge_expired()
