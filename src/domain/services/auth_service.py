"""Credential verification against the user store."""

import secrets
from collections.abc import Callable

import structlog

from core.exceptions import InvalidCredentialsError
from domain.entities.user import User
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


class AuthService:
    """Verifies username/password pairs.

    Passwords are stored and compared as plaintext, exactly as the existing
    user records hold them; only the comparison itself is constant-time.
    """

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def authenticate(self, username: str, password: str) -> User:
        """Return the matching user or raise InvalidCredentialsError.

        Store read failures propagate as StoreError.
        """
        if not username or not password:
            raise InvalidCredentialsError()

        async with self._uow_factory() as uow:
            user = await uow.users.find_by_username(username)

        if user is None or not secrets.compare_digest(
            user.password.encode("utf-8"), password.encode("utf-8")
        ):
            logger.info("login_rejected", username=username)
            raise InvalidCredentialsError()

        logger.info("login_succeeded", user_id=user.id)
        return user
