"""Profile update orchestration."""

import re
from collections.abc import Callable

import structlog

from core.exceptions import UserNotFoundError, UsernameTakenError, ValidationError
from domain.entities.avatar import StoredUpload
from domain.entities.user import User
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.avatar_service import AvatarService

logger = structlog.get_logger()

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 20
NAME_MAX_LENGTH = 30
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_profile_fields(username: str, email: str, first_name: str, last_name: str) -> None:
    """Check submitted fields in order; the first violation wins."""
    if not username or not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        raise ValidationError("username", "Username must be 3–20 characters long.")
    if not email or not EMAIL_RE.match(email):
        raise ValidationError("email", "Invalid email address.")
    if not first_name or len(first_name) > NAME_MAX_LENGTH:
        raise ValidationError("firstName", "First name is required (max 30 chars).")
    if not last_name or len(last_name) > NAME_MAX_LENGTH:
        raise ValidationError("lastName", "Last name is required (max 30 chars).")


class ProfileService:
    """Applies a profile edit from an authenticated user."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        avatars: AvatarService,
    ) -> None:
        self._uow_factory = uow_factory
        self._avatars = avatars

    async def update_profile(
        self,
        user_id: str,
        username: str,
        email: str,
        first_name: str,
        last_name: str,
        upload: StoredUpload | None = None,
    ) -> User:
        """Validate, check uniqueness and commit the edit.

        Text fields must already be sanitized. If anything fails after an
        upload was stored, the upload is discarded before the error
        propagates. A replaced avatar is deleted in the background.
        """
        try:
            validate_profile_fields(username, email, first_name, last_name)

            async with self._uow_factory() as uow:
                user = await uow.users.get(user_id)
                if user is None:
                    raise UserNotFoundError(user_id)

                holder = await uow.users.find_by_username(username)
                if holder is not None and holder.id != user.id:
                    raise UsernameTakenError(username)

                previous_avatar = user.avatar
                user.username = username
                user.email = email
                user.first_name = first_name
                user.last_name = last_name
                if upload is not None:
                    user.avatar = upload.reference

                updated = await uow.users.upsert(user)
                await uow.commit()
        except Exception:
            if upload is not None:
                await self._avatars.discard(upload)
            raise

        if upload is not None and previous_avatar != upload.reference:
            self._avatars.retire(previous_avatar)

        logger.info("profile_updated", user_id=user_id, avatar_replaced=upload is not None)
        return updated
