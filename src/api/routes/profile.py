"""Profile update and avatar removal routes."""

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile

from api.dependencies.auth import CurrentAuth
from api.dependencies.services import (
    get_avatar_service,
    get_profile_service,
    get_session_manager,
    get_upload_receiver,
)
from api.schemas.common import ErrorResponse
from api.schemas.user import UserMessageResponse, UserResponse
from core.sanitize import clean
from domain.services.avatar_service import AvatarService
from domain.services.profile_service import ProfileService
from domain.services.session_service import SessionManager
from domain.services.upload_service import UploadReceiver

router = APIRouter(tags=["profile"])

UPLOAD_CHUNK_SIZE = 64 * 1024


async def _read_chunks(upload: UploadFile) -> AsyncIterator[bytes]:
    while chunk := await upload.read(UPLOAD_CHUNK_SIZE):
        yield chunk


@router.post(
    "/update-profile",
    response_model=UserMessageResponse,
    summary="Update own profile",
    responses={
        200: {"description": "Profile updated"},
        400: {"model": ErrorResponse, "description": "Invalid field or rejected upload"},
        401: {"model": ErrorResponse, "description": "Not logged in"},
        404: {"model": ErrorResponse, "description": "User record no longer exists"},
        409: {"model": ErrorResponse, "description": "Username already taken"},
    },
)
async def update_profile(
    auth: CurrentAuth,
    username: Annotated[str | None, Form()] = None,
    email: Annotated[str | None, Form()] = None,
    first_name: Annotated[str | None, Form(alias="firstName")] = None,
    last_name: Annotated[str | None, Form(alias="lastName")] = None,
    avatar: Annotated[UploadFile | None, File()] = None,
    receiver: UploadReceiver = Depends(get_upload_receiver),
    service: ProfileService = Depends(get_profile_service),
) -> UserMessageResponse:
    """Edit username, email, names and optionally replace the avatar.

    The avatar is checked and stored before any field validation; a stored
    upload is removed again if the update fails.
    """
    upload = None
    if avatar is not None:
        try:
            upload = await receiver.receive(
                avatar.filename,
                avatar.content_type,
                _read_chunks(avatar),
            )
        finally:
            await avatar.close()

    user = await service.update_profile(
        user_id=auth.user.id,
        username=clean(username),
        email=clean(email),
        first_name=clean(first_name),
        last_name=clean(last_name),
        upload=upload,
    )
    return UserMessageResponse(message="Profile updated", user=UserResponse.from_user(user))


@router.post(
    "/delete-avatar",
    response_model=UserMessageResponse,
    summary="Remove own avatar",
    responses={
        200: {"description": "Avatar deleted"},
        400: {"model": ErrorResponse, "description": "No uploaded avatar to delete"},
        401: {"model": ErrorResponse, "description": "Not logged in"},
        404: {"model": ErrorResponse, "description": "User record no longer exists"},
    },
)
async def delete_avatar(
    auth: CurrentAuth,
    service: AvatarService = Depends(get_avatar_service),
    sessions: SessionManager = Depends(get_session_manager),
) -> UserMessageResponse:
    """Delete the uploaded avatar and fall back to the default one."""
    user = await service.remove_avatar(auth.user.id)
    await sessions.rebind(auth.token, user.id)
    return UserMessageResponse(message="Avatar deleted", user=UserResponse.from_user(user))
