"""Login, logout and current-user routes."""

from fastapi import APIRouter, Depends, Response, status

from api.dependencies.auth import (
    OptionalAuth,
    SessionToken,
    clear_session_cookie,
    set_session_cookie,
)
from api.dependencies.services import get_auth_service, get_session_manager
from api.schemas.common import ErrorResponse
from api.schemas.user import LoginRequest, LoginResponse, UserResponse
from core.exceptions import AuthenticationError
from core.sanitize import clean
from domain.entities.session import Anonymous
from domain.services.auth_service import AuthService
from domain.services.session_service import SessionManager

router = APIRouter(tags=["auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log in",
    responses={
        200: {"description": "Logged in; session cookie set"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
)
async def login(
    body: LoginRequest,
    response: Response,
    token: SessionToken,
    auth_service: AuthService = Depends(get_auth_service),
    sessions: SessionManager = Depends(get_session_manager),
) -> LoginResponse:
    """Verify credentials and start a new session."""
    # Usernames are stored cleaned; passwords are compared verbatim
    user = await auth_service.authenticate(clean(body.username), body.password)

    # Never carry a pre-login session over into the authenticated one
    await sessions.invalidate(token)
    session = await sessions.establish(user.id)
    set_session_cookie(response, session.token, sessions.ttl_seconds)

    return LoginResponse(success=True, user=UserResponse.from_user(user))


@router.get(
    "/user",
    response_model=UserResponse,
    summary="Get the logged-in user",
    responses={401: {"model": ErrorResponse, "description": "Not authenticated"}},
)
async def current_user(context: OptionalAuth) -> UserResponse:
    """Return the current record of the session's user."""
    if isinstance(context, Anonymous):
        raise AuthenticationError(message="Not authenticated")
    return UserResponse.from_user(context.user)


@router.post(
    "/logout",
    status_code=status.HTTP_200_OK,
    summary="Log out",
    response_class=Response,
)
async def logout(
    token: SessionToken,
    sessions: SessionManager = Depends(get_session_manager),
) -> Response:
    """End the session. Safe to call repeatedly or without a session."""
    await sessions.invalidate(token)
    response = Response(status_code=status.HTTP_200_OK)
    clear_session_cookie(response)
    return response
