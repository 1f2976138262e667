"""Session authentication dependencies for FastAPI."""

from typing import Annotated

from fastapi import Depends, Request, Response

from api.dependencies.services import get_session_manager
from core.config import settings
from core.exceptions import AuthenticationError
from domain.entities.session import Anonymous, AuthContext
from domain.services.session_service import SessionManager


def get_session_token(request: Request) -> str | None:
    """Read the opaque session token from the request cookie."""
    return request.cookies.get(settings.session_cookie_name)


async def get_auth_context(
    token: Annotated[str | None, Depends(get_session_token)],
    sessions: SessionManager = Depends(get_session_manager),
) -> AuthContext | Anonymous:
    """
    Restore the caller's identity for this request.

    Returns:
        AuthContext with the current user record, or Anonymous (no exception
        raised) when there is no valid session. Session store failures
        propagate as SessionStoreError.
    """
    user = await sessions.restore(token)
    if user is None or token is None:
        return Anonymous(token=token)
    return AuthContext(user=user, token=token)


async def get_current_auth(
    context: Annotated[AuthContext | Anonymous, Depends(get_auth_context)],
) -> AuthContext:
    """
    Dependency requiring an authenticated caller.

    Raises:
        AuthenticationError: If there is no valid session
    """
    if isinstance(context, Anonymous):
        raise AuthenticationError(message="Unauthorized")
    return context


def set_session_cookie(response: Response, token: str, max_age: int) -> None:
    """Attach the session cookie; it only ever carries the opaque token."""
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=max_age,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    """Expire the session cookie on the client."""
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        path="/",
    )


# Type aliases for convenience in route handlers
CurrentAuth = Annotated[AuthContext, Depends(get_current_auth)]
OptionalAuth = Annotated[AuthContext | Anonymous, Depends(get_auth_context)]
SessionToken = Annotated[str | None, Depends(get_session_token)]
