"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"

    # Not found errors (404)
    USER_NOT_FOUND = "USER_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UPLOAD_REJECTED = "UPLOAD_REJECTED"
    NOTHING_TO_DELETE = "NOTHING_TO_DELETE"

    # Conflict errors (409)
    USERNAME_TAKEN = "USERNAME_TAKEN"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    STORE_ERROR = "STORE_ERROR"
    SESSION_STORE_ERROR = "SESSION_STORE_ERROR"


class UploadRejectReason(StrEnum):
    """Why an avatar upload was refused at the transport boundary."""

    TOO_LARGE = "TOO_LARGE"
    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"


GENERIC_SERVER_MESSAGE = "Internal server error"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Not authenticated",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class InvalidCredentialsError(AuthenticationError):
    """Username/password pair did not match any user.

    The message is deliberately the same whichever half was wrong.
    """

    def __init__(self) -> None:
        super().__init__(
            message="Invalid credentials",
            error_code=ErrorCode.INVALID_CREDENTIALS,
        )


class ValidationError(AppException):
    """A submitted profile field is malformed."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(
            error_code=ErrorCode.VALIDATION_ERROR,
            message=message,
            status_code=400,
            details={"field": field},
        )


class UploadRejectedError(AppException):
    """Avatar upload refused before any profile logic ran."""

    _messages = {
        UploadRejectReason.TOO_LARGE: "Upload rejected: file exceeds the {limit} limit",
        UploadRejectReason.UNSUPPORTED_TYPE: (
            "Upload rejected: only .jpg, .png, .webp files are allowed"
        ),
    }

    def __init__(self, reason: UploadRejectReason, max_bytes: int | None = None) -> None:
        self.reason = reason
        limit = f"{max_bytes / (1024 * 1024):g} MiB" if max_bytes else "size"
        super().__init__(
            error_code=ErrorCode.UPLOAD_REJECTED,
            message=self._messages[reason].format(limit=limit),
            status_code=400,
            details={"reason": reason.value},
        )


class NothingToDeleteError(AppException):
    """No removable avatar: none is set or it is a default asset."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.NOTHING_TO_DELETE,
            message="Default avatar cannot be deleted",
            status_code=400,
        )


class UserNotFoundError(AppException):
    """User not found."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.USER_NOT_FOUND,
            message="User not found",
            status_code=404,
            details={"user_id": user_id},
        )


class UsernameTakenError(AppException):
    """Another user already holds the requested username."""

    def __init__(self, username: str) -> None:
        super().__init__(
            error_code=ErrorCode.USERNAME_TAKEN,
            message="Username already taken",
            status_code=409,
            details={"username": username},
        )


class StoreError(AppException):
    """Credential store could not be read or written.

    ``internal`` carries the underlying detail for the server log only.
    """

    def __init__(self, internal: str = "") -> None:
        self.internal = internal
        super().__init__(
            error_code=ErrorCode.STORE_ERROR,
            message=GENERIC_SERVER_MESSAGE,
            status_code=500,
        )


class SessionStoreError(AppException):
    """Session store I/O failed (distinct from "not authenticated")."""

    def __init__(self, internal: str = "") -> None:
        self.internal = internal
        super().__init__(
            error_code=ErrorCode.SESSION_STORE_ERROR,
            message=GENERIC_SERVER_MESSAGE,
            status_code=500,
        )
