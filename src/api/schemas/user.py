"""Pydantic schemas for users, login and profile responses."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from domain.entities.user import User


class UserResponse(BaseModel):
    """Public view of a user record; the password never leaves the server."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "1",
                "username": "alice",
                "email": "alice@example.com",
                "firstName": "Alice",
                "lastName": "Liddell",
                "avatar": "/uploads/1717171717171-alice.png",
            }
        },
    )

    id: str
    username: str
    email: str
    first_name: str
    last_name: str
    avatar: str | None = None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            avatar=user.avatar,
        )


class LoginRequest(BaseModel):
    """Schema for logging in. Missing fields fail as bad credentials."""

    username: str = ""
    password: str = ""


class LoginResponse(BaseModel):
    """Schema for a successful login."""

    success: bool = True
    user: UserResponse


class UserMessageResponse(BaseModel):
    """Message plus the updated user (profile update, avatar removal)."""

    message: str
    user: UserResponse
