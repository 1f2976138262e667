"""Session domain entities."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import StrEnum

from domain.entities.user import User


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionState(StrEnum):
    """Lifecycle of a server-side session."""

    ACTIVE = "active"
    EXPIRED = "expired"
    LOGGED_OUT = "logged_out"


@dataclass
class Session:
    """Server-side session mapping an opaque token to a user id."""

    token: str
    user_id: str
    ttl_seconds: int
    created_at: datetime = field(default_factory=utcnow)
    last_seen: datetime = field(default_factory=utcnow)

    @property
    def expires_at(self) -> datetime:
        return self.last_seen + timedelta(seconds=self.ttl_seconds)

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or utcnow()) >= self.expires_at

    def touch(self, now: datetime | None = None) -> None:
        """Restart the TTL window."""
        self.last_seen = now or utcnow()


@dataclass(frozen=True, slots=True)
class AuthContext:
    """Identity restored for the current request."""

    user: User
    token: str


@dataclass(frozen=True, slots=True)
class Anonymous:
    """No (valid) session on the current request."""

    token: str | None = None
