"""User domain entity."""

from dataclasses import dataclass, replace
from typing import Optional


@dataclass
class User:
    """Domain entity for a user record in the credential store."""

    id: str
    username: str
    password: str
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    avatar: Optional[str] = None

    def copy(self) -> "User":
        """Detached copy, so callers never mutate a stored snapshot."""
        return replace(self)
