"""In-memory session store for tests and single-process deployments."""

from dataclasses import replace

from domain.entities.session import Session, utcnow


class InMemorySessionStore:
    """ISessionStore kept in a dict; sessions die with the process."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    async def get(self, token: str) -> Session | None:
        session = self._sessions.get(token)
        return replace(session) if session else None

    async def set(self, session: Session) -> None:
        self._sessions[session.token] = replace(session)

    async def delete(self, token: str) -> None:
        self._sessions.pop(token, None)

    async def purge_expired(self) -> int:
        now = utcnow()
        expired = [token for token, s in self._sessions.items() if s.is_expired(now)]
        for token in expired:
            del self._sessions[token]
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)
