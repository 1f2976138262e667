"""API tests against the file-backed session store."""

import asyncio
from pathlib import Path

import pytest
from httpx import AsyncClient

from infrastructure.sessions.file_store import FileSessionStore


@pytest.fixture
def session_store(tmp_path: Path) -> FileSessionStore:
    """Sessions kept as files, as in a default deployment."""
    return FileSessionStore(tmp_path / "sessions")


class TestFileSessions:
    @pytest.mark.asyncio
    async def test_login_persists_session_file(
        self, alice_client: AsyncClient, tmp_path: Path
    ) -> None:
        token = alice_client.cookies["sid"]

        assert (tmp_path / "sessions" / f"{token}.json").exists()
        assert (await alice_client.get("/api/user")).status_code == 200

    @pytest.mark.asyncio
    async def test_concurrent_requests_share_one_session(
        self, alice_client: AsyncClient, tmp_path: Path
    ) -> None:
        reads = [alice_client.get("/api/user") for _ in range(25)]
        update = alice_client.post(
            "/api/update-profile",
            data={
                "username": "alice",
                "email": "alice@example.com",
                "firstName": "Alice",
                "lastName": "Liddell",
            },
        )

        responses = await asyncio.gather(*reads, update)

        assert [r.status_code for r in responses] == [200] * 26
        assert [p.name for p in (tmp_path / "sessions").iterdir()] == [
            f"{alice_client.cookies['sid']}.json"
        ]

    @pytest.mark.asyncio
    async def test_logout_removes_session_file(
        self, alice_client: AsyncClient, tmp_path: Path
    ) -> None:
        await alice_client.post("/api/logout")

        assert list((tmp_path / "sessions").iterdir()) == []
