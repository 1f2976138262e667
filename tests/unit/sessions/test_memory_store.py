"""Unit tests for the in-memory session store."""

from datetime import timedelta

import pytest

from domain.entities.session import Session, utcnow
from infrastructure.sessions.memory_store import InMemorySessionStore


@pytest.mark.asyncio
async def test_returned_sessions_are_copies():
    store = InMemorySessionStore()
    await store.set(Session(token="t" * 43, user_id="1", ttl_seconds=60))

    loaded = await store.get("t" * 43)
    assert loaded is not None
    loaded.user_id = "2"

    again = await store.get("t" * 43)
    assert again is not None and again.user_id == "1"


@pytest.mark.asyncio
async def test_purge_expired_counts_removed():
    store = InMemorySessionStore()
    await store.set(Session(token="live", user_id="1", ttl_seconds=60))
    await store.set(
        Session(token="stale", user_id="2", ttl_seconds=60, last_seen=utcnow() - timedelta(minutes=5))
    )

    assert await store.purge_expired() == 1
    assert len(store) == 1
    assert await store.get("stale") is None


@pytest.mark.asyncio
async def test_delete_unknown_token_is_noop():
    store = InMemorySessionStore()

    await store.delete("missing")

    assert len(store) == 0
