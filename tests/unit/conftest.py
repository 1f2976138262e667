"""Shared fixtures for unit tests."""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from domain.entities.user import User


class FakeUnitOfWork:
    """Fake Unit of Work with a mocked user repository for unit testing."""

    def __init__(self) -> None:
        self.users = AsyncMock()
        self.users.upsert.side_effect = lambda user: user
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def alice() -> User:
    return User(
        id="1",
        username="alice",
        password="secret",
        email="alice@example.com",
        first_name="Alice",
        last_name="Liddell",
    )


@pytest.fixture
def bob() -> User:
    return User(
        id="2",
        username="bob",
        password="hunter2",
        email="bob@example.com",
        first_name="Bob",
        last_name="Builder",
        avatar="/images/default-avatar.png",
    )
