"""Unit tests for AvatarService."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from core.exceptions import NothingToDeleteError, UserNotFoundError
from domain.entities.avatar import StoredUpload
from domain.entities.user import User
from domain.services.avatar_service import AvatarService
from infrastructure.storage.avatar_storage import LocalAvatarStorage
from tests.unit.conftest import FakeUnitOfWork


@pytest.fixture
def storage(tmp_path: Path) -> LocalAvatarStorage:
    return LocalAvatarStorage(tmp_path / "uploads", "/uploads/")


@pytest.fixture
def cleanup() -> MagicMock:
    return MagicMock()


@pytest.fixture
def service(uow: FakeUnitOfWork, storage: LocalAvatarStorage, cleanup: MagicMock) -> AvatarService:
    return AvatarService(lambda: uow, storage=storage, cleanup=cleanup)


def _place(storage: LocalAvatarStorage, name: str) -> str:
    storage.directory.mkdir(parents=True, exist_ok=True)
    (storage.directory / name).write_bytes(b"\x89PNG")
    return f"/uploads/{name}"


class TestRemoveAvatar:
    @pytest.mark.asyncio
    async def test_clears_reference_and_deletes_file(
        self, service: AvatarService, uow: FakeUnitOfWork, storage: LocalAvatarStorage, alice: User
    ):
        alice.avatar = _place(storage, "1700000000000-me.png")
        uow.users.get.return_value = alice

        result = await service.remove_avatar("1")

        assert result.avatar is None
        assert uow.committed
        assert not (storage.directory / "1700000000000-me.png").exists()

    @pytest.mark.asyncio
    async def test_raises_not_found(self, service: AvatarService, uow: FakeUnitOfWork):
        uow.users.get.return_value = None

        with pytest.raises(UserNotFoundError):
            await service.remove_avatar("1")

    @pytest.mark.asyncio
    async def test_nothing_to_delete_without_avatar(
        self, service: AvatarService, uow: FakeUnitOfWork, alice: User
    ):
        uow.users.get.return_value = alice

        with pytest.raises(NothingToDeleteError):
            await service.remove_avatar("1")

        assert not uow.committed
        uow.users.upsert.assert_not_called()

    @pytest.mark.asyncio
    async def test_default_avatar_is_never_deleted(
        self, service: AvatarService, uow: FakeUnitOfWork, bob: User
    ):
        uow.users.get.return_value = bob

        with pytest.raises(NothingToDeleteError) as exc_info:
            await service.remove_avatar("2")

        assert exc_info.value.message == "Default avatar cannot be deleted"
        assert not uow.committed

    @pytest.mark.asyncio
    async def test_disk_failure_does_not_block_record_update(
        self, uow: FakeUnitOfWork, cleanup: MagicMock, alice: User
    ):
        storage = MagicMock(spec=LocalAvatarStorage)
        storage.is_managed.return_value = True
        storage.delete.side_effect = PermissionError("read-only")
        service = AvatarService(lambda: uow, storage=storage, cleanup=cleanup)
        alice.avatar = "/uploads/1700000000000-me.png"
        uow.users.get.return_value = alice

        result = await service.remove_avatar("1")

        assert result.avatar is None
        assert uow.committed
        cleanup.schedule.assert_called_once_with("/uploads/1700000000000-me.png")


class TestRetire:
    def test_schedules_managed_reference(self, service: AvatarService, cleanup: MagicMock):
        service.retire("/uploads/1700000000000-old.png")

        cleanup.schedule.assert_called_once_with("/uploads/1700000000000-old.png")

    @pytest.mark.parametrize("reference", [None, "", "/images/default-avatar.png", "/uploads/../users.json"])
    def test_ignores_unmanaged_reference(
        self, service: AvatarService, cleanup: MagicMock, reference
    ):
        service.retire(reference)

        cleanup.schedule.assert_not_called()


class TestDiscard:
    @pytest.mark.asyncio
    async def test_removes_unreferenced_upload(
        self, service: AvatarService, storage: LocalAvatarStorage
    ):
        reference = _place(storage, "1700000000000-new.png")

        await service.discard(
            StoredUpload(reference=reference, original_name="new.png", content_type="image/png", size=4)
        )

        assert not await storage.exists(reference)
