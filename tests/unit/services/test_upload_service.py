"""Unit tests for UploadReceiver."""

from collections.abc import AsyncIterator
from pathlib import Path

import pytest

from core.exceptions import UploadRejectedError, UploadRejectReason
from domain.services.upload_service import UploadReceiver
from infrastructure.storage.avatar_storage import LocalAvatarStorage

MAX_BYTES = 1024


async def _chunks(data: bytes, size: int = 100) -> AsyncIterator[bytes]:
    for start in range(0, len(data), size):
        yield data[start : start + size]


@pytest.fixture
def storage(tmp_path: Path) -> LocalAvatarStorage:
    return LocalAvatarStorage(tmp_path / "uploads", "/uploads/")


@pytest.fixture
def receiver(storage: LocalAvatarStorage) -> UploadReceiver:
    return UploadReceiver(
        storage,
        allowed_types=["image/jpeg", "image/png", "image/webp"],
        max_bytes=MAX_BYTES,
    )


def _stored_files(storage: LocalAvatarStorage) -> list[Path]:
    if not storage.directory.exists():
        return []
    return list(storage.directory.iterdir())


class TestReceive:
    @pytest.mark.asyncio
    async def test_stores_file_under_generated_name(
        self, receiver: UploadReceiver, storage: LocalAvatarStorage
    ):
        upload = await receiver.receive("me.png", "image/png", _chunks(b"x" * 300))

        assert upload is not None
        assert upload.reference.startswith("/uploads/")
        assert upload.reference.endswith("-me.png")
        assert upload.size == 300
        assert await storage.exists(upload.reference)
        assert storage.path_for(upload.reference).read_bytes() == b"x" * 300

    @pytest.mark.asyncio
    @pytest.mark.parametrize("filename", [None, ""])
    async def test_no_file_selected_means_no_upload(
        self, receiver: UploadReceiver, storage: LocalAvatarStorage, filename
    ):
        assert await receiver.receive(filename, "application/octet-stream", _chunks(b"")) is None
        assert _stored_files(storage) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content_type", ["image/gif", "text/plain", None, "image/svg+xml"])
    async def test_rejects_unsupported_type(
        self, receiver: UploadReceiver, storage: LocalAvatarStorage, content_type
    ):
        with pytest.raises(UploadRejectedError) as exc_info:
            await receiver.receive("me.gif", content_type, _chunks(b"GIF89a"))

        assert exc_info.value.reason == UploadRejectReason.UNSUPPORTED_TYPE
        assert exc_info.value.message.startswith("Upload rejected")
        assert _stored_files(storage) == []

    @pytest.mark.asyncio
    async def test_accepts_type_with_parameters(self, receiver: UploadReceiver):
        upload = await receiver.receive("me.jpg", "IMAGE/JPEG; charset=binary", _chunks(b"jpg"))

        assert upload is not None
        assert upload.content_type == "image/jpeg"

    @pytest.mark.asyncio
    async def test_accepts_exactly_the_size_cap(self, receiver: UploadReceiver):
        upload = await receiver.receive("me.webp", "image/webp", _chunks(b"w" * MAX_BYTES))

        assert upload is not None
        assert upload.size == MAX_BYTES

    @pytest.mark.asyncio
    async def test_rejects_one_byte_over_and_leaves_nothing_behind(
        self, receiver: UploadReceiver, storage: LocalAvatarStorage
    ):
        with pytest.raises(UploadRejectedError) as exc_info:
            await receiver.receive("me.png", "image/png", _chunks(b"p" * (MAX_BYTES + 1)))

        assert exc_info.value.reason == UploadRejectReason.TOO_LARGE
        assert exc_info.value.details == {"reason": "TOO_LARGE"}
        assert _stored_files(storage) == []
