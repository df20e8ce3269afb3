"""
ImageVault Backend — Upload Service Unit Tests
================================================

What:  Tests for UploadService naming, streaming writes and path resolution.
How:   Real writes into pytest's tmp_path; UploadFile wraps an in-memory buffer.

Test Strategy:
    ✅ Filename is <epoch millis>-<basename>
    ✅ Bytes on disk match the upload, across many chunks
    ✅ Upload directory is created on first write
    ✅ Same name within one millisecond never overwrites
    ✅ Missing file part and OS errors raise FileStorageError
    ✅ resolve() refuses traversal and missing files
"""

import io
from unittest.mock import patch

import pytest
from fastapi import UploadFile

from imagevault.exceptions import FileStorageError
from imagevault.services.upload_service import UploadService


def make_upload(content: bytes, filename: str = "cat.jpg") -> UploadFile:
    return UploadFile(file=io.BytesIO(content), filename=filename)


class TestFilenameGeneration:

    def setup_method(self):
        self.service = UploadService(upload_dir="/tmp/unused")

    def test_prefixes_arrival_millis(self):
        with patch("imagevault.services.upload_service.time.time_ns", return_value=1_718_000_000_123_456_789):
            assert self.service.generate_filename("cat.jpg") == "1718000000123-cat.jpg"

    def test_keeps_original_name_verbatim(self):
        """Extension and case are kept; no content or extension checks."""
        name = self.service.generate_filename("My Photo.PNG")
        assert name.endswith("-My Photo.PNG")

    def test_strips_directory_components(self):
        name = self.service.generate_filename("../../etc/passwd")
        assert name.endswith("-passwd")
        assert "/" not in name

    def test_missing_filename_gets_placeholder(self):
        assert self.service.generate_filename(None).endswith("-upload")
        assert self.service.generate_filename("").endswith("-upload")


class TestStoreUpload:

    @pytest.mark.asyncio
    async def test_writes_identical_bytes(self, upload_dir, sample_image_bytes):
        service = UploadService(upload_dir=str(upload_dir))

        filename, url_path = await service.store_upload(make_upload(sample_image_bytes))

        assert url_path == f"/uploads/{filename}"
        assert filename.endswith("-cat.jpg")
        assert (upload_dir / filename).read_bytes() == sample_image_bytes

    @pytest.mark.asyncio
    async def test_streams_in_chunks(self, upload_dir):
        """Content longer than the chunk size is written completely."""
        content = bytes(range(256)) * 40
        service = UploadService(upload_dir=str(upload_dir), chunk_size=100)

        filename, _ = await service.store_upload(make_upload(content, "blob.bin"))

        assert (upload_dir / filename).read_bytes() == content

    @pytest.mark.asyncio
    async def test_creates_directory_on_first_use(self, tmp_path):
        target = tmp_path / "nested" / "uploads"
        service = UploadService(upload_dir=str(target))
        assert not target.exists()

        await service.store_upload(make_upload(b"data"))

        assert target.is_dir()

    @pytest.mark.asyncio
    async def test_any_content_is_accepted(self, upload_dir):
        """No type validation: a text file named .jpg is stored as-is."""
        service = UploadService(upload_dir=str(upload_dir))

        filename, _ = await service.store_upload(make_upload(b"not an image", "fake.jpg"))

        assert (upload_dir / filename).read_bytes() == b"not an image"

    @pytest.mark.asyncio
    async def test_same_filename_twice_gets_distinct_names(self, upload_dir):
        service = UploadService(upload_dir=str(upload_dir))
        with patch(
            "imagevault.services.upload_service.time.time_ns",
            side_effect=[1_000_000_000, 2_000_000_000],
        ):
            first, _ = await service.store_upload(make_upload(b"one"))
            second, _ = await service.store_upload(make_upload(b"two"))

        assert first != second
        assert (upload_dir / first).read_bytes() == b"one"
        assert (upload_dir / second).read_bytes() == b"two"

    @pytest.mark.asyncio
    async def test_same_millisecond_collision_moves_to_next_millisecond(self, upload_dir):
        service = UploadService(upload_dir=str(upload_dir))
        with patch(
            "imagevault.services.upload_service.time.time_ns",
            return_value=1_718_000_000_123_000_000,
        ):
            first, _ = await service.store_upload(make_upload(b"one"))
            second, _ = await service.store_upload(make_upload(b"two"))

        assert first == "1718000000123-cat.jpg"
        assert second == "1718000000124-cat.jpg"
        assert (upload_dir / first).read_bytes() == b"one"
        assert (upload_dir / second).read_bytes() == b"two"

    @pytest.mark.asyncio
    async def test_existing_file_is_never_overwritten(self, upload_dir):
        upload_dir.mkdir()
        (upload_dir / "1718000000123-cat.jpg").write_bytes(b"old")
        service = UploadService(upload_dir=str(upload_dir))
        with patch(
            "imagevault.services.upload_service.time.time_ns",
            return_value=1_718_000_000_123_000_000,
        ):
            filename, url_path = await service.store_upload(make_upload(b"new"))

        assert filename == "1718000000124-cat.jpg"
        assert url_path == "/uploads/1718000000124-cat.jpg"
        assert (upload_dir / "1718000000123-cat.jpg").read_bytes() == b"old"
        assert (upload_dir / filename).read_bytes() == b"new"
        assert sorted(p.name for p in upload_dir.iterdir()) == [
            "1718000000123-cat.jpg",
            "1718000000124-cat.jpg",
        ]

    @pytest.mark.asyncio
    async def test_missing_upload_raises(self, upload_dir):
        service = UploadService(upload_dir=str(upload_dir))

        with pytest.raises(FileStorageError, match="No file was uploaded"):
            await service.store_upload(None)

    @pytest.mark.asyncio
    async def test_os_error_raises_file_storage_error(self, upload_dir):
        service = UploadService(upload_dir=str(upload_dir))

        with patch(
            "imagevault.services.upload_service.aiofiles.open",
            side_effect=PermissionError(13, "Permission denied"),
        ):
            with pytest.raises(FileStorageError, match="Permission denied"):
                await service.store_upload(make_upload(b"data"))


class TestResolve:

    def test_existing_file(self, upload_dir):
        upload_dir.mkdir()
        (upload_dir / "1-cat.jpg").write_bytes(b"x")
        service = UploadService(upload_dir=str(upload_dir))

        assert service.resolve("1-cat.jpg") == (upload_dir / "1-cat.jpg").resolve()

    def test_missing_file(self, upload_dir):
        upload_dir.mkdir()
        service = UploadService(upload_dir=str(upload_dir))

        assert service.resolve("nope.jpg") is None

    def test_traversal_refused(self, tmp_path, upload_dir):
        upload_dir.mkdir()
        (tmp_path / "secret.txt").write_text("secret")
        service = UploadService(upload_dir=str(upload_dir))

        assert service.resolve("../secret.txt") is None

    def test_directory_is_not_served(self, upload_dir):
        (upload_dir / "sub").mkdir(parents=True)
        service = UploadService(upload_dir=str(upload_dir))

        assert service.resolve("sub") is None
