"""
ImageVault Backend — Upload Storage Service
=============================================

What:  Streams the multipart `image` part to the upload directory.
Why:   Centralizes all file system operations (write, path resolution for
       serving) in one place.
How:   Reads the UploadFile in fixed-size chunks and writes each chunk with
       aiofiles so large uploads never block the event loop or sit fully
       in memory.
Who:   Called by the create route before the record is inserted, and by the
       /uploads route to resolve stored files.

Naming:
    <upload_dir>/<arrival epoch millis>-<original filename>
    e.g. uploads/1718000000123-cat.jpg

    The millisecond prefix keeps two uploads of the same filename apart;
    files are created exclusively, and a name already taken within the same
    millisecond is retried with the next millisecond. Only the basename of
    the client-supplied filename is used, so a name like "../../etc/passwd"
    lands inside the upload directory.

What is NOT checked: size, extension, content type. Any byte stream is
stored as-is.
"""

import logging
import time
from pathlib import Path
from typing import Optional, Tuple

import aiofiles
from fastapi import UploadFile

from imagevault.config import settings
from imagevault.exceptions import FileStorageError

logger = logging.getLogger(__name__)

# URL prefix under which the upload directory is served
UPLOADS_URL_PREFIX = "/uploads"

# Filename used when the client sends a file part without one
DEFAULT_FILENAME = "upload"


class UploadService:
    """
    Writes uploaded files to disk and resolves them for serving.

    The upload directory is created on first write, not at construction,
    so importing the module has no file system side effects.
    """

    def __init__(self, upload_dir: Optional[str] = None, chunk_size: Optional[int] = None):
        """
        Args:
            upload_dir: Override the upload directory (used in tests).
                        If None, uses settings.upload_dir.
            chunk_size: Bytes per read/write cycle. If None, uses
                        settings.upload_chunk_size.
        """
        self.upload_dir = Path(upload_dir or settings.upload_dir).resolve()
        self.chunk_size = chunk_size or settings.upload_chunk_size

    def generate_filename(self, original_filename: Optional[str], millis: Optional[int] = None) -> str:
        """Build `<epoch millis>-<basename>` for a newly arrived file."""
        if millis is None:
            millis = time.time_ns() // 1_000_000
        basename = Path(original_filename or "").name or DEFAULT_FILENAME
        return f"{millis}-{basename}"

    async def store_upload(self, upload: Optional[UploadFile]) -> Tuple[str, str]:
        """
        Stream an uploaded file part to disk.

        Returns:
            Tuple of (stored_filename, url_path), e.g.
            ("1718000000123-cat.jpg", "/uploads/1718000000123-cat.jpg").

        Raises:
            FileStorageError if no file part was sent or the write fails.
        """
        if upload is None:
            raise FileStorageError(
                message="No file was uploaded in the 'image' field",
                context={"field": "image"},
            )

        millis = time.time_ns() // 1_000_000
        destination = self.upload_dir
        written = 0

        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)

            # "xb" fails if the name is taken; concurrent uploads of the same
            # filename within one millisecond move on to the next millisecond.
            while True:
                filename = self.generate_filename(upload.filename, millis)
                destination = self.upload_dir / filename
                try:
                    async with aiofiles.open(destination, "xb") as f:
                        while True:
                            chunk = await upload.read(self.chunk_size)
                            if not chunk:
                                break
                            await f.write(chunk)
                            written += len(chunk)
                except FileExistsError:
                    millis += 1
                    continue
                break

        except OSError as e:
            logger.error("Failed to store upload at %s: %s", destination, str(e))
            raise FileStorageError(
                message=f"Failed to save uploaded image: {e.strerror or e}",
                context={"path": str(destination), "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", filename, written)
        return filename, f"{UPLOADS_URL_PREFIX}/{filename}"

    def resolve(self, filename: str) -> Optional[Path]:
        """
        Map a requested filename to a stored file.

        Returns None when the path escapes the upload directory or does not
        name an existing regular file.
        """
        candidate = (self.upload_dir / filename).resolve()
        if not candidate.is_relative_to(self.upload_dir):
            return None
        if not candidate.is_file():
            return None
        return candidate


# ── Singleton Instance ────────────────────────────────────────────────────
upload_service = UploadService()


def get_upload_service() -> UploadService:
    """FastAPI dependency; overridden in tests to point at a temp directory."""
    return upload_service
