"""
Upload Receiver.

Accepts one multipart audio file, enforces the byte ceiling before anything
touches disk, and stores the file under a collision-free name.
"""

import logging
import os
import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from fastapi import UploadFile

from errors import UploadTooLargeError
from models import UploadedAudio
from settings import Settings

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


def unique_filename(original_name: Optional[str]) -> str:
    """Timestamp plus a random suffix, keeping the original extension."""
    extension = Path(original_name or "").suffix.lower()
    return f"{time.time_ns()}-{uuid.uuid4().hex[:8]}{extension}"


class UploadReceiver:
    """Persists uploads into the configured directory."""

    def __init__(self, settings: Settings):
        self.upload_dir = Path(settings.upload_dir)
        self.max_bytes = settings.max_upload_bytes
        self.keep_uploads = settings.keep_uploads

    def ensure_directory(self) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    async def _read_bounded(self, upload: UploadFile) -> bytes:
        # Starlette already knows the size for spooled uploads
        if upload.size is not None and upload.size > self.max_bytes:
            raise UploadTooLargeError(self.max_bytes)

        buffer = bytearray()
        while True:
            chunk = await upload.read(CHUNK_SIZE)
            if not chunk:
                break
            buffer.extend(chunk)
            if len(buffer) > self.max_bytes:
                raise UploadTooLargeError(self.max_bytes)
        return bytes(buffer)

    async def receive(self, upload: UploadFile) -> UploadedAudio:
        """
        Store an upload and describe it.

        Raises:
            UploadTooLargeError: The file exceeds the ceiling. Nothing is written.
        """
        data = await self._read_bounded(upload)

        self.ensure_directory()
        storage_path = self.upload_dir / unique_filename(upload.filename)
        try:
            with open(storage_path, "wb") as file_handle:
                file_handle.write(data)
        except OSError as e:
            logger.error(f"Failed to store upload {storage_path}: {e}")
            storage_path.unlink(missing_ok=True)
            raise

        stored = UploadedAudio(
            storage_path=str(storage_path),
            original_name=upload.filename or "",
            declared_mime_type=upload.content_type or "",
            size_bytes=len(data),
        )
        logger.info(
            f"Received file: {stored.original_name} "
            f"({stored.size_bytes} bytes, {stored.declared_mime_type or 'no type'}) "
            f"-> {stored.storage_path}"
        )
        return stored

    def discard(self, audio: UploadedAudio) -> None:
        try:
            if os.path.exists(audio.storage_path):
                os.unlink(audio.storage_path)
                logger.debug(f"Cleaned up upload: {audio.storage_path}")
        except OSError as e:
            logger.warning(f"Failed to delete upload {audio.storage_path}: {e}")

    @asynccontextmanager
    async def stored(self, upload: UploadFile) -> AsyncIterator[UploadedAudio]:
        """
        Store an upload for the duration of the block.

        The file is removed on exit, success or failure, unless uploads are
        configured to be kept.
        """
        audio = await self.receive(upload)
        try:
            yield audio
        finally:
            if not self.keep_uploads:
                self.discard(audio)
