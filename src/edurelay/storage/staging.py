"""Transient on-disk staging of multipart uploads."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO
from uuid import uuid4

from fastapi import UploadFile

from edurelay.core.exceptions import CleanupError, TransferError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 65536


@dataclass
class StagedFile:
    """One upload written to the staging directory."""

    path: Path
    original_name: str
    content_type: str
    size_bytes: int

    def open(self) -> BinaryIO:
        """Open the staged bytes for reading.

        Raises:
            TransferError: If the staged file is gone or unreadable
        """
        if not self.path.exists():
            raise TransferError("Uploaded file not found on disk")
        try:
            return open(self.path, "rb")
        except OSError as e:
            raise TransferError(f"Failed to read staged file: {e}") from e


class StagingArea:
    """Directory holding staged uploads until they are forwarded.

    Every staged file gets a random name, so concurrent requests never share
    a path.
    """

    def __init__(self, directory: str | Path = "uploads"):
        self.directory = Path(directory)

    async def stage(self, upload: UploadFile) -> StagedFile:
        """Copy the multipart body to a fresh staged file."""
        path = self.directory / uuid4().hex

        size = 0
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(path, "wb") as f:
                while chunk := await upload.read(CHUNK_SIZE):
                    f.write(chunk)
                    size += len(chunk)
        except OSError as e:
            self.discard_path(path)
            raise TransferError(f"Failed to stage upload: {e}") from e

        staged = StagedFile(
            path=path,
            original_name=upload.filename,
            content_type=upload.content_type or "application/octet-stream",
            size_bytes=size,
        )
        logger.info(
            "File received",
            extra={
                "original_name": staged.original_name,
                "size_bytes": staged.size_bytes,
                "content_type": staged.content_type,
                "staged_path": str(staged.path),
            },
        )
        return staged

    def discard(self, staged: StagedFile) -> None:
        """Remove a staged file. Never raises."""
        self.discard_path(staged.path)

    @staticmethod
    def discard_path(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            error = CleanupError(f"Error cleaning up temp file {path}: {e}")
            logger.error(str(error), exc_info=True)
