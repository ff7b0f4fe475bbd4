"""Local filesystem storage backend for development."""

import re
from pathlib import Path
from typing import BinaryIO

from edurelay.core.exceptions import PresignNotSupportedError, TransferError
from edurelay.storage.base import ObjectStore, StoredObject


class LocalObjectStore(ObjectStore):
    """Writes objects under a local directory instead of a bucket."""

    def __init__(self, base_path: str | Path = "data/objects"):
        self.base_path = Path(base_path)

    def get_target_path(self, key: str) -> Path:
        return self.base_path / self._sanitize_filename(key)

    async def put_object(
        self, key: str, file_data: BinaryIO, content_type: str, size_bytes: int
    ) -> StoredObject:
        """Write file to local filesystem."""
        target_path = self.get_target_path(key)

        try:
            target_path.parent.mkdir(parents=True, exist_ok=True)
            with open(target_path, "wb") as f:
                while chunk := file_data.read(65536):  # 64KB chunks
                    f.write(chunk)
        except OSError as e:
            raise TransferError(f"Failed to write {target_path}: {e}") from e

        return StoredObject(key=key, content_type=content_type, size_bytes=size_bytes)

    def generate_presigned_put_url(self, key: str, content_type: str, expires_in: int) -> str:
        raise PresignNotSupportedError(
            "Presigned uploads require the s3 or gcs storage backend. Current backend: local"
        )

    def get_backend_name(self) -> str:
        return "local"

    @staticmethod
    def _sanitize_filename(filename: str) -> str:
        """Remove path traversal and dangerous characters."""
        safe = filename.replace("../", "").replace("..\\", "")
        safe = safe.replace("/", "_").replace("\\", "_")
        safe = re.sub(r"[^a-zA-Z0-9._-]", "_", safe)
        return safe[:255]
