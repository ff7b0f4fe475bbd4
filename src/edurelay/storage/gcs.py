"""Google Cloud Storage backend."""

import asyncio
from datetime import timedelta
from typing import BinaryIO, Optional

from google.api_core.exceptions import GoogleAPIError
from google.cloud import storage

from edurelay.core.exceptions import StorageConfigError, TransferError
from edurelay.storage.base import ObjectStore, StoredObject


class GCSObjectStore(ObjectStore):
    """Google Cloud Storage backend."""

    def __init__(self, bucket_name: str, project_id: str = ""):
        self.bucket_name = bucket_name
        self.project_id = project_id
        self._client: Optional[storage.Client] = None
        self._bucket: Optional[storage.Bucket] = None

    @classmethod
    def from_settings(cls, settings) -> "GCSObjectStore":
        return cls(bucket_name=settings.GCS_BUCKET_NAME, project_id=settings.GCP_PROJECT_ID)

    def _get_bucket(self) -> storage.Bucket:
        """Lazy-load and cache GCS bucket."""
        if self._bucket is None:
            if not self.bucket_name:
                raise StorageConfigError("GCS_BUCKET_NAME not configured")

            self._client = storage.Client(project=self.project_id or None)
            self._bucket = self._client.bucket(self.bucket_name)

        return self._bucket

    async def put_object(
        self, key: str, file_data: BinaryIO, content_type: str, size_bytes: int
    ) -> StoredObject:
        """Upload the stream as blob ``key``."""
        blob = self._get_bucket().blob(key)
        blob.content_type = content_type

        try:
            await asyncio.to_thread(
                blob.upload_from_file,
                file_data,
                rewind=True,
                size=size_bytes,
                content_type=content_type,
            )
        except GoogleAPIError as e:
            raise TransferError(f"Object store rejected upload: {e}") from e

        return StoredObject(key=key, content_type=content_type, size_bytes=size_bytes)

    def generate_presigned_put_url(self, key: str, content_type: str, expires_in: int) -> str:
        """Generate V4 signed URL for a direct PUT.

        Requires credentials able to sign (a service account key).
        """
        blob = self._get_bucket().blob(key)
        try:
            return blob.generate_signed_url(
                version="v4",
                expiration=timedelta(seconds=expires_in),
                method="PUT",
                content_type=content_type,
            )
        except (GoogleAPIError, AttributeError, ValueError) as e:
            raise TransferError(f"Failed to generate signed URL: {e}") from e

    def get_backend_name(self) -> str:
        return "gcs"
