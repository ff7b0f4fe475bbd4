"""S3-compatible object store backend (Cloudflare R2, MinIO, AWS S3)."""

import asyncio
import logging
from typing import Any, BinaryIO, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from edurelay.core.exceptions import StorageConfigError, TransferError
from edurelay.storage.base import ObjectStore, StoredObject

logger = logging.getLogger(__name__)


class S3ObjectStore(ObjectStore):
    """Object store talking to an S3-compatible endpoint through boto3."""

    def __init__(
        self,
        bucket: str,
        endpoint_url: str = "",
        access_key_id: str = "",
        secret_access_key: str = "",
        region: str = "auto",
        client: Optional[Any] = None,
    ):
        self.bucket = bucket
        self.endpoint_url = endpoint_url
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self.region = region
        self._client = client

    @classmethod
    def from_settings(cls, settings) -> "S3ObjectStore":
        return cls(
            bucket=settings.S3_BUCKET,
            endpoint_url=settings.S3_ENDPOINT,
            access_key_id=settings.S3_ACCESS_KEY_ID,
            secret_access_key=settings.S3_SECRET_ACCESS_KEY,
            region=settings.S3_REGION,
        )

    def _get_client(self):
        """Lazy-load and cache the boto3 client."""
        if not self.bucket:
            raise StorageConfigError("S3_BUCKET not configured")

        if self._client is None:
            if not all([self.endpoint_url, self.access_key_id, self.secret_access_key]):
                raise StorageConfigError(
                    "S3 storage not configured. "
                    "Set S3_ENDPOINT, S3_ACCESS_KEY_ID and S3_SECRET_ACCESS_KEY."
                )
            self._client = boto3.client(
                "s3",
                endpoint_url=self.endpoint_url,
                aws_access_key_id=self.access_key_id,
                aws_secret_access_key=self.secret_access_key,
                region_name=self.region,
                config=Config(signature_version="s3v4", s3={"addressing_style": "path"}),
            )
            logger.info(f"S3 client initialized for bucket: {self.bucket}")

        return self._client

    async def put_object(
        self, key: str, file_data: BinaryIO, content_type: str, size_bytes: int
    ) -> StoredObject:
        """PUT the stream to the bucket under ``key``."""
        client = self._get_client()
        try:
            await asyncio.to_thread(
                client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=file_data,
                ContentType=content_type,
                ContentLength=size_bytes,
            )
        except ClientError as e:
            error = e.response.get("Error", {})
            message = error.get("Message") or str(e)
            raise TransferError(f"Object store rejected upload: {message}") from e
        except BotoCoreError as e:
            raise TransferError(str(e)) from e

        logger.debug(f"Stored s3://{self.bucket}/{key} ({size_bytes} bytes)")
        return StoredObject(key=key, content_type=content_type, size_bytes=size_bytes)

    def generate_presigned_put_url(self, key: str, content_type: str, expires_in: int) -> str:
        """Generate a presigned PUT URL bound to ``content_type``."""
        client = self._get_client()
        try:
            return client.generate_presigned_url(
                ClientMethod="put_object",
                Params={
                    "Bucket": self.bucket,
                    "Key": key,
                    "ContentType": content_type,
                },
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            raise TransferError(f"Failed to generate presigned URL: {e}") from e

    def get_backend_name(self) -> str:
        return "s3"
