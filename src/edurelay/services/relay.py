"""Upload relay: stage a multipart upload, forward it to the bucket, clean up."""

import logging
from urllib.parse import quote

from fastapi import UploadFile
from starlette.datastructures import UploadFile as StarletteUploadFile

from edurelay.core.exceptions import NoFileError, TransferError, UploadException
from edurelay.core.logging import object_key_context
from edurelay.models.upload import PresignResponse, UploadResponse
from edurelay.storage.base import ObjectStore, StoredObject
from edurelay.storage.staging import StagingArea

logger = logging.getLogger(__name__)

# Kept unescaped in public URLs along with alphanumerics and "-_."
_URI_COMPONENT_SAFE = "!~*'()"


def build_public_url(base_url: str, filename: str) -> str:
    """Public URL of an object keyed by ``filename``."""
    return f"{base_url.rstrip('/')}/{quote(filename, safe=_URI_COMPONENT_SAFE)}"


class RelayService:
    """Forwards uploads to an object store and mints presigned URLs."""

    def __init__(
        self,
        store: ObjectStore,
        staging: StagingArea,
        public_base_url: str,
        presign_expiration: int = 600,
    ):
        self.store = store
        self.staging = staging
        self.public_base_url = public_base_url
        self.presign_expiration = presign_expiration

    def public_url(self, key: str) -> str:
        return build_public_url(self.public_base_url, key)

    async def relay_upload(self, upload: UploadFile | str | None) -> UploadResponse:
        """Stage ``upload``, PUT it to the store and return its public URL.

        The staged file is removed whatever happens.

        Raises:
            NoFileError: If no file part was sent
            TransferError: If staging, reading or forwarding fails
        """
        if not isinstance(upload, StarletteUploadFile) or not upload.filename:
            raise NoFileError()

        key = upload.filename
        token = object_key_context.set(key)
        try:
            stored = await self._forward(key, upload)
        finally:
            object_key_context.reset(token)

        public_url = self.public_url(stored.key)
        logger.info(
            "Upload successful",
            extra={
                "object_key": stored.key,
                "size_bytes": stored.size_bytes,
                "backend": self.store.get_backend_name(),
                "public_url": public_url,
            },
        )
        return UploadResponse(video_url=public_url)

    async def _forward(self, key: str, upload: UploadFile) -> StoredObject:
        staged = await self.staging.stage(upload)
        try:
            with staged.open() as file_data:
                return await self.store.put_object(
                    key=key,
                    file_data=file_data,
                    content_type=staged.content_type,
                    size_bytes=staged.size_bytes,
                )
        except UploadException:
            logger.error("Upload to object store failed", exc_info=True)
            raise
        except Exception as e:
            logger.error("Upload to object store failed", exc_info=True)
            raise TransferError(str(e) or "Upload failed") from e
        finally:
            self.staging.discard(staged)

    def create_presigned_upload(self, filename: str, content_type: str) -> PresignResponse:
        """Mint a presigned PUT URL so the client can upload directly.

        Raises:
            PresignNotSupportedError: If the backend cannot sign URLs
            TransferError: If signing fails
        """
        try:
            presigned_url = self.store.generate_presigned_put_url(
                key=filename,
                content_type=content_type,
                expires_in=self.presign_expiration,
            )
        except UploadException:
            logger.error("Presigned URL generation failed", exc_info=True)
            raise
        except Exception as e:
            logger.error("Presigned URL generation failed", exc_info=True)
            raise TransferError(f"Failed to generate presigned URL: {e}") from e

        logger.info(
            "Presigned upload URL generated",
            extra={
                "object_key": filename,
                "content_type": content_type,
                "expires_in": self.presign_expiration,
            },
        )
        return PresignResponse(presignedUrl=presigned_url, publicUrl=self.public_url(filename))
