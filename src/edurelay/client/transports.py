"""Transport strategies moving one file from the client to the bucket.

``RelayTransport`` posts the file to the relay, which forwards it to the
bucket. The request is opaque, so it reports no progress.

``PresignedTransport`` asks the relay for a presigned PUT URL and sends the
bytes straight to the bucket, reporting progress as body chunks go out.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Dict, Optional

import httpx

from edurelay.client.profiles import UploadRequest
from edurelay.core.exceptions import TransferError
from edurelay.models.upload import UploadResponse

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class UploadTransport(ABC):
    """Moves one UploadRequest and returns the relay's upload result."""

    reports_progress: bool = False

    def __init__(
        self,
        base_url: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = http_client

    @abstractmethod
    async def send(self, request: UploadRequest, on_progress: ProgressCallback) -> UploadResponse:
        """Transfer ``request``.

        Raises:
            TransferError: On network failure, non-2xx or an unsuccessful body
        """

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                yield client

    @staticmethod
    def _read_json(response: httpx.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    def _check(self, response: httpx.Response) -> Dict[str, Any]:
        """Raise TransferError unless the relay reported success."""
        result = self._read_json(response)

        if response.is_error:
            logger.error(
                "Relay request failed",
                extra={"status_code": response.status_code, "url": str(response.request.url)},
            )
            raise TransferError(
                result.get("error") or f"Upload failed with status {response.status_code}",
                status_code=response.status_code,
            )

        if not result.get("success"):
            raise TransferError(result.get("error") or "Upload failed")

        return result


class RelayTransport(UploadTransport):
    """Buffer-and-forward through the relay's ``POST /upload``."""

    reports_progress = False

    async def send(self, request: UploadRequest, on_progress: ProgressCallback) -> UploadResponse:
        files = {"file": (request.file_name, request.payload, request.mime_type)}

        async with self._session() as client:
            try:
                response = await client.post(f"{self.base_url}/upload", files=files)
            except httpx.HTTPError as e:
                raise TransferError(str(e) or "Network error") from e

        result = self._check(response)
        if not result.get("video_url"):
            raise TransferError("Relay response did not include a URL")

        return UploadResponse(
            video_url=result["video_url"],
            thumbnail_url=result.get("thumbnail_url") or "",
            duration=result.get("duration") or "",
        )


class PresignedTransport(UploadTransport):
    """Mint a presigned URL on the relay, then PUT directly to the bucket."""

    reports_progress = True

    def __init__(
        self,
        base_url: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        chunk_size: int = 65536,
    ):
        super().__init__(base_url, http_client=http_client, timeout=timeout)
        self.chunk_size = chunk_size

    async def send(self, request: UploadRequest, on_progress: ProgressCallback) -> UploadResponse:
        async with self._session() as client:
            presigned_url, public_url = await self._mint(client, request)

            try:
                response = await client.put(
                    presigned_url,
                    content=self._stream(request, on_progress),
                    headers={
                        "Content-Type": request.mime_type,
                        "Content-Length": str(request.byte_size),
                    },
                )
            except httpx.HTTPError as e:
                raise TransferError(str(e) or "Network error") from e

        if response.is_error:
            raise TransferError(
                f"Upload failed with status {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        return UploadResponse(video_url=public_url)

    async def _mint(self, client: httpx.AsyncClient, request: UploadRequest) -> tuple[str, str]:
        try:
            response = await client.post(
                f"{self.base_url}/generate-upload-url",
                json={"filename": request.file_name, "contentType": request.mime_type},
            )
        except httpx.HTTPError as e:
            raise TransferError(str(e) or "Network error") from e

        result = self._check(response)
        if not result.get("presignedUrl") or not result.get("publicUrl"):
            raise TransferError("Relay response did not include a presigned URL")
        return result["presignedUrl"], result["publicUrl"]

    async def _stream(self, request: UploadRequest, on_progress: ProgressCallback) -> AsyncIterator[bytes]:
        loaded = 0
        for offset in range(0, request.byte_size, self.chunk_size):
            chunk = request.payload[offset:offset + self.chunk_size]
            yield chunk
            loaded += len(chunk)
            on_progress(loaded, request.byte_size)
