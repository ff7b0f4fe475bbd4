"""Single-file upload state machine.

One ``Uploader`` drives at most one file at a time through
``IDLE -> UPLOADING -> SUCCEEDED | FAILED``. A new file from a terminal state
starts a fresh attempt. The completion callback runs once per successful
attempt and never on failure.
"""

import asyncio
import logging
import time
from contextlib import suppress
from dataclasses import replace
from typing import Any, Callable, Optional, Sequence

from edurelay.client.profiles import UploadProfile, UploadRequest
from edurelay.client.status import UploadPhase, UploadStatus
from edurelay.client.transports import UploadTransport
from edurelay.core.exceptions import TransferError

logger = logging.getLogger(__name__)

ABORTED_MESSAGE = "Upload aborted"
DEFAULT_ERROR = "Failed to upload file. Please try again."


class Uploader:
    """Uploads one file at a time and tracks its UploadStatus.

    Args:
        transport: Strategy that moves the bytes
        profile: Allowed types, size limit and completion payload shape
        on_complete: Called with the profile's payload after a successful upload
        on_status: Called with a copy of the status after every change
        tick_interval: Seconds between synthetic progress steps
        tick_step: Percent added per synthetic step
        synthetic_cap: Highest synthetic percent before the response arrives
    """

    def __init__(
        self,
        transport: UploadTransport,
        profile: UploadProfile,
        on_complete: Callable[[Any], None],
        on_status: Optional[Callable[[UploadStatus], None]] = None,
        tick_interval: float = 0.5,
        tick_step: int = 5,
        synthetic_cap: int = 90,
    ):
        self.transport = transport
        self.profile = profile
        self.on_complete = on_complete
        self.on_status = on_status
        self.tick_interval = tick_interval
        self.tick_step = tick_step
        self.synthetic_cap = synthetic_cap

        self.status = UploadStatus()
        self._transfer: Optional[asyncio.Task] = None
        self._ticker: Optional[asyncio.Task] = None
        self._aborted = False
        self._started_at = 0.0

    @property
    def is_uploading(self) -> bool:
        return self.status.phase == UploadPhase.UPLOADING

    @property
    def ticker_active(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    async def select(self, files: Sequence[UploadRequest]) -> Optional[UploadStatus]:
        """Handle a drop or file selection.

        Only the first file is used. A selection made while an upload is in
        flight is ignored and returns None.

        Raises:
            ValidationError: If the first file is not accepted by the profile
        """
        if not files:
            return None
        if self.is_uploading:
            logger.warning(
                f"Upload already in progress, ignoring {files[0].file_name}",
                extra={"profile": self.profile.name},
            )
            return None
        if len(files) > 1:
            logger.info(
                f"Only one file per upload, ignoring {len(files) - 1} extra file(s)",
                extra={"profile": self.profile.name},
            )
        return await self.upload(files[0])

    async def upload(self, request: UploadRequest) -> UploadStatus:
        """Validate and transfer one file, returning the terminal status."""
        if self.is_uploading:
            raise RuntimeError("An upload is already in progress")

        self.profile.validate(request)

        self._aborted = False
        self._started_at = time.monotonic()
        self._set(UploadStatus(phase=UploadPhase.UPLOADING, bytes_total=request.byte_size))
        logger.info(
            f"Starting {self.profile.name} upload",
            extra={
                "file_name": request.file_name,
                "size_bytes": request.byte_size,
                "content_type": request.mime_type,
                "transport": type(self.transport).__name__,
            },
        )

        if not self.transport.reports_progress:
            self._ticker = asyncio.create_task(self._tick(request.byte_size))
        self._transfer = asyncio.create_task(self.transport.send(request, self._on_progress))

        try:
            result = await self._transfer
        except asyncio.CancelledError:
            await self._finish_transfer()
            self._fail(ABORTED_MESSAGE, aborted=True)
            if not self._aborted:
                raise
            return self.status
        except Exception as e:
            await self._finish_transfer()
            if not isinstance(e, TransferError):
                logger.error("Unexpected upload error", exc_info=True)
            self._fail(str(e) or DEFAULT_ERROR)
            return self.status

        await self._finish_transfer()
        self._set(
            replace(
                self.status,
                phase=UploadPhase.SUCCEEDED,
                progress_percent=100,
                bytes_loaded=request.byte_size,
            )
        )
        logger.info(
            f"{self.profile.name.capitalize()} upload successful",
            extra={"file_name": request.file_name, "url": result.video_url},
        )
        self.on_complete(self.profile.build_payload(result))
        return self.status

    def abort(self) -> bool:
        """Cancel the in-flight transfer.

        Only transports with real progress can be aborted. Returns True when
        a transfer was cancelled.
        """
        if not self.transport.reports_progress:
            logger.warning(f"{type(self.transport).__name__} uploads cannot be aborted")
            return False
        if self._transfer is None or self._transfer.done():
            return False

        self._aborted = True
        self._transfer.cancel()
        return True

    async def _finish_transfer(self) -> None:
        ticker, self._ticker = self._ticker, None
        self._transfer = None
        if ticker is not None:
            ticker.cancel()
            with suppress(asyncio.CancelledError):
                await ticker

    async def _tick(self, total: int) -> None:
        while True:
            await asyncio.sleep(self.tick_interval)
            if not self.is_uploading:
                return
            percent = min(self.status.progress_percent + self.tick_step, self.synthetic_cap)
            self._advance(percent, total * percent // 100)

    def _on_progress(self, loaded: int, total: int) -> None:
        if not self.is_uploading:
            return
        percent = int(loaded * 100 / total) if total else 100
        self._advance(min(percent, 100), loaded)

    def _advance(self, percent: int, loaded: int) -> None:
        loaded = max(loaded, self.status.bytes_loaded)
        percent = max(percent, self.status.progress_percent)
        elapsed = time.monotonic() - self._started_at
        rate = loaded / elapsed if elapsed > 0 else 0.0
        self._set(replace(self.status, progress_percent=percent, bytes_loaded=loaded, rate=rate))

    def _fail(self, message: str, aborted: bool = False) -> None:
        logger.error(
            f"{self.profile.name.capitalize()} upload failed: {message}",
            extra={"aborted": aborted},
        )
        self._set(replace(self.status, phase=UploadPhase.FAILED, error=message, aborted=aborted))

    def _set(self, status: UploadStatus) -> None:
        self.status = status
        if self.on_status is not None:
            self.on_status(replace(status))
