"""Upload profiles: what an uploader accepts and what it hands back."""

import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from edurelay.core.exceptions import ValidationError
from edurelay.models.upload import UploadResponse

MIB = 1024 * 1024


@dataclass
class UploadRequest:
    """One file selected or dropped by the user."""

    file_name: str
    byte_size: int
    mime_type: str
    payload: bytes = field(repr=False)

    @classmethod
    def from_bytes(cls, file_name: str, payload: bytes, mime_type: str | None = None) -> "UploadRequest":
        if mime_type is None:
            mime_type = mimetypes.guess_type(file_name)[0] or "application/octet-stream"
        return cls(file_name=file_name, byte_size=len(payload), mime_type=mime_type, payload=payload)

    @classmethod
    def from_path(cls, path: str | Path, mime_type: str | None = None) -> "UploadRequest":
        path = Path(path)
        return cls.from_bytes(path.name, path.read_bytes(), mime_type)


def _url_only(result: UploadResponse) -> str:
    return result.video_url


def _video_payload(result: UploadResponse) -> dict:
    return {
        "video_url": result.video_url,
        "thumbnail_url": result.thumbnail_url or "",
        "duration": result.duration or "",
    }


@dataclass(frozen=True)
class UploadProfile:
    """Accepted MIME types, size limit and completion payload of an uploader."""

    name: str
    allowed_mime_types: frozenset[str]
    extensions: tuple[str, ...]
    build_payload: Callable[[UploadResponse], Any]
    max_bytes: Optional[int] = None

    def accepts(self, request: UploadRequest) -> bool:
        """True when the MIME type or the file extension is allowed."""
        if request.mime_type.lower() in self.allowed_mime_types:
            return True
        return Path(request.file_name).suffix.lower() in self.extensions

    def validate(self, request: UploadRequest) -> None:
        """Reject files outside the allow-list or over the size limit.

        Raises:
            ValidationError: If the file must not be uploaded
        """
        if not self.accepts(request):
            raise ValidationError(
                f"File type {request.mime_type or 'unknown'} is not allowed. "
                f"Supported formats: {self.describe_formats()}"
            )
        if self.max_bytes is not None and request.byte_size > self.max_bytes:
            raise ValidationError(
                f"File is larger than {self.max_bytes // MIB}MB"
            )

    def describe_formats(self) -> str:
        formats = ", ".join(ext.lstrip(".").upper() for ext in self.extensions)
        if self.max_bytes is not None:
            formats += f" (max {self.max_bytes // MIB}MB)"
        return formats


IMAGE_PROFILE = UploadProfile(
    name="image",
    allowed_mime_types=frozenset(
        {"image/png", "image/jpeg", "image/jpg", "image/gif", "image/webp"}
    ),
    extensions=(".png", ".jpg", ".jpeg", ".gif", ".webp"),
    build_payload=_url_only,
    max_bytes=5 * MIB,
)

VIDEO_PROFILE = UploadProfile(
    name="video",
    allowed_mime_types=frozenset(
        {"video/mp4", "video/quicktime", "video/x-msvideo", "video/x-matroska"}
    ),
    extensions=(".mp4", ".mov", ".avi", ".mkv"),
    build_payload=_video_payload,
)

PROFILES = {profile.name: profile for profile in (IMAGE_PROFILE, VIDEO_PROFILE)}
