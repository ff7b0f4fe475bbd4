"""
Upload client

Drives one file at a time from selection to a public URL, exposing an
UploadStatus for display and calling a completion callback on success.
"""

from edurelay.client.factory import build_uploader, get_transport
from edurelay.client.profiles import IMAGE_PROFILE, VIDEO_PROFILE, UploadProfile, UploadRequest
from edurelay.client.status import UploadPhase, UploadStatus, format_bytes, render_status
from edurelay.client.transports import PresignedTransport, RelayTransport, UploadTransport
from edurelay.client.uploader import Uploader

__all__ = [
    "build_uploader",
    "get_transport",
    "IMAGE_PROFILE",
    "VIDEO_PROFILE",
    "UploadProfile",
    "UploadRequest",
    "UploadPhase",
    "UploadStatus",
    "format_bytes",
    "render_status",
    "PresignedTransport",
    "RelayTransport",
    "UploadTransport",
    "Uploader",
]
