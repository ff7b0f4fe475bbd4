"""Build uploaders wired to the configured transport strategy."""

from typing import Any, Callable, Optional

import httpx

from edurelay.client.profiles import PROFILES
from edurelay.client.status import UploadStatus
from edurelay.client.transports import PresignedTransport, RelayTransport, UploadTransport
from edurelay.client.uploader import Uploader

TRANSPORTS = {
    "relay": RelayTransport,
    "presigned": PresignedTransport,
}


def get_transport(
    strategy: str,
    base_url: str,
    http_client: Optional[httpx.AsyncClient] = None,
) -> UploadTransport:
    """Return the transport named ``strategy`` ("relay" or "presigned")."""
    try:
        transport_class = TRANSPORTS[strategy.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown upload transport '{strategy}'. Expected one of: {', '.join(TRANSPORTS)}"
        ) from None
    return transport_class(base_url, http_client=http_client)


def build_uploader(
    kind: str,
    on_complete: Callable[[Any], None],
    on_status: Optional[Callable[[UploadStatus], None]] = None,
    transport: Optional[UploadTransport] = None,
    settings=None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> Uploader:
    """Create an image or video uploader.

    Args:
        kind: "image" or "video"
        on_complete: Receives the image URL, or the video payload dict
        on_status: Receives every status change
        transport: Transport to use; built from UPLOAD_TRANSPORT when omitted
        settings: Settings to read UPLOAD_SERVER_URL/UPLOAD_TRANSPORT from
        http_client: Shared httpx client for the transport

    Returns:
        Configured Uploader
    """
    try:
        profile = PROFILES[kind]
    except KeyError:
        raise ValueError(f"Unknown upload kind '{kind}'. Expected one of: {', '.join(PROFILES)}") from None

    if transport is None:
        if settings is None:
            from edurelay.core.config import settings
        transport = get_transport(settings.UPLOAD_TRANSPORT, settings.UPLOAD_SERVER_URL, http_client)

    return Uploader(transport=transport, profile=profile, on_complete=on_complete, on_status=on_status)
