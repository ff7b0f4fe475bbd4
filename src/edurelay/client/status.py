"""Upload status value object and its text rendering."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class UploadPhase(str, Enum):
    """Upload phase enumeration."""

    IDLE = "idle"
    UPLOADING = "uploading"
    SUCCEEDED = "succeeded"  # Terminal for the attempt
    FAILED = "failed"  # Terminal for the attempt


@dataclass
class UploadStatus:
    """Progress of the current upload attempt."""

    phase: UploadPhase = UploadPhase.IDLE
    progress_percent: int = 0
    bytes_loaded: int = 0
    bytes_total: int = 0
    rate: float = 0.0  # bytes per second
    error: Optional[str] = None
    aborted: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.phase in (UploadPhase.SUCCEEDED, UploadPhase.FAILED)


def format_bytes(num_bytes: float, decimals: int = 2) -> str:
    """Human readable size, e.g. ``1.5 MB``."""
    if num_bytes <= 0:
        return "0 B"
    sizes = ["B", "KB", "MB", "GB"]
    value = float(num_bytes)
    i = 0
    while value >= 1024 and i < len(sizes) - 1:
        value /= 1024
        i += 1
    value = round(value, max(decimals, 0))
    if value == int(value):
        value = int(value)
    return f"{value} {sizes[i]}"


def render_status(status: UploadStatus, noun: str = "file") -> str:
    """Text for the status panel shown under the drop zone."""
    if status.phase == UploadPhase.UPLOADING:
        return (
            f"Uploading {noun}... {status.progress_percent}% "
            f"({format_bytes(status.bytes_loaded)} of {format_bytes(status.bytes_total)}, "
            f"Speed: {format_bytes(status.rate)}/s)"
        )
    if status.phase == UploadPhase.FAILED:
        return f"Error: {status.error}"
    if status.phase == UploadPhase.SUCCEEDED:
        return "Upload complete!"
    return ""
