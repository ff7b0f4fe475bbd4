"""Exceptions shared by the upload relay and the upload client."""


class UploadException(Exception):
    """Base exception for upload failures."""

    status_code: int = 500


class ValidationError(UploadException):
    """File rejected by the client before any transfer starts."""

    status_code = 400


class NoFileError(UploadException):
    """Relay request carried no file part."""

    status_code = 400

    def __init__(self, message: str = "No file uploaded"):
        super().__init__(message)


class TransferError(UploadException):
    """Network failure, non-2xx response or object-store rejection."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class CleanupError(UploadException):
    """Staged file could not be removed. Logged, never raised to callers."""


class StorageConfigError(UploadException):
    """Storage backend is missing required configuration."""


class PresignNotSupportedError(UploadException):
    """Storage backend cannot mint presigned upload URLs."""

    status_code = 400
