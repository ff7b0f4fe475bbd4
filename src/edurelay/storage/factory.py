"""Storage backend selection."""

from edurelay.core.exceptions import StorageConfigError
from edurelay.storage.base import ObjectStore
from edurelay.storage.gcs import GCSObjectStore
from edurelay.storage.local import LocalObjectStore
from edurelay.storage.s3 import S3ObjectStore


def get_storage_backend(settings=None) -> ObjectStore:
    """Build the object store named by STORAGE_BACKEND.

    Raises:
        StorageConfigError: If the backend name is unknown
    """
    if settings is None:
        from edurelay.core.config import settings

    backend = settings.STORAGE_BACKEND.lower()
    if backend == "s3":
        return S3ObjectStore.from_settings(settings)
    if backend == "gcs":
        return GCSObjectStore.from_settings(settings)
    if backend == "local":
        return LocalObjectStore(settings.LOCAL_STORAGE_PATH)

    raise StorageConfigError(
        f"Unknown STORAGE_BACKEND '{settings.STORAGE_BACKEND}'. Expected s3, gcs or local."
    )
