"""Abstract object store interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import BinaryIO


@dataclass
class StoredObject:
    """Object written to a bucket by a PUT."""

    key: str
    content_type: str
    size_bytes: int


class ObjectStore(ABC):
    """Abstract base class for object store backends."""

    @abstractmethod
    async def put_object(
        self, key: str, file_data: BinaryIO, content_type: str, size_bytes: int
    ) -> StoredObject:
        """Write the full contents of ``file_data`` under ``key``.

        An existing object with the same key is overwritten.

        Args:
            key: Object key (the original file name)
            file_data: Readable binary stream positioned at the start
            content_type: MIME type stored with the object
            size_bytes: Number of bytes in ``file_data``

        Returns:
            The stored object

        Raises:
            TransferError: If the store rejects the write
        """

    @abstractmethod
    def generate_presigned_put_url(self, key: str, content_type: str, expires_in: int) -> str:
        """Mint a time-limited URL allowing one direct PUT of ``key``.

        Raises:
            PresignNotSupportedError: If the backend cannot sign URLs
            TransferError: If signing fails
        """

    @abstractmethod
    def get_backend_name(self) -> str:
        """Return backend identifier."""
