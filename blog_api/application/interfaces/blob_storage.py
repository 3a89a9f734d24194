"""Abstract interface (port) for named binary object storage."""

from abc import ABC, abstractmethod


class BlobStorage(ABC):
    """Port for storing blobs by logical prefix and name.

    I/O failures are raised as ``StorageError``.
    """

    @abstractmethod
    async def store(self, prefix: str, name: str, content: bytes) -> str:
        """Write *content* as ``prefix/name``, replacing any existing blob. Returns the name."""
        ...

    @abstractmethod
    async def delete(self, prefix: str, name: str) -> bool:
        """Delete ``prefix/name``. Returns False if it did not exist."""
        ...

    @abstractmethod
    async def exists(self, prefix: str, name: str) -> bool:
        ...

    @abstractmethod
    async def read(self, prefix: str, name: str) -> bytes:
        ...

    @abstractmethod
    def url(self, prefix: str, name: str) -> str:
        """Public URL under which the blob is served."""
        ...
