"""Local filesystem blob storage for uploaded article images.

Storage layout:
    <upload_dir>/<prefix>/<name>    — e.g. storage/article-images/Ab3...Z9.jpg

The upload directory is served statically under ``url_prefix``.
"""

import logging
from pathlib import Path

from blog_api.application.interfaces import BlobStorage
from blog_api.domain.exceptions import StorageError

logger = logging.getLogger(__name__)


class LocalBlobStorage(BlobStorage):
    """Infrastructure adapter for blob storage on the local disk."""

    def __init__(self, upload_dir: str, url_prefix: str = "/storage"):
        self._upload_dir = Path(upload_dir)
        self._upload_dir.mkdir(parents=True, exist_ok=True)
        self._url_prefix = url_prefix.rstrip("/")

    @property
    def root(self) -> Path:
        return self._upload_dir

    def _path_for(self, prefix: str, name: str) -> Path:
        """Resolve ``prefix/name`` inside the upload dir, rejecting path traversal."""
        if not name or Path(name).name != name or name in (".", ".."):
            raise StorageError("resolve blob", f"invalid blob name {name!r}")
        return self._upload_dir / prefix / name

    async def store(self, prefix: str, name: str, content: bytes) -> str:
        dest_path = self._path_for(prefix, name)
        try:
            dest_path.parent.mkdir(parents=True, exist_ok=True)
            dest_path.write_bytes(content)
        except OSError as exc:
            logger.error("Failed to store blob %s: %s", dest_path, exc)
            raise StorageError("store blob", str(exc)) from exc

        logger.info("Stored blob: %s (%d bytes)", dest_path, len(content))
        return name

    async def delete(self, prefix: str, name: str) -> bool:
        """Delete a stored blob from disk.

        Returns True if successfully deleted, False if not found.
        Empty prefix directories are *not* pruned.
        """
        file_path = self._path_for(prefix, name)
        if not file_path.exists():
            logger.debug("Blob already absent: %s", file_path)
            return False

        try:
            file_path.unlink(missing_ok=True)
        except OSError as exc:
            logger.error("Failed to delete blob %s: %s", file_path, exc)
            raise StorageError("delete blob", str(exc)) from exc

        logger.info("Deleted blob from disk: %s", file_path)
        return True

    async def exists(self, prefix: str, name: str) -> bool:
        return self._path_for(prefix, name).is_file()

    async def read(self, prefix: str, name: str) -> bytes:
        file_path = self._path_for(prefix, name)
        try:
            return file_path.read_bytes()
        except OSError as exc:
            raise StorageError("read blob", str(exc)) from exc

    def url(self, prefix: str, name: str) -> str:
        return f"{self._url_prefix}/{prefix}/{name}"
