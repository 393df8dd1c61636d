"""
Blob storage for uploaded images and documents.
Objects are addressed by bucket and path and served from a public base URL.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Optional
import aiofiles
import aiofiles.os
import logging

logger = logging.getLogger(__name__)


class BlobStoreError(Exception):
    """An object could not be stored."""


class BlobStore(ABC):
    """Contract every blob store backend satisfies."""

    @abstractmethod
    async def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        """Store an object and return its public URL."""

    @abstractmethod
    async def delete_many(self, bucket: str, paths: Iterable[str]) -> int:
        """Best-effort removal; returns how many objects were removed."""

    @abstractmethod
    def key_from_url(self, bucket: str, url: str) -> Optional[str]:
        """Recover an object path from a URL returned by `upload`."""


class LocalBlobStore(BlobStore):
    """
    Blob store writing objects under `base_dir/<bucket>/<path>`.
    `public_base_url/<bucket>/<path>` is the object's URL.
    """

    def __init__(self, base_dir: str, public_base_url: str):
        self.base_dir = Path(base_dir)
        self.public_base_url = public_base_url.rstrip("/")

    def _object_path(self, bucket: str, path: str) -> Path:
        root = (self.base_dir / bucket).resolve()
        target = (root / path).resolve()
        if root not in target.parents:
            raise BlobStoreError(f"Object path escapes bucket: {path}")
        return target

    def url_for(self, bucket: str, path: str) -> str:
        return f"{self.public_base_url}/{bucket}/{path}"

    async def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        target = self._object_path(bucket, path)
        try:
            await aiofiles.os.makedirs(target.parent, exist_ok=True)
            async with aiofiles.open(target, "wb") as f:
                await f.write(data)
        except OSError as e:
            logger.error(f"Failed to store {bucket}/{path}: {e}")
            raise BlobStoreError(f"Failed to store {path}") from e

        logger.debug(f"Stored {bucket}/{path} ({len(data)} bytes, {content_type})")
        return self.url_for(bucket, path)

    async def delete_many(self, bucket: str, paths: Iterable[str]) -> int:
        removed = 0
        for path in paths:
            try:
                await aiofiles.os.remove(self._object_path(bucket, path))
                removed += 1
            except FileNotFoundError:
                continue
            except (OSError, BlobStoreError) as e:
                logger.warning(f"Failed to delete {bucket}/{path}: {e}")
        return removed

    def key_from_url(self, bucket: str, url: str) -> Optional[str]:
        prefix = f"{self.public_base_url}/{bucket}/"
        if url.startswith(prefix):
            return url[len(prefix):]
        return None
