"""
Scrol Backend — Photo Blob Store
=================================

What:  Key/value object storage for profile photos with per-object content type.
How:   BlobStore is the abstract contract (get / put / delete / health_check);
       FileBlobStore implements it on a local directory with aiofiles, storing
       each object as `<key>` plus a `<key>.meta.json` sidecar holding its
       HTTP metadata.
Who:   PhotoService reads and writes through the `blob_store` singleton.

Directory Structure:
    storage/photos/
    ├── Default_pfp.jpg
    ├── Default_pfp.jpg.meta.json      {"content_type": "image/jpeg"}
    ├── profile-3f9c...e1
    └── profile-3f9c...e1.meta.json

Write protocol:
    Object bytes go to a temporary file first and are moved into place with
    os.replace, so a reader never sees a half-written photo. The sidecar is
    written after the object; a missing sidecar reads as "no content type".
"""

import json
import logging
import os
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterable, AsyncIterator, Optional, Union

import aiofiles

from scrol.config import settings
from scrol.exceptions import BlobStorageError

logger = logging.getLogger(__name__)

META_SUFFIX = ".meta.json"
CHUNK_SIZE = 64 * 1024

BlobContent = Union[bytes, AsyncIterable[bytes]]


@dataclass(frozen=True)
class BlobObject:
    """
    A stored object as returned by BlobStore.get().

    Attributes:
        key:          Key the object was stored under
        size:         Size in bytes
        content_type: Content type recorded at upload time (None if unknown)
        path:         Location of the bytes on disk
    """

    key: str
    size: int
    content_type: Optional[str]
    path: Path

    async def iter_bytes(self, chunk_size: int = CHUNK_SIZE) -> AsyncIterator[bytes]:
        """Stream the object body in chunks (used by StreamingResponse)."""
        async with aiofiles.open(self.path, "rb") as f:
            while True:
                chunk = await f.read(chunk_size)
                if not chunk:
                    break
                yield chunk

    async def read(self) -> bytes:
        async with aiofiles.open(self.path, "rb") as f:
            return await f.read()


class BlobStore(ABC):
    """
    Abstract interface for photo object storage.

    Contract:
        - get() returns None for a missing key, never raises for it
        - put() stores the full byte stream under key, replacing any previous object
        - delete() is best-effort and never raises
        - Storage failures surface as BlobStorageError
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[BlobObject]:
        ...

    @abstractmethod
    async def put(self, key: str, content: BlobContent, content_type: Optional[str] = None) -> int:
        """Store content under key. Returns the number of bytes written."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        ...


async def _as_chunks(content: BlobContent) -> AsyncIterator[bytes]:
    if isinstance(content, (bytes, bytearray)):
        yield bytes(content)
        return
    async for chunk in content:
        yield chunk


class FileBlobStore(BlobStore):
    """
    BlobStore backed by a local directory.

    Keys are opaque strings chosen by this API (`profile-<hex>`) or by
    whoever set the candidate row. A `/` in a key maps to a subdirectory.
    A key that would resolve outside the root directory is rejected.
    """

    def __init__(self, root: Optional[str] = None):
        """
        Args:
            root: Override the storage directory (used in tests).
                  If None, uses settings.blob_root.
        """
        self.root = Path(root or settings.blob_root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        logger.info("FileBlobStore initialized with root=%s", self.root)

    def _path_for(self, key: str) -> Path:
        if not key or key.endswith(META_SUFFIX):
            raise BlobStorageError(context={"key": key, "reason": "invalid key"})
        path = (self.root / key).resolve()
        if path == self.root or not path.is_relative_to(self.root):
            raise BlobStorageError(context={"key": key, "reason": "key escapes blob root"})
        return path

    @staticmethod
    def _meta_path(path: Path) -> Path:
        return path.with_name(path.name + META_SUFFIX)

    async def get(self, key: str) -> Optional[BlobObject]:
        path = self._path_for(key)
        if not path.is_file():
            logger.debug("Blob not found: %s", key)
            return None

        content_type: Optional[str] = None
        meta_path = self._meta_path(path)
        try:
            if meta_path.is_file():
                async with aiofiles.open(meta_path, "r", encoding="utf-8") as f:
                    meta = json.loads(await f.read())
                content_type = meta.get("content_type")
            size = path.stat().st_size
        except (OSError, ValueError) as e:
            logger.error("Failed to read blob %s: %s", key, str(e))
            raise BlobStorageError(context={"key": key, "error": str(e)})

        return BlobObject(key=key, size=size, content_type=content_type, path=path)

    async def put(self, key: str, content: BlobContent, content_type: Optional[str] = None) -> int:
        path = self._path_for(key)
        tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
        written = 0

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(tmp_path, "wb") as f:
                async for chunk in _as_chunks(content):
                    await f.write(chunk)
                    written += len(chunk)
            os.replace(tmp_path, path)

            async with aiofiles.open(self._meta_path(path), "w", encoding="utf-8") as f:
                await f.write(json.dumps({"content_type": content_type}))

        except OSError as e:
            logger.error("Failed to store blob %s: %s", key, str(e))
            if tmp_path.exists():
                tmp_path.unlink()
            raise BlobStorageError(context={"key": key, "os_error": str(e)})

        logger.info("Blob stored: %s (%d bytes, %s)", key, written, content_type)
        return written

    async def delete(self, key: str) -> None:
        """
        Remove an object and its sidecar.

        Best-effort: missing objects are ignored and OS errors are logged,
        not raised. Used to compensate a photo upload whose database update
        failed.
        """
        try:
            path = self._path_for(key)
            for target in (path, self._meta_path(path)):
                if target.exists():
                    os.remove(target)
            logger.info("Blob deleted: %s", key)
        except (OSError, BlobStorageError) as e:
            logger.warning("Failed to delete blob %s: %s", key, str(e))

    async def health_check(self) -> bool:
        return self.root.is_dir() and os.access(self.root, os.R_OK | os.W_OK)


# ── Singleton Instance ────────────────────────────────────────────────────
blob_store: BlobStore = FileBlobStore()
