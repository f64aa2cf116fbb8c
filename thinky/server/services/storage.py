"""Avatar storage backends

Overview
--------
Avatars are stored under ``{user_id}/{user_id}-{timestamp_ms}{ext}`` in one
of two backends:

- ``LocalAvatarStorage`` writes files below ``AVATAR_UPLOAD_DIR``; the server
  serves them from ``/uploads``.
- ``SupabaseAvatarStorage`` talks to the hosted object-storage REST API with
  ``httpx``. Public URLs look like
  ``{SUPABASE_URL}/storage/v1/object/public/{bucket}/{path}``.

Errors
------
Uploads raise ``StorageError`` with the upstream status code where there is
one. ``delete_by_url`` is best effort: it logs failures and only removes
objects that belong to the configured backend.
"""

from __future__ import annotations

import os
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional
from urllib.parse import quote, unquote

import httpx
from starlette.concurrency import run_in_threadpool

from thinky.core.logging_config import get_logger
from thinky.server.core.config import StorageConfig, settings

logger = get_logger(__name__)

LOCAL_URL_PREFIX = "/uploads"
PUBLIC_MARKER = "/storage/v1/object/public/"


class StorageError(Exception):
    """Avatar storage failure.

    Args:
        message: Human-readable error description.
        status_code: Optional HTTP status code returned by the storage API.
        details: Optional response body.
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


def avatar_path(user_id: str, filename: Optional[str], now_ms: Optional[int] = None) -> str:
    """Object path for a new avatar of ``user_id``."""
    ext = os.path.splitext(filename or "")[1] or ".png"
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{user_id}/{user_id}-{now_ms}{ext}"


class AvatarStorage(ABC):
    """Where avatar images live."""

    async def save(self, user_id: str, filename: Optional[str], content: bytes, content_type: Optional[str]) -> str:
        """Store an uploaded avatar and return its public URL."""
        path = avatar_path(user_id, filename)
        await self._put(path, content, content_type or "application/octet-stream")
        return self.public_url(path)

    async def delete_by_url(self, url: Optional[str]) -> bool:
        """Remove the object behind ``url`` if it belongs to this backend."""
        path = self.path_from_url(url) if url else None
        if not path:
            return False
        try:
            await self._remove(path)
        except (StorageError, OSError) as e:
            logger.warning(f"Failed to delete old avatar {path}: {e}")
            return False
        return True

    @abstractmethod
    def public_url(self, path: str) -> str: ...

    @abstractmethod
    def path_from_url(self, url: str) -> Optional[str]: ...

    @abstractmethod
    async def _put(self, path: str, content: bytes, content_type: str) -> None: ...

    @abstractmethod
    async def _remove(self, path: str) -> None: ...

    async def aclose(self) -> None:
        """Release any connections held by the backend."""


class LocalAvatarStorage(AvatarStorage):
    """Avatars on the local filesystem."""

    def __init__(self, root: str, url_prefix: str = LOCAL_URL_PREFIX) -> None:
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")

    def public_url(self, path: str) -> str:
        return f"{self.url_prefix}/{quote(path)}"

    def path_from_url(self, url: str) -> Optional[str]:
        prefix = f"{self.url_prefix}/"
        if not url.startswith(prefix):
            return None
        path = unquote(url[len(prefix):])
        # Never follow a URL outside the upload root
        target = (self.root / path).resolve()
        if self.root.resolve() not in target.parents:
            return None
        return path

    def _write(self, path: str, content: bytes) -> None:
        target = self.root / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)

    async def _put(self, path: str, content: bytes, content_type: str) -> None:
        await run_in_threadpool(self._write, path, content)

    async def _remove(self, path: str) -> None:
        await run_in_threadpool((self.root / path).unlink, True)


class SupabaseAvatarStorage(AvatarStorage):
    """Avatars in a hosted storage bucket, reached over its REST API."""

    def __init__(
        self,
        base_url: str,
        service_key: str,
        bucket: str,
        *,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.bucket = bucket
        self._headers = {"Authorization": f"Bearer {service_key}", "apikey": service_key}
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def _object_url(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/{self.bucket}/{quote(path)}"

    def public_url(self, path: str) -> str:
        return f"{self.base_url}{PUBLIC_MARKER}{self.bucket}/{quote(path)}"

    def path_from_url(self, url: str) -> Optional[str]:
        idx = url.find(PUBLIC_MARKER)
        if idx == -1:
            return None
        rest = url[idx + len(PUBLIC_MARKER):]
        bucket, _, path = rest.partition("/")
        if bucket != self.bucket or not path:
            return None
        return unquote(path)

    async def _put(self, path: str, content: bytes, content_type: str) -> None:
        headers = dict(self._headers, **{"Content-Type": content_type, "x-upsert": "true"})
        try:
            resp = await self._client.post(self._object_url(path), content=content, headers=headers)
        except httpx.HTTPError as e:
            raise StorageError(f"Avatar upload failed: {e}") from e
        if resp.status_code >= 400:
            raise StorageError("Avatar upload failed", status_code=resp.status_code, details=resp.text)

    async def _remove(self, path: str) -> None:
        try:
            resp = await self._client.delete(self._object_url(path), headers=self._headers)
        except httpx.HTTPError as e:
            raise StorageError(f"Avatar delete failed: {e}") from e
        if resp.status_code >= 400 and resp.status_code != 404:
            raise StorageError("Avatar delete failed", status_code=resp.status_code, details=resp.text)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def build_storage(config: StorageConfig) -> AvatarStorage:
    if config.use_hosted:
        return SupabaseAvatarStorage(config.supabase_url, config.service_role_key, config.avatar_bucket)
    return LocalAvatarStorage(config.upload_dir)


_storage: Optional[AvatarStorage] = None


def get_storage() -> AvatarStorage:
    """Dependency returning the configured avatar storage."""
    global _storage
    if _storage is None:
        _storage = build_storage(settings.storage)
        logger.debug(f"Avatar storage backend: {type(_storage).__name__}")
    return _storage


async def close_storage() -> None:
    """Close the configured avatar storage, if one was built."""
    global _storage
    if _storage is not None:
        await _storage.aclose()
        _storage = None
