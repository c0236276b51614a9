"""
Blob storage for uploaded assets and generated outputs
"""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Optional
from urllib.parse import quote

import structlog

from covergen.core.config import settings
from covergen.core.exceptions import NotFoundError, StorageError
from covergen.core.security import create_storage_token

logger = structlog.get_logger()


def asset_storage_key(project_id, asset_id, extension: str) -> str:
    extension = extension.lstrip(".").lower() or "bin"
    return f"projects/{project_id}/assets/{asset_id}.{extension}"


def output_storage_key(project_id, job_id, output_id) -> str:
    return f"projects/{project_id}/outputs/{job_id}/{output_id}.png"


class BlobStorage(ABC):
    """Key-addressed binary storage"""

    provider_name = "blob"

    @abstractmethod
    def upload(self, key: str, data: bytes, content_type: str) -> None:
        """Store bytes under a new key. Existing keys are never overwritten."""
        pass

    @abstractmethod
    def download(self, key: str) -> bytes:
        pass

    @abstractmethod
    def delete(self, keys: Iterable[str]) -> None:
        """Delete keys; missing keys are ignored"""
        pass

    @abstractmethod
    def create_signed_url(self, key: str, ttl_seconds: int) -> str:
        pass


class LocalBlobStorage(BlobStorage):
    """Filesystem storage; signed URLs are served by the storage endpoint"""

    provider_name = "local"

    def __init__(self, root_dir: str, base_url: Optional[str] = None, api_prefix: str = "/api/v1"):
        self.root = Path(root_dir).resolve()
        self.base_url = (base_url or "").rstrip("/")
        self.api_prefix = api_prefix

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if path != self.root and self.root not in path.parents:
            raise StorageError(f"Invalid storage key: {key}")
        return path

    def upload(self, key: str, data: bytes, content_type: str) -> None:
        path = self._path(key)
        if path.exists():
            raise StorageError(f"Object already exists: {key}")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Failed to upload {key}: {e}") from e
        logger.info("Blob uploaded", key=key, size_bytes=len(data), content_type=content_type)

    def download(self, key: str) -> bytes:
        path = self._path(key)
        if not path.is_file():
            raise NotFoundError(f"Object not found: {key}")
        try:
            return path.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to download {key}: {e}") from e

    def delete(self, keys: Iterable[str]) -> None:
        for key in keys:
            path = self._path(key)
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                raise StorageError(f"Failed to delete {key}: {e}") from e
            logger.info("Blob deleted", key=key)

    def create_signed_url(self, key: str, ttl_seconds: int) -> str:
        token = create_storage_token(key, ttl_seconds)
        return f"{self.base_url}{self.api_prefix}/storage/{quote(key)}?token={token}"


def get_storage() -> BlobStorage:
    """Storage backend for the configured STORAGE_PROVIDER"""
    if settings.STORAGE_PROVIDER != "local":
        raise StorageError(f"Unsupported storage provider: {settings.STORAGE_PROVIDER}")
    return LocalBlobStorage(settings.STORAGE_DIR, settings.PUBLIC_BASE_URL, settings.API_V1_STR)
