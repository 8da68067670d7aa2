"""MinIO (S3-compatible) blob store adapter for post bodies.

The minio client is blocking; every call runs in a worker thread so the
repository's awaits never block the event loop.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from importlib import import_module
from io import BytesIO
from typing import Any

from postvault.application.ports import BlobInfo, BlobObject, BlobStorePort
from postvault.domain.errors import BlobStoreError

_MISSING_CODES = frozenset({"NoSuchKey", "NoSuchObject"})


@dataclass
class MinioConfig:
    """Configuration for MinIO client."""

    endpoint: str
    access_key: str
    secret_key: str
    bucket_name: str = "posts"
    secure: bool = True
    region: str | None = None


class MinioBlobStoreAdapter(BlobStorePort):
    """MinIO adapter for the post blob store.

    Features:
    - Overwriting puts with the markdown content type
    - Etag passthrough on reads (freshness token for HTTP caching)
    - Idempotent deletes
    - Automatic bucket creation
    """

    def __init__(self, cfg: MinioConfig, client: Any | None = None) -> None:
        """Initialize MinIO blob store adapter.

        Args:
            cfg: MinioConfig with connection parameters
            client: Pre-built client (tests); built from cfg when omitted

        Raises:
            BlobStoreError: If MinIO initialization fails
        """
        self._cfg = cfg
        self._client = client if client is not None else self._init_client(cfg)
        self._s3_error = self._load_s3_error()
        self._ensure_bucket()

    def _init_client(self, cfg: MinioConfig) -> Any:
        """Initialize MinIO client with lazy import.

        Raises:
            BlobStoreError: If minio-py not available or init fails
        """
        try:
            minio = import_module("minio")
            return minio.Minio(
                cfg.endpoint,
                access_key=cfg.access_key,
                secret_key=cfg.secret_key,
                secure=cfg.secure,
                region=cfg.region,
            )
        except Exception as ex:
            raise BlobStoreError(f"MinIO init failed: {ex}") from ex

    @staticmethod
    def _load_s3_error() -> type[Exception]:
        try:
            return import_module("minio.error").S3Error
        except Exception as ex:
            raise BlobStoreError(f"MinIO init failed: {ex}") from ex

    def _ensure_bucket(self) -> None:
        """Ensure bucket exists, create if not.

        Raises:
            BlobStoreError: If bucket creation fails
        """
        try:
            if not self._client.bucket_exists(bucket_name=self._cfg.bucket_name):
                self._client.make_bucket(
                    bucket_name=self._cfg.bucket_name,
                    location=self._cfg.region,
                )
        except Exception as ex:
            raise BlobStoreError(f"Bucket creation failed: {ex}") from ex

    async def put(self, key: str, content: str, content_type: str) -> None:
        data = content.encode("utf-8")
        try:
            await asyncio.to_thread(
                self._client.put_object,
                bucket_name=self._cfg.bucket_name,
                object_name=key,
                data=BytesIO(data),
                length=len(data),
                content_type=content_type,
            )
        except Exception as ex:
            raise BlobStoreError(f"put failed for {key}: {ex}") from ex

    async def get(self, key: str) -> BlobObject | None:
        """Read an object.

        Returns:
            BlobObject with decoded content and etag, or None for a missing key

        Raises:
            BlobStoreError: Any failure other than a missing key
        """
        try:
            return await asyncio.to_thread(self._read, key)
        except self._s3_error as ex:
            if getattr(ex, "code", None) in _MISSING_CODES:
                return None
            raise BlobStoreError(f"get failed for {key}: {ex}") from ex
        except Exception as ex:
            raise BlobStoreError(f"get failed for {key}: {ex}") from ex

    def _read(self, key: str) -> BlobObject:
        response = self._client.get_object(bucket_name=self._cfg.bucket_name, object_name=key)
        try:
            data = response.read()
            etag = response.headers.get("ETag")
        finally:
            response.close()
            response.release_conn()
        return BlobObject(content=data.decode("utf-8"), etag=etag.strip('"') if etag else None)

    async def delete(self, key: str) -> None:
        # S3 semantics: removing a missing object succeeds.
        try:
            await asyncio.to_thread(
                self._client.remove_object,
                bucket_name=self._cfg.bucket_name,
                object_name=key,
            )
        except self._s3_error as ex:
            if getattr(ex, "code", None) in _MISSING_CODES:
                return
            raise BlobStoreError(f"delete failed for {key}: {ex}") from ex
        except Exception as ex:
            raise BlobStoreError(f"delete failed for {key}: {ex}") from ex

    async def list_objects(self, prefix: str = "") -> list[BlobInfo]:
        try:
            return await asyncio.to_thread(self._list, prefix)
        except Exception as ex:
            raise BlobStoreError(f"list_objects failed: {ex}") from ex

    def _list(self, prefix: str) -> list[BlobInfo]:
        objects = self._client.list_objects(
            bucket_name=self._cfg.bucket_name, prefix=prefix, recursive=True
        )
        return [BlobInfo(key=obj.object_name, last_modified=obj.last_modified) for obj in objects]
