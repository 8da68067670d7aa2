"""Process-local blob store.

Used for development (BLOBSTORE_BACKEND=memory) and tests. Etags are the
MD5 of the stored bytes, as S3-compatible stores report for single-part
uploads.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import datetime

from postvault.application.ports import BlobInfo, BlobObject, BlobStorePort, ClockPort
from postvault.infrastructure.time.system_clock import SystemClock


@dataclass(frozen=True)
class _StoredBlob:
    data: bytes
    content_type: str
    etag: str
    last_modified: datetime


class InMemoryBlobStore(BlobStorePort):
    def __init__(self, clock: ClockPort | None = None) -> None:
        self._clock = clock or SystemClock()
        self._objects: dict[str, _StoredBlob] = {}

    async def put(self, key: str, content: str, content_type: str) -> None:
        data = content.encode("utf-8")
        self._objects[key] = _StoredBlob(
            data=data,
            content_type=content_type,
            etag=hashlib.md5(data).hexdigest(),
            last_modified=self._clock.now(),
        )

    async def get(self, key: str) -> BlobObject | None:
        stored = self._objects.get(key)
        if stored is None:
            return None
        return BlobObject(content=stored.data.decode("utf-8"), etag=stored.etag)

    async def delete(self, key: str) -> None:
        self._objects.pop(key, None)

    async def list_objects(self, prefix: str = "") -> list[BlobInfo]:
        return [
            BlobInfo(key=key, last_modified=stored.last_modified)
            for key, stored in sorted(self._objects.items())
            if key.startswith(prefix)
        ]

    def content_type_of(self, key: str) -> str | None:
        stored = self._objects.get(key)
        return stored.content_type if stored else None

    def __contains__(self, key: object) -> bool:
        return key in self._objects
