"""Blob store on the local filesystem (BLOBSTORE_BACKEND=fs).

Keys map to paths under the root directory. Writes go through a temporary
file and os.replace, so a reader sees the old or the new body, never a torn
one.
"""

from __future__ import annotations

import asyncio
import hashlib
import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path

from postvault.application.ports import BlobInfo, BlobObject, BlobStorePort
from postvault.domain.errors import BlobStoreError


class FilesystemBlobStore(BlobStorePort):
    def __init__(self, root: Path) -> None:
        self._root = root

    def _path(self, key: str) -> Path:
        path = (self._root / key).resolve()
        if not path.is_relative_to(self._root.resolve()):
            raise BlobStoreError(f"key escapes blob root: {key}")
        return path

    async def put(self, key: str, content: str, content_type: str) -> None:
        try:
            await asyncio.to_thread(self._write, self._path(key), content.encode("utf-8"))
        except OSError as ex:
            raise BlobStoreError(f"put failed for {key}: {ex}") from ex

    async def get(self, key: str) -> BlobObject | None:
        try:
            data = await asyncio.to_thread(self._path(key).read_bytes)
        except FileNotFoundError:
            return None
        except OSError as ex:
            raise BlobStoreError(f"get failed for {key}: {ex}") from ex
        try:
            content = data.decode("utf-8")
        except UnicodeDecodeError as ex:
            raise BlobStoreError(f"get failed for {key}: not UTF-8 ({ex})") from ex
        return BlobObject(content=content, etag=hashlib.md5(data).hexdigest())

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._path(key).unlink, missing_ok=True)
        except OSError as ex:
            raise BlobStoreError(f"delete failed for {key}: {ex}") from ex

    async def list_objects(self, prefix: str = "") -> list[BlobInfo]:
        try:
            return await asyncio.to_thread(self._list, prefix)
        except OSError as ex:
            raise BlobStoreError(f"list_objects failed: {ex}") from ex

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".tmp-")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def _list(self, prefix: str) -> list[BlobInfo]:
        if not self._root.exists():
            return []
        infos = []
        for path in sorted(self._root.rglob("*")):
            if not path.is_file() or path.name.startswith(".tmp-"):
                continue
            key = path.relative_to(self._root).as_posix()
            if key.startswith(prefix):
                mtime = datetime.fromtimestamp(path.stat().st_mtime, UTC)
                infos.append(BlobInfo(key=key, last_modified=mtime))
        return infos
