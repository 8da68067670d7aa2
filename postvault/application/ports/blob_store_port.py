"""Blob store port for post bodies."""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class BlobObject:
    content: str
    etag: str | None


@dataclass(frozen=True)
class BlobInfo:
    key: str
    last_modified: datetime | None


@runtime_checkable
class BlobStorePort(Protocol):
    """Port for object storage holding raw markdown, keyed by path.

    Implementations raise BlobStoreError on infrastructure failure.
    """

    async def put(self, key: str, content: str, content_type: str) -> None:
        """Write or overwrite the object at key."""
        ...

    async def get(self, key: str) -> BlobObject | None:
        """Return content and etag, or None when no object exists at key."""
        ...

    async def delete(self, key: str) -> None:
        """Remove the object; a missing key is not an error."""
        ...

    async def list_objects(self, prefix: str = "") -> list[BlobInfo]:
        """List objects under prefix."""
        ...
