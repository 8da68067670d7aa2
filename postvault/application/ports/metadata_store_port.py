from typing import Protocol, runtime_checkable

from postvault.domain.models import PostRecord


@runtime_checkable
class MetadataStorePort(Protocol):
    """Relational store of post records, unique by slug.

    insert raises SlugConflictError when the slug exists; update and delete
    raise PostNotFoundError when it does not. Any other failure surfaces as
    MetadataStoreError.
    """

    async def find_by_slug(self, slug: str, published_only: bool = False) -> PostRecord | None: ...

    async def list_posts(self, published_only: bool = False) -> list[PostRecord]:
        """Records ordered by published_at, newest first."""
        ...

    async def insert(self, record: PostRecord) -> None: ...

    async def update(self, slug: str, record: PostRecord) -> None: ...

    async def delete(self, slug: str) -> None: ...
