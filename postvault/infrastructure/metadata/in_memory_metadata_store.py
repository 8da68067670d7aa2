"""Process-local metadata store (METADATA_BACKEND=memory, tests).

Enforces slug uniqueness the way the relational store does: insert of an
existing slug raises SlugConflictError.
"""

from __future__ import annotations

from postvault.application.ports import MetadataStorePort
from postvault.domain.errors import PostNotFoundError, SlugConflictError
from postvault.domain.models import PostRecord, PostStatus


class InMemoryMetadataStore(MetadataStorePort):
    def __init__(self) -> None:
        self._rows: dict[str, PostRecord] = {}

    async def find_by_slug(self, slug: str, published_only: bool = False) -> PostRecord | None:
        record = self._rows.get(slug)
        if record is None:
            return None
        if published_only and record.status is not PostStatus.PUBLISHED:
            return None
        return record

    async def list_posts(self, published_only: bool = False) -> list[PostRecord]:
        rows = [
            r
            for r in self._rows.values()
            if not published_only or r.status is PostStatus.PUBLISHED
        ]
        return sorted(rows, key=lambda r: r.published_at, reverse=True)

    async def insert(self, record: PostRecord) -> None:
        if record.slug in self._rows:
            raise SlugConflictError(record.slug)
        self._rows[record.slug] = record

    async def update(self, slug: str, record: PostRecord) -> None:
        if slug not in self._rows:
            raise PostNotFoundError(slug)
        self._rows[slug] = record

    async def delete(self, slug: str) -> None:
        if self._rows.pop(slug, None) is None:
            raise PostNotFoundError(slug)
