"""Post repository: metadata store + blob store without a shared transaction.

Consistency is procedural rather than transactional:

- create writes the blob before the metadata row, and deletes the blob
  again if the insert fails;
- delete removes the metadata row before the blob, so a blob left behind
  by a failed second step is unreachable (every read starts with a metadata
  hit) and is reclaimed later by SweepOrphanedBlobs.

Slug taken / post missing are returned as Result failures. Store failures
raise and propagate; the create-time compensation is the only place they
are caught.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from postvault.application.dto.post_dto import CreatePostInput, UpdatePostInput
from postvault.application.ports import BlobStorePort, ClockPort, MetadataStorePort, TelemetryPort
from postvault.domain.errors import PostNotFoundError, SlugConflictError
from postvault.domain.models import (
    CONTENT_TYPE,
    PostRecord,
    PostStatus,
    PostSummary,
    PostWithContent,
    content_key_for,
)
from postvault.domain.services import content_hasher
from postvault.domain.types import Result

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


class PostRepository:
    """Create/read/update/delete/list for posts split across two stores.

    Stateless: every call is an independent unit of work, so unrelated
    calls can run concurrently on one instance.
    """

    def __init__(
        self,
        metadata: MetadataStorePort,
        blobs: BlobStorePort,
        clock: ClockPort,
        id_factory: Callable[[], str] = _new_id,
        telemetry: TelemetryPort | None = None,
    ) -> None:
        """Initialize with both stores and the clock.

        Args:
            metadata: Relational store, authoritative for slug uniqueness
            blobs: Object store holding the markdown bodies
            clock: Source of published_at defaults and updated_at
            id_factory: Produces the opaque id of new posts
            telemetry: Optional counters for outcomes and compensations
        """
        self.metadata = metadata
        self.blobs = blobs
        self.clock = clock
        self.id_factory = id_factory
        self.telemetry = telemetry

    # ===== Reads =====

    async def get_published(self, slug: str) -> PostWithContent | None:
        post = await self.metadata.find_by_slug(slug, published_only=True)
        if post is None:
            return None
        return await self._with_content(post)

    async def get_any(self, slug: str) -> PostWithContent | None:
        post = await self.metadata.find_by_slug(slug)
        if post is None:
            return None
        return await self._with_content(post)

    async def list_published(self) -> list[PostSummary]:
        posts = await self.metadata.list_posts(published_only=True)
        return [p.summary() for p in posts]

    async def list(self) -> list[PostRecord]:
        return await self.metadata.list_posts()

    async def _with_content(self, post: PostRecord) -> PostWithContent:
        # A missing blob is reported as content=None; callers decide whether
        # that counts as "not found".
        blob = await self.blobs.get(post.content_key)
        if blob is None:
            return PostWithContent(post=post, content=None, etag=post.content_hash)
        return PostWithContent(post=post, content=blob.content, etag=blob.etag or post.content_hash)

    # ===== Writes =====

    async def create(self, data: CreatePostInput) -> Result[PostRecord]:
        """Create a post: blob first, then the metadata row.

        Returns:
            Result with the assembled record (not re-read), or
            failure("slug_exists")

        Raises:
            StorageError: Store failure. When the insert fails, the blob is
                deleted before the insert error is re-raised; if that delete
                fails too, its error propagates instead.
        """
        # Fast path only; the store's unique constraint is authoritative.
        if await self.metadata.find_by_slug(data.slug) is not None:
            self._count("posts.create", outcome="slug_exists")
            return Result.failure("slug_exists")

        now = self.clock.iso_now()
        meta = content_hasher.compute(data.content)
        record = PostRecord(
            id=self.id_factory(),
            slug=data.slug,
            title=data.title,
            excerpt=data.excerpt,
            status=data.status or PostStatus.PUBLISHED,
            published_at=data.published_at or now,
            updated_at=now,
            content_key=content_key_for(data.slug),
            content_type=CONTENT_TYPE,
            content_length=meta.length,
            content_hash=meta.hash,
        )

        await self.blobs.put(record.content_key, data.content, record.content_type)

        try:
            await self.metadata.insert(record)
        except SlugConflictError:
            # Lost the race to a concurrent creator after the pre-check. The
            # key belongs to the surviving row now, so the blob stays.
            logger.warning("slug %s taken by a concurrent create", data.slug)
            self._count("posts.create", outcome="slug_exists")
            return Result.failure("slug_exists")
        except Exception:
            logger.warning("insert of %s failed, removing blob %s", data.slug, record.content_key)
            self._count("posts.compensation", result="attempted")
            await self.blobs.delete(record.content_key)
            raise

        self._count("posts.create", outcome="ok")
        self._observe("posts.content_bytes", meta.length)
        return Result.success(record)

    async def update(self, slug: str, changes: UpdatePostInput) -> Result[PostRecord]:
        """Merge changes into the stored record and persist the full row.

        Content, when given, overwrites the blob in place under the same key.
        Without content, key/type/length/hash are carried over untouched.
        """
        existing = await self.metadata.find_by_slug(slug)
        if existing is None:
            self._count("posts.update", outcome="not_found")
            return Result.failure("not_found")

        merged = replace(
            existing,
            title=existing.title if changes.title is None else changes.title,
            excerpt=existing.excerpt if changes.excerpt is None else changes.excerpt,
            status=changes.status or existing.status,
            published_at=changes.published_at or existing.published_at,
            updated_at=self.clock.iso_now(),
        )

        if changes.content is not None:
            meta = content_hasher.compute(changes.content)
            merged = replace(
                merged,
                content_key=content_key_for(slug),
                content_type=CONTENT_TYPE,
                content_length=meta.length,
                content_hash=meta.hash,
            )
            await self.blobs.put(merged.content_key, changes.content, merged.content_type)
            self._observe("posts.content_bytes", meta.length)

        try:
            await self.metadata.update(slug, merged)
        except PostNotFoundError:
            # Deleted between load and write.
            self._count("posts.update", outcome="not_found")
            return Result.failure("not_found")

        self._count("posts.update", outcome="ok")
        return Result.success(merged)

    async def delete(self, slug: str) -> Result[None]:
        """Delete the metadata row, then the blob.

        A blob delete failure is not compensated: the row is already gone,
        the error propagates and the blob is left for the orphan sweep.
        """
        existing = await self.metadata.find_by_slug(slug)
        if existing is None:
            self._count("posts.delete", outcome="not_found")
            return Result.failure("not_found")

        try:
            await self.metadata.delete(slug)
        except PostNotFoundError:
            self._count("posts.delete", outcome="not_found")
            return Result.failure("not_found")

        await self.blobs.delete(existing.content_key)
        self._count("posts.delete", outcome="ok")
        return Result.success(None)

    # ===== Telemetry =====

    def _count(self, name: str, **tags: Any) -> None:
        if self.telemetry is not None:
            self.telemetry.incr(name, tags)

    def _observe(self, name: str, value: float) -> None:
        if self.telemetry is not None:
            self.telemetry.observe(name, value, {})
