# postvault/domain/models.py
# Domain models must be pure (no I/O, no external libs)
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

CONTENT_KEY_PREFIX = "posts/"
CONTENT_TYPE = "text/markdown; charset=utf-8"


def content_key_for(slug: str) -> str:
    """Blob locator for a post body; a function of the slug only."""
    return f"{CONTENT_KEY_PREFIX}{slug}.md"


def slug_for_content_key(key: str) -> str:
    """Inverse of content_key_for."""
    return key.removeprefix(CONTENT_KEY_PREFIX).removesuffix(".md")


class PostStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


@dataclass(frozen=True)
class PostSummary:
    """Listing projection of a published post."""

    id: str
    slug: str
    title: str
    excerpt: str
    published_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "slug": self.slug,
            "title": self.title,
            "excerpt": self.excerpt,
            "publishedAt": self.published_at,
        }


@dataclass(frozen=True)
class PostRecord:
    """
    Persisted metadata of a post. The body itself lives in the blob store.

    - id:             opaque id, assigned once at creation
    - slug:           unique, immutable; the content key derives from it
    - published_at:   ISO-8601, caller-settable
    - updated_at:     ISO-8601, bumped on every mutation
    - content_length: UTF-8 byte length as of the last content write
    - content_hash:   SHA-256 hex as of the last content write

    Length and hash are trusted as written; reads never re-verify them
    against the blob store.
    """

    id: str
    slug: str
    title: str
    excerpt: str
    status: PostStatus
    published_at: str
    updated_at: str
    content_key: str
    content_type: str
    content_length: int | None
    content_hash: str | None

    def summary(self) -> PostSummary:
        return PostSummary(
            id=self.id,
            slug=self.slug,
            title=self.title,
            excerpt=self.excerpt,
            published_at=self.published_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "slug": self.slug,
            "title": self.title,
            "excerpt": self.excerpt,
            "status": self.status.value,
            "publishedAt": self.published_at,
            "updatedAt": self.updated_at,
            "contentKey": self.content_key,
            "contentType": self.content_type,
            "contentLength": self.content_length,
            "contentHash": self.content_hash,
        }


@dataclass(frozen=True)
class PostWithContent:
    """Read view: metadata plus the current blob payload. Built per read."""

    post: PostRecord
    content: str | None
    etag: str | None
