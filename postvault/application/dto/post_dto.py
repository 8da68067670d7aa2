from __future__ import annotations

from dataclasses import dataclass

from postvault.domain.models import PostStatus


@dataclass(frozen=True)
class CreatePostInput:
    slug: str
    title: str
    excerpt: str
    content: str
    status: PostStatus | None = None  # None -> published
    published_at: str | None = None  # None -> now


@dataclass(frozen=True)
class UpdatePostInput:
    # None means "keep the stored value"
    title: str | None = None
    excerpt: str | None = None
    content: str | None = None
    status: PostStatus | None = None
    published_at: str | None = None
