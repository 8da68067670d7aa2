"""SQLite metadata store for post records.

One shared connection, guarded by a lock; each call runs in a worker thread
via asyncio.to_thread. The UNIQUE constraint on slug is the authoritative
uniqueness guard; the repository's pre-check is only a fast path.
"""

from __future__ import annotations

import asyncio
import sqlite3
import threading
from dataclasses import dataclass
from pathlib import Path

from postvault.application.ports import MetadataStorePort
from postvault.domain.errors import MetadataStoreError, PostNotFoundError, SlugConflictError
from postvault.domain.models import PostRecord, PostStatus

_COLUMNS = """
    id, slug, title, excerpt, status, published_at, updated_at,
    content_key, content_type, content_length, content_hash
"""

_SCHEMA = """
CREATE TABLE IF NOT EXISTS posts (
  id TEXT PRIMARY KEY,
  slug TEXT NOT NULL UNIQUE,
  title TEXT NOT NULL,
  excerpt TEXT NOT NULL,
  status TEXT NOT NULL DEFAULT 'published',
  published_at TEXT NOT NULL,
  updated_at TEXT NOT NULL,
  content_key TEXT NOT NULL,
  content_type TEXT NOT NULL,
  content_length INTEGER,
  content_hash TEXT
);

CREATE INDEX IF NOT EXISTS idx_posts_status_published_at
  ON posts (status, published_at DESC);
"""


@dataclass(frozen=True)
class SqliteConfig:
    path: Path


def connect(cfg: SqliteConfig) -> sqlite3.Connection:
    if str(cfg.path) != ":memory:":
        cfg.path.parent.mkdir(parents=True, exist_ok=True)
    # Shared across worker threads; access is serialised by the store's lock.
    conn = sqlite3.connect(cfg.path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


def migrate(conn: sqlite3.Connection) -> None:
    conn.executescript(_SCHEMA)
    conn.commit()


def _row_to_record(row: sqlite3.Row) -> PostRecord:
    return PostRecord(
        id=str(row["id"]),
        slug=str(row["slug"]),
        title=str(row["title"]),
        excerpt=str(row["excerpt"]),
        status=PostStatus(str(row["status"])),
        published_at=str(row["published_at"]),
        updated_at=str(row["updated_at"]),
        content_key=str(row["content_key"]),
        content_type=str(row["content_type"]),
        content_length=None if row["content_length"] is None else int(row["content_length"]),
        content_hash=row["content_hash"],
    )


class SqliteMetadataStore(MetadataStorePort):
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._lock = threading.Lock()

    @classmethod
    def open(cls, cfg: SqliteConfig) -> "SqliteMetadataStore":
        """Connect and create the schema if needed.

        Raises:
            MetadataStoreError: If the database cannot be opened or migrated
        """
        try:
            conn = connect(cfg)
            migrate(conn)
        except sqlite3.Error as ex:
            raise MetadataStoreError(f"SQLite init failed: {ex}") from ex
        return cls(conn)

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    async def find_by_slug(self, slug: str, published_only: bool = False) -> PostRecord | None:
        sql = f"SELECT {_COLUMNS} FROM posts WHERE slug = ?"
        if published_only:
            sql += " AND status = 'published'"
        rows = await self._run(self._fetch, sql + " LIMIT 1", (slug,))
        return _row_to_record(rows[0]) if rows else None

    async def list_posts(self, published_only: bool = False) -> list[PostRecord]:
        where = "WHERE status = 'published'" if published_only else ""
        rows = await self._run(
            self._fetch,
            f"SELECT {_COLUMNS} FROM posts {where} ORDER BY published_at DESC",
            (),
        )
        return [_row_to_record(r) for r in rows]

    async def insert(self, record: PostRecord) -> None:
        await self._run(self._insert, record)

    async def update(self, slug: str, record: PostRecord) -> None:
        changed = await self._run(
            self._write,
            """
            UPDATE posts
            SET title = ?, excerpt = ?, status = ?, published_at = ?, updated_at = ?,
                content_key = ?, content_type = ?, content_length = ?, content_hash = ?
            WHERE slug = ?
            """,
            (
                record.title,
                record.excerpt,
                record.status.value,
                record.published_at,
                record.updated_at,
                record.content_key,
                record.content_type,
                record.content_length,
                record.content_hash,
                slug,
            ),
        )
        if changed == 0:
            raise PostNotFoundError(slug)

    async def delete(self, slug: str) -> None:
        changed = await self._run(self._write, "DELETE FROM posts WHERE slug = ?", (slug,))
        if changed == 0:
            raise PostNotFoundError(slug)

    # ===== Blocking helpers (run in a worker thread) =====

    async def _run(self, fn, *args):
        try:
            return await asyncio.to_thread(fn, *args)
        except sqlite3.Error as ex:
            raise MetadataStoreError(f"SQLite {fn.__name__.lstrip('_')} failed: {ex}") from ex

    def _fetch(self, sql: str, params: tuple) -> list[sqlite3.Row]:
        with self._lock:
            return self._conn.execute(sql, params).fetchall()

    def _write(self, sql: str, params: tuple) -> int:
        with self._lock:
            cur = self._conn.execute(sql, params)
            self._conn.commit()
            return cur.rowcount

    def _insert(self, record: PostRecord) -> None:
        with self._lock:
            try:
                self._conn.execute(
                    f"INSERT INTO posts ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        record.id,
                        record.slug,
                        record.title,
                        record.excerpt,
                        record.status.value,
                        record.published_at,
                        record.updated_at,
                        record.content_key,
                        record.content_type,
                        record.content_length,
                        record.content_hash,
                    ),
                )
                self._conn.commit()
            except sqlite3.IntegrityError as ex:
                self._conn.rollback()
                if "posts.slug" in str(ex):
                    raise SlugConflictError(record.slug) from ex
                raise
