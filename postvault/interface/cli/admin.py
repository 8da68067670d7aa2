"""CLI for post administration and store maintenance.

Sub-commands: list, get, create, update, delete, sweep.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from postvault.application.dto.post_dto import CreatePostInput, UpdatePostInput
from postvault.config.compose import build_container, configure_logging
from postvault.domain.models import PostStatus


def _read_content(path: str | None) -> str | None:
    if path is None:
        return None
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _status(value: str | None) -> PostStatus | None:
    return PostStatus(value) if value else None


async def _list(container, args) -> int:
    repo = container.get_post_repository()
    if args.published:
        rows = [s.to_dict() for s in await repo.list_published()]
    else:
        rows = [r.to_dict() for r in await repo.list()]
    print(json.dumps(rows, ensure_ascii=False, indent=2))
    return 0


async def _get(container, args) -> int:
    repo = container.get_post_repository()
    found = await (repo.get_published(args.slug) if args.published else repo.get_any(args.slug))
    if found is None:
        print(f"✗ Post '{args.slug}' not found")
        return 1
    if found.content is None:
        print(f"✗ Post '{args.slug}' has no content")
        return 1
    print(json.dumps({**found.post.to_dict(), "etag": found.etag}, ensure_ascii=False, indent=2))
    print()
    print(found.content)
    return 0


async def _create(container, args) -> int:
    result = await container.get_post_repository().create(
        CreatePostInput(
            slug=args.slug,
            title=args.title,
            excerpt=args.excerpt,
            content=_read_content(args.content_file) or "",
            status=_status(args.status),
            published_at=args.published_at,
        )
    )
    if not result.ok:
        print(f"✗ Failed: {result.reason}")
        return 1
    print(f"✓ Created '{args.slug}' (hash={result.value.content_hash})")
    return 0


async def _update(container, args) -> int:
    result = await container.get_post_repository().update(
        args.slug,
        UpdatePostInput(
            title=args.title,
            excerpt=args.excerpt,
            content=_read_content(args.content_file),
            status=_status(args.status),
            published_at=args.published_at,
        ),
    )
    if not result.ok:
        print(f"✗ Failed: {result.reason}")
        return 1
    print(f"✓ Updated '{args.slug}' (hash={result.value.content_hash})")
    return 0


async def _delete(container, args) -> int:
    result = await container.get_post_repository().delete(args.slug)
    if not result.ok:
        print(f"✗ Failed: {result.reason}")
        return 1
    print(f"✓ Deleted '{args.slug}'")
    return 0


async def _sweep(container, args) -> int:
    grace = container.settings.sweep_grace_seconds if args.grace is None else args.grace
    report = await container.get_sweep_use_case().execute(grace_seconds=grace, dry_run=args.dry_run)
    verb = "would delete" if args.dry_run else "deleted"
    print(f"✓ Scanned {report.scanned} blobs, {len(report.orphaned)} orphaned")
    for key in report.orphaned:
        print(f"  {verb} {key}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="postvault-admin", description="Post store admin CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("list", help="List posts (newest first)")
    p.add_argument("--published", action="store_true", help="Only published summaries")
    p.set_defaults(handler=_list)

    p = sub.add_parser("get", help="Show a post with its content")
    p.add_argument("slug")
    p.add_argument("--published", action="store_true", help="Ignore drafts")
    p.set_defaults(handler=_get)

    p = sub.add_parser("create", help="Create a post")
    p.add_argument("slug")
    p.add_argument("--title", required=True)
    p.add_argument("--excerpt", required=True)
    p.add_argument("--content-file", required=True, help="Markdown file, '-' for stdin")
    p.add_argument("--status", choices=[s.value for s in PostStatus])
    p.add_argument("--published-at")
    p.set_defaults(handler=_create)

    p = sub.add_parser("update", help="Update fields of a post")
    p.add_argument("slug")
    p.add_argument("--title")
    p.add_argument("--excerpt")
    p.add_argument("--content-file", help="Markdown file, '-' for stdin")
    p.add_argument("--status", choices=[s.value for s in PostStatus])
    p.add_argument("--published-at")
    p.set_defaults(handler=_update)

    p = sub.add_parser("delete", help="Delete a post and its content")
    p.add_argument("slug")
    p.set_defaults(handler=_delete)

    p = sub.add_parser("sweep", help="Reclaim blobs no post refers to")
    p.add_argument("--grace", type=int, help="Minimum blob age in seconds")
    p.add_argument("--dry-run", action="store_true")
    p.set_defaults(handler=_sweep)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    container = build_container()
    configure_logging(container.settings)
    try:
        return asyncio.run(args.handler(container, args))
    except Exception as ex:
        print(f"✗ Error: {ex}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
