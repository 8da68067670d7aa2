"""Orphan sweep: only blobs without a row and older than the grace period go."""

import asyncio

from postvault.application.dto.post_dto import CreatePostInput
from postvault.application.use_cases.post_repository import PostRepository
from postvault.application.use_cases.sweep_orphaned_blobs import SweepOrphanedBlobs
from postvault.infrastructure.metadata.in_memory_metadata_store import InMemoryMetadataStore


async def test_sweep_reclaims_old_orphans_only(repo, metadata, blobs, clock):
    await repo.create(CreatePostInput(slug="kept", title="T", excerpt="E", content="C"))
    await blobs.put("posts/orphan.md", "left over", "text/markdown; charset=utf-8")
    await blobs.put("other/unrelated.bin", "x", "application/octet-stream")
    clock.advance(600)
    # Written after the clock moved: could be a create still in flight.
    await blobs.put("posts/in-flight.md", "new", "text/markdown; charset=utf-8")

    report = await SweepOrphanedBlobs(metadata, blobs, clock).execute(grace_seconds=300)

    assert report.scanned == 3
    assert report.orphaned == ["posts/orphan.md"]
    assert report.deleted == ["posts/orphan.md"]
    assert "posts/orphan.md" not in blobs
    assert "posts/kept.md" in blobs
    assert "posts/in-flight.md" in blobs
    assert "other/unrelated.bin" in blobs


async def test_dry_run_reports_without_deleting(metadata, blobs, clock):
    await blobs.put("posts/orphan.md", "left over", "text/markdown; charset=utf-8")

    report = await SweepOrphanedBlobs(metadata, blobs, clock).execute(grace_seconds=0, dry_run=True)

    assert report.orphaned == ["posts/orphan.md"]
    assert report.deleted == []
    assert "posts/orphan.md" in blobs


async def test_sweep_on_clean_store_is_noop(repo, metadata, blobs, clock):
    await repo.create(CreatePostInput(slug="a", title="T", excerpt="E", content="C"))

    report = await SweepOrphanedBlobs(metadata, blobs, clock).execute(grace_seconds=0)

    assert report.scanned == 1
    assert report.orphaned == []


class SlowListingStore(InMemoryMetadataStore):
    """list_posts takes its snapshot, then yields before returning it."""

    async def list_posts(self, published_only=False):  # type: ignore[no-untyped-def]
        records = await super().list_posts(published_only)
        await asyncio.sleep(0)
        return records


async def test_create_during_sweep_keeps_its_blob(blobs, clock, id_factory):
    metadata = SlowListingStore()
    repo = PostRepository(metadata=metadata, blobs=blobs, clock=clock, id_factory=id_factory)
    await blobs.put("posts/x.md", "stale leftover", "text/markdown; charset=utf-8")
    clock.advance(3600)
    sweep = SweepOrphanedBlobs(metadata, blobs, clock)

    report, created = await asyncio.gather(
        sweep.execute(grace_seconds=300),
        repo.create(CreatePostInput(slug="x", title="T", excerpt="E", content="fresh")),
    )

    assert created.ok
    assert report.orphaned == ["posts/x.md"]
    assert report.deleted == []
    found = await repo.get_any("x")
    assert found is not None and found.content == "fresh"


async def test_blob_rewritten_during_sweep_is_kept(blobs, clock):
    class RewritingStore(InMemoryMetadataStore):
        async def list_posts(self, published_only=False):  # type: ignore[no-untyped-def]
            # A create has written its blob but not yet inserted its row.
            await blobs.put("posts/y.md", "in flight", "text/markdown; charset=utf-8")
            return await super().list_posts(published_only)

    await blobs.put("posts/y.md", "stale leftover", "text/markdown; charset=utf-8")
    clock.advance(3600)

    report = await SweepOrphanedBlobs(RewritingStore(), blobs, clock).execute(grace_seconds=300)

    assert report.deleted == []
    assert (await blobs.get("posts/y.md")).content == "in flight"
