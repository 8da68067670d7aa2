"""Out-of-band reclamation of blobs no metadata row points to.

Orphans come from a delete whose blob step failed after the row was gone.
A create writes its blob before its row, so a young blob without a row may
be an insert still in flight; only blobs older than the grace period count.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from postvault.application.ports import BlobStorePort, ClockPort, MetadataStorePort
from postvault.domain.models import CONTENT_KEY_PREFIX, slug_for_content_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepReport:
    scanned: int
    orphaned: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)


class SweepOrphanedBlobs:
    def __init__(self, metadata: MetadataStorePort, blobs: BlobStorePort, clock: ClockPort) -> None:
        self.metadata = metadata
        self.blobs = blobs
        self.clock = clock

    async def execute(self, grace_seconds: int = 300, dry_run: bool = False) -> SweepReport:
        """Delete post blobs without a metadata row.

        Args:
            grace_seconds: Minimum age of a blob before it may be reclaimed;
                blobs with unknown age are never reclaimed
            dry_run: Report orphans without deleting them

        Returns:
            SweepReport with scanned count, orphaned and deleted keys
        """
        objects = await self.blobs.list_objects(prefix=CONTENT_KEY_PREFIX)
        referenced = {p.content_key for p in await self.metadata.list_posts()}
        cutoff = self.clock.now() - timedelta(seconds=grace_seconds)

        orphaned = [
            o.key
            for o in objects
            if o.key not in referenced and o.last_modified is not None and o.last_modified <= cutoff
        ]

        deleted: list[str] = []
        if not dry_run:
            for key in orphaned:
                # Snapshot may be stale by now.
                if not await self._still_orphaned(key, cutoff):
                    logger.info("skipped %s: rewritten or claimed since the scan", key)
                    continue
                await self.blobs.delete(key)
                deleted.append(key)
                logger.info("reclaimed orphaned blob %s", key)

        return SweepReport(scanned=len(objects), orphaned=orphaned, deleted=deleted)

    async def _still_orphaned(self, key: str, cutoff: datetime) -> bool:
        if await self.metadata.find_by_slug(slug_for_content_key(key)) is not None:
            return False
        current = [o for o in await self.blobs.list_objects(prefix=key) if o.key == key]
        if not current:
            return False
        last_modified = current[0].last_modified
        return last_modified is not None and last_modified <= cutoff
