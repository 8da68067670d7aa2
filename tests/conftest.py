"""Shared fixtures: fixed clock and in-memory stores (no infrastructure)."""

from datetime import UTC, datetime, timedelta

import pytest

from postvault.application.ports.clock_port import ClockPort
from postvault.application.use_cases.post_repository import PostRepository
from postvault.infrastructure.blobstores.in_memory_blob_store import InMemoryBlobStore
from postvault.infrastructure.metadata.in_memory_metadata_store import InMemoryMetadataStore


class FakeClock(ClockPort):
    """Clock pinned to a fixed instant; advance() moves it forward."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 5, 1, 12, 0, tzinfo=UTC)

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


class RecordingTelemetry:
    """Telemetry double keeping every counter and observation."""

    def __init__(self) -> None:
        self.counters: list[tuple[str, dict]] = []
        self.observed: list[tuple[str, float]] = []

    def incr(self, name, tags=None):  # type: ignore[no-untyped-def]
        self.counters.append((name, dict(tags or {})))

    def observe(self, name, value, tags=None):  # type: ignore[no-untyped-def]
        self.observed.append((name, value))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def metadata() -> InMemoryMetadataStore:
    return InMemoryMetadataStore()


@pytest.fixture
def blobs(clock: FakeClock) -> InMemoryBlobStore:
    return InMemoryBlobStore(clock=clock)


@pytest.fixture
def telemetry() -> RecordingTelemetry:
    return RecordingTelemetry()


@pytest.fixture
def id_factory():
    counter = iter(range(1, 10_000))
    return lambda: f"post-{next(counter)}"


@pytest.fixture
def repo(metadata, blobs, clock, id_factory, telemetry) -> PostRepository:
    return PostRepository(
        metadata=metadata,
        blobs=blobs,
        clock=clock,
        id_factory=id_factory,
        telemetry=telemetry,
    )
