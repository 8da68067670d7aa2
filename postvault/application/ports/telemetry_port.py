"""Telemetry port for repository counters and timings."""

from typing import Any, Protocol


class TelemetryPort(Protocol):
    def incr(self, name: str, tags: dict[str, Any] | None = None) -> None:
        """Increment a counter metric (e.g. posts.create, outcome=ok)."""
        ...

    def observe(self, name: str, value: float, tags: dict[str, Any] | None = None) -> None:
        """Record a histogram value (e.g. posts.content_bytes)."""
        ...
