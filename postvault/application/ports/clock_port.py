from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime


class ClockPort(ABC):
    """Source of post timestamps (published_at defaults, updated_at).

    Injected so tests can pin time; SystemClock is the production clock.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Return current UTC datetime."""
        ...

    def iso_now(self) -> str:
        """Current time in the ISO-8601 form stored on PostRecord."""
        return self.now().isoformat()
