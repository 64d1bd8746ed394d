"""Port for consumers of per-site extraction events."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol

ExtractionOutcome = Literal["ok", "failed", "timeout", "skipped"]
ExtractionOperation = Literal["search", "userinfo"]


@dataclass(frozen=True)
class SiteExtractionEvent:
    """Emitted once per site extraction attempt."""

    site: str
    operation: ExtractionOperation
    outcome: ExtractionOutcome
    duration_ms: int
    item_count: int = 0
    error: str | None = None


class ExtractionObserverPort(Protocol):
    def record(self, event: SiteExtractionEvent) -> None: ...
