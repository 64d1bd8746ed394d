"""One structured event per site extraction attempt."""

from __future__ import annotations

import time

import structlog

from trackarr.domain.ports import (
    ExtractionObserverPort,
    ExtractionOperation,
    ExtractionOutcome,
    SiteExtractionEvent,
)

log = structlog.get_logger(__name__)


def elapsed_ms(t0_ns: int) -> int:
    return (time.perf_counter_ns() - t0_ns) // 1_000_000


class ExtractionReporter:
    """Logs ``site_extraction_finished`` and forwards it to an observer."""

    def __init__(self, observer: ExtractionObserverPort | None = None) -> None:
        self._observer = observer

    def report(
        self,
        site: str,
        operation: ExtractionOperation,
        outcome: ExtractionOutcome,
        duration_ms: int,
        item_count: int = 0,
        error: str | None = None,
    ) -> SiteExtractionEvent:
        event = SiteExtractionEvent(
            site=site,
            operation=operation,
            outcome=outcome,
            duration_ms=duration_ms,
            item_count=item_count,
            error=error,
        )
        log_method = log.info if outcome in ("ok", "skipped") else log.warning
        log_method(
            "site_extraction_finished",
            site=site,
            operation=operation,
            outcome=outcome,
            duration_ms=duration_ms,
            item_count=item_count,
            error=error,
        )
        if self._observer is not None:
            try:
                self._observer.record(event)
            except Exception:
                log.warning("extraction_observer_failed", site=site, exc_info=True)
        return event
