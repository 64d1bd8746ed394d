"""Aggregated keyword search across tracker sites."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from trackarr.domain.entities import (
    AggregatedSearchResult,
    SiteSearchOutcome,
    TorrentRecord,
)
from trackarr.domain.ports import (
    ExtractionObserverPort,
    ExtractionOutcome,
    SiteClientFactoryPort,
    SiteRegistryPort,
)
from trackarr.domain.sites import (
    ConfigNotFound,
    ConfigParseError,
    Credential,
    ExtractionError,
    SearchBadRequest,
)

from .extraction_report import ExtractionReporter, elapsed_ms

log = structlog.get_logger(__name__)


def _describe(exc: Exception) -> str:
    return f"unexpected error: {type(exc).__name__}: {exc}"


@dataclass(frozen=True)
class SiteAccount:
    """One enabled site and the credential to use for it."""

    site_id: str
    credential: Credential


class SearchAggregator:
    """Fans a keyword out to every enabled site and merges the results.

    Flow:
        1. Validate the call (non-empty keyword)
        2. Run one extraction per site concurrently (bounded by a semaphore,
           optionally capped by a per-site timeout)
        3. Convert every per-site failure into a failed outcome
        4. Merge records in site order; each site keeps its own ordering
    """

    def __init__(
        self,
        registry: SiteRegistryPort,
        client_factory: SiteClientFactoryPort,
        *,
        max_concurrent: int = 10,
        site_timeout: float | None = None,
        observer: ExtractionObserverPort | None = None,
    ) -> None:
        self._registry = registry
        self._client_factory = client_factory
        self._max_concurrent = max_concurrent
        self._site_timeout = site_timeout
        self._reporter = ExtractionReporter(observer)

    async def search(
        self, keyword: str, sites: Sequence[SiteAccount]
    ) -> AggregatedSearchResult:
        """Search ``sites`` for ``keyword``.

        Raises:
            SearchBadRequest: Empty keyword. Site failures never raise.
        """
        keyword = keyword.strip()
        if not keyword:
            raise SearchBadRequest("Missing search keyword")

        accounts: list[SiteAccount] = []
        seen: set[str] = set()
        for account in sites:
            if account.site_id not in seen:
                seen.add(account.site_id)
                accounts.append(account)

        semaphore = asyncio.Semaphore(self._max_concurrent)

        async def _search_one(account: SiteAccount) -> SiteSearchOutcome:
            async with semaphore:
                return await self._search_site(keyword, account)

        t0 = time.perf_counter_ns()
        outcomes = await asyncio.gather(*(_search_one(a) for a in accounts))
        time_taken_ms = elapsed_ms(t0)

        results: list[TorrentRecord] = []
        for outcome in outcomes:
            results.extend(outcome.records)

        log.info(
            "aggregated_search_done",
            keyword=keyword,
            site_count=len(outcomes),
            result_count=len(results),
            failed_sites=sum(1 for o in outcomes if not o.ok),
            time_taken_ms=time_taken_ms,
        )
        return AggregatedSearchResult(
            keyword=keyword,
            results=results,
            outcomes=list(outcomes),
            time_taken_ms=time_taken_ms,
        )

    async def _search_site(
        self, keyword: str, account: SiteAccount
    ) -> SiteSearchOutcome:
        """Search one site; every failure becomes a failed outcome."""
        t0 = time.perf_counter_ns()
        site_id = account.site_id

        try:
            config = self._registry.load(site_id)
        except (ConfigNotFound, ConfigParseError) as e:
            return self._failed(site_id, site_id, t0, str(e))
        except Exception as e:
            log.warning("site_config_unexpected_error", site=site_id, exc_info=True)
            return self._failed(site_id, site_id, t0, _describe(e))

        try:
            client = self._client_factory(config, account.credential)
            if not client.can_search:
                duration_ms = elapsed_ms(t0)
                self._reporter.report(site_id, "search", "skipped", duration_ms)
                return SiteSearchOutcome(
                    site_id=site_id,
                    site_name=config.name,
                    duration_ms=duration_ms,
                    skipped=True,
                )

            if self._site_timeout is not None:
                records = await asyncio.wait_for(
                    client.search(keyword), timeout=self._site_timeout
                )
            else:
                records = await client.search(keyword)
        except TimeoutError:
            return self._failed(
                site_id,
                config.name,
                t0,
                f"timed out after {self._site_timeout}s",
                outcome="timeout",
            )
        except ExtractionError as e:
            return self._failed(site_id, config.name, t0, str(e))
        except Exception as e:
            log.warning("site_search_unexpected_error", site=site_id, exc_info=True)
            return self._failed(site_id, config.name, t0, _describe(e))

        duration_ms = elapsed_ms(t0)
        self._reporter.report(
            site_id, "search", "ok", duration_ms, item_count=len(records)
        )
        return SiteSearchOutcome(
            site_id=site_id,
            site_name=config.name,
            records=list(records),
            duration_ms=duration_ms,
        )

    def _failed(
        self,
        site_id: str,
        site_name: str,
        t0: int,
        error: str,
        outcome: ExtractionOutcome = "failed",
    ) -> SiteSearchOutcome:
        duration_ms = elapsed_ms(t0)
        self._reporter.report(
            site_id,
            "search",
            outcome,
            duration_ms,
            error=error,
        )
        return SiteSearchOutcome(
            site_id=site_id,
            site_name=site_name,
            error=error,
            duration_ms=duration_ms,
        )
