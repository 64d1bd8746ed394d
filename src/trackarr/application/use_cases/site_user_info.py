"""Per-site account snapshots and connection checks."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence

import structlog

from trackarr.domain.entities import ConnectionCheck, SiteUserInfo
from trackarr.domain.ports import (
    ExtractionObserverPort,
    SiteClientFactoryPort,
    SiteRegistryPort,
)
from trackarr.domain.sites import (
    Credential,
    ExtractionError,
    SiteConfiguration,
    SiteError,
)

from .extraction_report import ExtractionReporter, elapsed_ms
from .site_search import SiteAccount, _describe

log = structlog.get_logger(__name__)


class SiteUserInfoUseCase:
    """Fetches account information for configured sites.

    Extraction failures and unexpected client errors are recovered as
    ``None``; an unknown or broken site document is reported to the caller.
    """

    def __init__(
        self,
        registry: SiteRegistryPort,
        client_factory: SiteClientFactoryPort,
        *,
        max_concurrent: int = 10,
        observer: ExtractionObserverPort | None = None,
    ) -> None:
        self._registry = registry
        self._client_factory = client_factory
        self._max_concurrent = max_concurrent
        self._reporter = ExtractionReporter(observer)

    def _failed(
        self, site_id: str, t0: int, error: str
    ) -> tuple[SiteUserInfo | None, str | None]:
        self._reporter.report(
            site_id, "userinfo", "failed", elapsed_ms(t0), error=error
        )
        return None, error

    async def _fetch(
        self, config: SiteConfiguration, credential: Credential
    ) -> tuple[SiteUserInfo | None, str | None]:
        """Return (info, error); info is None when skipped or failed."""
        t0 = time.perf_counter_ns()
        try:
            client = self._client_factory(config, credential)
            info = await client.get_user_info()
        except ExtractionError as e:
            return self._failed(config.id, t0, str(e))
        except Exception as e:
            log.warning(
                "site_userinfo_unexpected_error", site=config.id, exc_info=True
            )
            return self._failed(config.id, t0, _describe(e))

        if info is None:
            self._reporter.report(config.id, "userinfo", "skipped", elapsed_ms(t0))
            return None, "no user-info rule-set matches the supplied credential"

        self._reporter.report(
            config.id, "userinfo", "ok", elapsed_ms(t0), item_count=1
        )
        return info, None

    async def get_user_info(
        self, site_id: str, credential: Credential
    ) -> SiteUserInfo | None:
        """Account snapshot for one site, or None when it cannot be fetched.

        Raises:
            ConfigNotFound: No document for ``site_id``.
            ConfigParseError: The document is malformed.
        """
        config = self._registry.load(site_id)
        info, _ = await self._fetch(config, credential)
        return info

    async def test_connection(
        self, site_id: str, credential: Credential
    ) -> ConnectionCheck:
        """Succeeds when user info can be resolved with ``credential``."""
        try:
            config = self._registry.load(site_id)
        except SiteError as e:
            return ConnectionCheck(success=False, message=str(e))

        info, error = await self._fetch(config, credential)
        if info is None:
            log.info("site_connection_failed", site=site_id, error=error)
            return ConnectionCheck(
                success=False, message=f"Connection to {config.name} failed: {error}"
            )
        return ConnectionCheck(
            success=True,
            message=f"Connected to {config.name} as {info.username}",
            user_info=info,
        )

    async def get_all_user_info(
        self, accounts: Sequence[SiteAccount]
    ) -> dict[str, SiteUserInfo | None]:
        """User info for several sites concurrently; failures map to None."""
        semaphore = asyncio.Semaphore(self._max_concurrent)

        async def _one(account: SiteAccount) -> SiteUserInfo | None:
            async with semaphore:
                try:
                    return await self.get_user_info(
                        account.site_id, account.credential
                    )
                except SiteError as e:
                    log.warning(
                        "site_userinfo_unavailable",
                        site=account.site_id,
                        error=str(e),
                    )
                    return None
                except Exception:
                    log.warning(
                        "site_userinfo_unexpected_error",
                        site=account.site_id,
                        exc_info=True,
                    )
                    return None

        infos = await asyncio.gather(*(_one(a) for a in accounts))
        return {a.site_id: info for a, info in zip(accounts, infos)}
