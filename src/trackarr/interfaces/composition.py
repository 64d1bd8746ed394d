"""Composition root: builds the use cases from an AppConfig."""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

import httpx
import structlog

from trackarr.application.use_cases import SearchAggregator, SiteUserInfoUseCase
from trackarr.domain.ports import ExtractionObserverPort
from trackarr.infrastructure.config.schema import AppConfig
from trackarr.infrastructure.sites import SiteClientFactory, SiteRegistry

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Services:
    """Wired application services sharing one HTTP client."""

    config: AppConfig
    http_client: httpx.AsyncClient
    registry: SiteRegistry
    search: SearchAggregator
    user_info: SiteUserInfoUseCase


def build_http_client(config: AppConfig) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=config.http_timeout_seconds,
        follow_redirects=config.http_follow_redirects,
        headers={"User-Agent": config.http_user_agent},
    )


@asynccontextmanager
async def services(
    config: AppConfig,
    *,
    http_client: httpx.AsyncClient | None = None,
    observer: ExtractionObserverPort | None = None,
) -> AsyncIterator[Services]:
    """Yield wired services; a client created here is closed on exit."""
    owns_client = http_client is None
    client = http_client or build_http_client(config)

    registry = SiteRegistry(config.sites_dir)
    factory = SiteClientFactory(
        client,
        timeout=config.http_timeout_seconds,
        user_agent=config.http_user_agent,
    )
    try:
        yield Services(
            config=config,
            http_client=client,
            registry=registry,
            search=SearchAggregator(
                registry,
                factory,
                max_concurrent=config.search_max_concurrent_sites,
                site_timeout=config.search_site_timeout_seconds,
                observer=observer,
            ),
            user_info=SiteUserInfoUseCase(
                registry,
                factory,
                max_concurrent=config.search_max_concurrent_sites,
                observer=observer,
            ),
        )
    finally:
        if owns_client:
            await client.aclose()
            log.debug("http_client_closed")
