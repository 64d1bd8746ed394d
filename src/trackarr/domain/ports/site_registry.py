"""Port for site configuration lookup."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from trackarr.domain.sites.site_schema import SiteConfiguration


@runtime_checkable
class SiteRegistryPort(Protocol):
    """Synchronous interface for loading site configuration documents."""

    def load(self, site_id: str) -> SiteConfiguration: ...
    def list(self) -> list[SiteConfiguration]: ...
