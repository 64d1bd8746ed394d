"""Port for a configured site adapter bound to one credential."""

from __future__ import annotations

from typing import Protocol

from trackarr.domain.entities import SiteUserInfo, TorrentRecord
from trackarr.domain.sites.site_schema import Credential, SiteConfiguration


class SiteClientPort(Protocol):
    """Async interface for one site adapter.

    Both operations raise ``ExtractionError`` subclasses on site failure.
    ``get_user_info`` returns ``None`` when no rule-set applies to the
    bound credential; ``search`` then returns an empty list.
    """

    config: SiteConfiguration

    @property
    def can_search(self) -> bool: ...

    async def search(self, keyword: str) -> list[TorrentRecord]: ...

    async def get_user_info(self) -> SiteUserInfo | None: ...


class SiteClientFactoryPort(Protocol):
    def __call__(
        self, config: SiteConfiguration, credential: Credential
    ) -> SiteClientPort: ...
