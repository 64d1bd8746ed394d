"""Site adapter: one configuration bound to one credential."""

from __future__ import annotations

from typing import Literal

import httpx

from trackarr.domain.entities import SiteUserInfo, TorrentRecord
from trackarr.domain.sites import Credential, SiteConfiguration

from .api_extractor import ApiExtractor
from .auth import AuthContext
from .constants import DEFAULT_CLIENT_TIMEOUT, DEFAULT_USER_AGENT
from .html_extractor import HtmlExtractor

ExtractionMode = Literal["api", "html"]


class SiteClient:
    """Chooses the extraction strategy for a site and runs it.

    API mode needs an API key and the matching API rule-set; HTML mode
    needs any credential and the HTML rule-set. Without either the site
    has nothing to contribute.
    """

    def __init__(
        self,
        config: SiteConfiguration,
        credential: Credential,
        client: httpx.AsyncClient,
        *,
        timeout: float = DEFAULT_CLIENT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.config = config
        self.credential = credential
        auth = AuthContext(credential)
        self._api = ApiExtractor(
            config, auth, client, timeout=timeout, user_agent=user_agent
        )
        self._html = HtmlExtractor(
            config, auth, client, timeout=timeout, user_agent=user_agent
        )

    def _mode(self, has_api: bool, has_html: bool) -> ExtractionMode | None:
        if self.credential.api_key and has_api:
            return "api"
        if not self.credential.is_empty and has_html:
            return "html"
        return None

    @property
    def search_mode(self) -> ExtractionMode | None:
        return self._mode(
            self.config.api_search is not None, self.config.search is not None
        )

    @property
    def userinfo_mode(self) -> ExtractionMode | None:
        return self._mode(
            self.config.api_userinfo is not None, self.config.userinfo is not None
        )

    @property
    def can_search(self) -> bool:
        return self.search_mode is not None

    async def search(self, keyword: str) -> list[TorrentRecord]:
        mode = self.search_mode
        if mode == "api":
            return await self._api.search(keyword)
        if mode == "html":
            return await self._html.search(keyword)
        return []

    async def get_user_info(self) -> SiteUserInfo | None:
        mode = self.userinfo_mode
        if mode == "api":
            return await self._api.user_info()
        if mode == "html":
            return await self._html.user_info()
        return None


class SiteClientFactory:
    """Builds ``SiteClient`` instances sharing one ``httpx.AsyncClient``."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        timeout: float = DEFAULT_CLIENT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._http_client = http_client
        self._timeout = timeout
        self._user_agent = user_agent

    def __call__(
        self, config: SiteConfiguration, credential: Credential
    ) -> SiteClient:
        return SiteClient(
            config,
            credential,
            self._http_client,
            timeout=self._timeout,
            user_agent=self._user_agent,
        )
