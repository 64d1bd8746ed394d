"""Shared base class for httpx-based site extractors.

Holds what both extraction strategies need: the site configuration, the
bound credential, the shared ``httpx.AsyncClient`` and one request helper
that turns every transport problem into ``TransportError``.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx
import structlog

from trackarr.domain.sites import SiteConfiguration, TransportError

from .auth import AuthContext, substitute
from .constants import DEFAULT_CLIENT_TIMEOUT, DEFAULT_USER_AGENT
from .record_builder import build_url


class HttpxExtractorBase:
    """Shared base for the API and HTML extractors.

    The client is owned by the caller; extractors never close it.
    """

    def __init__(
        self,
        config: SiteConfiguration,
        auth: AuthContext,
        client: httpx.AsyncClient,
        *,
        timeout: float = DEFAULT_CLIENT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.config = config
        self.auth = auth
        self._client = client
        overrides = config.http
        self._timeout = (
            overrides.timeout_seconds
            if overrides and overrides.timeout_seconds
            else timeout
        )
        self._user_agent = (
            overrides.user_agent if overrides and overrides.user_agent else user_agent
        )
        self._log = structlog.get_logger(__name__).bind(site=config.id)

    def _url(self, path: str, keyword: str | None = None) -> str:
        """Absolute URL for ``path``; the keyword placeholder is URL-quoted."""
        variables = self.auth.variables
        if keyword is not None:
            variables["keyword"] = quote(keyword, safe="")
        return build_url(self.config.domain, substitute(path, variables))

    def _base_headers(self) -> dict[str, str]:
        return {"User-Agent": self._user_agent}

    async def _request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        params: dict[str, Any] | None = None,
        json_body: Any = None,
    ) -> httpx.Response:
        """Issue one request; non-2xx and network errors raise TransportError."""
        self._log.debug("site_request", method=method, url=url)
        try:
            resp = await self._client.request(
                method,
                url,
                headers=headers,
                params=params,
                json=json_body,
                timeout=self._timeout,
            )
        except httpx.TimeoutException as exc:
            self._log.warning("site_timeout", url=url)
            raise TransportError(f"timeout requesting {url}") from exc
        except httpx.HTTPError as exc:
            self._log.warning("site_fetch_error", url=url, error=str(exc))
            raise TransportError(f"request to {url} failed: {exc}") from exc

        if not resp.is_success:
            self._log.warning("site_http_error", url=url, status=resp.status_code)
            raise TransportError(
                f"{method} {url} returned HTTP {resp.status_code}",
                status=resp.status_code,
            )
        return resp
