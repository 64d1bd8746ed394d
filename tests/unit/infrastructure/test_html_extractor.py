"""Tests for the HTML markup extraction strategy."""

from __future__ import annotations

import dataclasses

import httpx
import pytest
import respx

from trackarr.domain.sites import (
    Credential,
    ShapeError,
    SiteConfiguration,
    TransportError,
)
from trackarr.infrastructure.sites.auth import AuthContext
from trackarr.infrastructure.sites.html_extractor import HtmlExtractor

INDEX_URL = "https://nexus.example.test/index.php"


def _extractor(
    config: SiteConfiguration,
    client: httpx.AsyncClient,
    credential: Credential | None = None,
) -> HtmlExtractor:
    auth = AuthContext(credential or Credential(cookies="uid=42; pass=abc"))
    return HtmlExtractor(config, auth, client, timeout=5.0, user_agent="TestAgent/1.0")


def _torrents_route() -> respx.Route:
    return respx.get(host="nexus.example.test", path="/torrents.php")


class TestUserInfo:
    @respx.mock
    async def test_maps_page(
        self,
        html_site: SiteConfiguration,
        http_client: httpx.AsyncClient,
        userinfo_html: str,
    ) -> None:
        respx.get(INDEX_URL).respond(200, text=userinfo_html)

        info = await _extractor(html_site, http_client).user_info()

        assert info.username == "alice"
        assert info.uid == "42"
        assert info.uploaded == "1.50 TB"
        assert info.downloaded == "500.00 GB"
        assert info.share_ratio == "3.072"
        assert info.seeding == 12
        assert info.vip_group == "User"

    @respx.mock
    async def test_falls_back_to_whole_document(
        self,
        html_site: SiteConfiguration,
        http_client: httpx.AsyncClient,
        userinfo_html: str,
    ) -> None:
        respx.get(INDEX_URL).respond(200, text=userinfo_html)

        info = await _extractor(html_site, http_client).user_info()

        # #bonus sits outside the #info_block container
        assert info.bonus == "1,234.5"

    @respx.mock
    async def test_case_branch_matches(
        self,
        html_site: SiteConfiguration,
        http_client: httpx.AsyncClient,
        userinfo_html: str,
    ) -> None:
        page = userinfo_html.replace(
            '<div id="info_block">', '<div id="info_block"><b class="vip">*</b>'
        )
        respx.get(INDEX_URL).respond(200, text=page)

        info = await _extractor(html_site, http_client).user_info()

        assert info.vip_group == "VIP"

    @respx.mock
    async def test_sends_credential_headers(
        self,
        html_site: SiteConfiguration,
        http_client: httpx.AsyncClient,
        userinfo_html: str,
    ) -> None:
        route = respx.get(INDEX_URL).respond(200, text=userinfo_html)
        credential = Credential(cookies="uid=42; pass=abc", api_key="k")

        await _extractor(html_site, http_client, credential).user_info()

        headers = route.calls.last.request.headers
        assert headers["cookie"] == "uid=42; pass=abc"
        assert headers["x-api-key"] == "k"
        assert headers["user-agent"] == "TestAgent/1.0"

    @respx.mock
    async def test_missing_elements_use_fallbacks(
        self, html_site: SiteConfiguration, http_client: httpx.AsyncClient
    ) -> None:
        respx.get(INDEX_URL).respond(200, text="<html><body><p>login</p></body></html>")

        info = await _extractor(html_site, http_client).user_info()

        assert info.uid == "0"
        assert info.username == "unknown"
        assert info.bonus == "0"
        assert info.uploaded == "0 B"

    @respx.mock
    async def test_empty_document(
        self, html_site: SiteConfiguration, http_client: httpx.AsyncClient
    ) -> None:
        respx.get(INDEX_URL).respond(200, text="   ")
        with pytest.raises(ShapeError):
            await _extractor(html_site, http_client).user_info()

    @respx.mock
    async def test_http_error(
        self, html_site: SiteConfiguration, http_client: httpx.AsyncClient
    ) -> None:
        respx.get(INDEX_URL).respond(403)
        with pytest.raises(TransportError):
            await _extractor(html_site, http_client).user_info()

    @respx.mock
    async def test_configured_encoding(
        self, html_site: SiteConfiguration, http_client: httpx.AsyncClient
    ) -> None:
        config = dataclasses.replace(html_site, encoding="gbk")
        page = '<div id="info_block"><a class="user" href="u?id=1">用户</a></div>'
        respx.get(INDEX_URL).respond(
            200,
            content=page.encode("gbk"),
            headers={"content-type": "text/html"},
        )

        info = await _extractor(config, http_client).user_info()

        assert info.username == "用户"


class TestSearch:
    @respx.mock
    async def test_maps_rows(
        self,
        html_site: SiteConfiguration,
        http_client: httpx.AsyncClient,
        search_html: str,
    ) -> None:
        _torrents_route().respond(200, text=search_html)

        records = await _extractor(html_site, http_client).search("dune")

        assert [r.id for r in records] == ["101", "102"]
        first, second = records
        assert first.title == "Dune Part Two 2024 2160p"
        assert first.size == "58.20 GB"
        assert first.seeders == 120
        assert first.leechers == 4
        assert first.discount == "FREE"
        assert first.download_volume_factor == 0.0
        assert first.download_url == "https://nexus.example.test/download.php?id=101"
        assert first.category == "Movies"
        assert second.discount == "NORMAL"
        assert second.download_volume_factor == 1.0

    @respx.mock
    async def test_unparseable_counts_default_to_zero(
        self,
        html_site: SiteConfiguration,
        http_client: httpx.AsyncClient,
        search_html: str,
    ) -> None:
        _torrents_route().respond(200, text=search_html)

        records = await _extractor(html_site, http_client).search("dune")

        assert records[1].seeders == 0
        assert records[1].leechers == 0

    @respx.mock
    async def test_query_params(
        self,
        html_site: SiteConfiguration,
        http_client: httpx.AsyncClient,
        search_html: str,
    ) -> None:
        route = _torrents_route().respond(200, text=search_html)

        await _extractor(html_site, http_client).search("dune part two")

        request = route.calls.last.request
        assert request.url.params["search"] == "dune part two"
        assert request.headers["cookie"] == "uid=42; pass=abc"

    @respx.mock
    async def test_no_rows(
        self, html_site: SiteConfiguration, http_client: httpx.AsyncClient
    ) -> None:
        _torrents_route().respond(200, text="<table class='torrents'></table>")
        assert await _extractor(html_site, http_client).search("dune") == []

    @respx.mock
    async def test_rows_do_not_read_outside_their_scope(
        self, html_site: SiteConfiguration, http_client: httpx.AsyncClient
    ) -> None:
        page = """
        <table class="summary"><tr><td class="size">999 GB</td></tr></table>
        <table class="torrents">
          <tr class="row"><td><a class="title" href="details.php?id=5">X</a></td></tr>
        </table>
        """
        _torrents_route().respond(200, text=page)

        (record,) = await _extractor(html_site, http_client).search("x")

        assert record.size == "0 B"

    async def test_without_rule_set(self, http_client: httpx.AsyncClient) -> None:
        config = SiteConfiguration(id="x", name="X", domain="https://x.test/")
        assert await _extractor(config, http_client).search("dune") == []
