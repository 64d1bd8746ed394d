"""End-to-end search and user info against the shipped site documents."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest
import respx

from trackarr.application.use_cases import SiteAccount
from trackarr.domain.sites import Credential
from trackarr.infrastructure.config import AppConfig
from trackarr.interfaces.composition import services

pytestmark = pytest.mark.integration

MTEAM_SEARCH = "https://api.m-team.cc/api/torrent/search"
MTEAM_PROFILE = "https://api.m-team.cc/api/member/profile"

MTEAM_PAYLOAD = {
    "code": "0",
    "message": "SUCCESS",
    "data": {
        "pageNumber": "1",
        "total": "1",
        "data": [
            {
                "id": "700001",
                "name": "Dune.Part.Two.2024.2160p.UHD.BluRay",
                "smallDescr": "Dune: Part Two",
                "category": "419",
                "size": "62277025792",
                "standard": "6",
                "videoCodec": "16",
                "audioCodec": "9",
                "source": "2",
                "imageList": [],
                "status": {
                    "seeders": "88",
                    "leechers": "3",
                    "timesCompleted": "512",
                    "discount": "FREE",
                },
            }
        ],
    },
}

NEXUS_SEARCH_PAGE = """
<html><body>
<table class="torrents">
  <tr><td class="colhead">Type</td><td class="colhead">Name</td></tr>
  <tr>
    <td class="rowfollow"><img alt="Movies"></td>
    <td class="rowfollow">
      <table class="torrentname"><tr><td class="embedded">
        <a title="Dune 2021 1080p BluRay" href="details.php?id=3301">Dune 2021</a>
        <img class="pro_free" src="pic/trans.gif"><br>
        <span>Dune (2021)</span>
      </td></tr></table>
    </td>
    <td class="rowfollow">0</td>
    <td class="rowfollow"><span title="2024-03-01 12:00:00">7mo</span></td>
    <td class="rowfollow">12.5 GB</td>
    <td class="rowfollow">41</td>
    <td class="rowfollow">2</td>
    <td class="rowfollow">300</td>
  </tr>
</table>
</body></html>
"""

NEXUS_INDEX_PAGE = """
<html><body>
<table id="info_block"><tr><td>
  <a href="userdetails.php?id=7" class="User_Name">bob</a>
  <font class="color_ratio">Ratio:</font> 2.000
  <font class="color_uploaded">Uploaded:</font> 1.00 TB
  <font class="color_downloaded">Downloaded:</font> 512.00 GB
  <img alt="Torrents seeding"> 25
  <img alt="Torrents leeching"> 1
  <a href="mybonus.php">Bonus: 9,876.0</a>
</td></tr></table>
</body></html>
"""


@pytest.fixture()
def config(repo_sites_dir: Path) -> AppConfig:
    return AppConfig(sites_dir=repo_sites_dir, log_level="WARNING")


def _accounts() -> list[SiteAccount]:
    return [
        SiteAccount(site_id="mteam", credential=Credential(api_key="mt-key")),
        SiteAccount(
            site_id="nexus-demo", credential=Credential(cookies="uid=7; pass=x")
        ),
    ]


class TestAggregatedSearch:
    @respx.mock
    async def test_both_sites(
        self, config: AppConfig, http_client: httpx.AsyncClient
    ) -> None:
        api_route = respx.post(MTEAM_SEARCH).respond(200, json=MTEAM_PAYLOAD)
        respx.get(host="nexus.example.org", path="/torrents.php").respond(
            200, text=NEXUS_SEARCH_PAGE
        )

        async with services(config, http_client=http_client) as svc:
            result = await svc.search.search("dune", _accounts())

        assert result.failure_count == 0
        assert [r.site_id for r in result.results] == ["mteam", "nexus-demo"]
        mteam, nexus = result.results

        assert mteam.id == "700001"
        assert mteam.subtitle == "Dune: Part Two"
        assert mteam.resolution == "4K"
        assert mteam.video_codec == "H.265"
        assert mteam.source == "Blu-ray"
        assert mteam.seeders == 88
        assert mteam.grabs == 512
        assert mteam.download_volume_factor == 0.0
        assert mteam.detail_url == "https://api.m-team.cc/detail/700001"
        assert mteam.poster_url is None
        assert api_route.calls.last.request.headers["x-api-key"] == "mt-key"

        assert nexus.id == "3301"
        assert nexus.title == "Dune 2021 1080p BluRay"
        assert nexus.size == "12.5 GB"
        assert nexus.seeders == 41
        assert nexus.leechers == 2
        assert nexus.discount == "FREE"
        assert nexus.category == "Movies"
        assert nexus.download_url == "https://nexus.example.org/download.php?id=3301"

    @respx.mock
    async def test_failing_site_is_isolated(
        self, config: AppConfig, http_client: httpx.AsyncClient
    ) -> None:
        respx.post(MTEAM_SEARCH).respond(503)
        respx.get(host="nexus.example.org", path="/torrents.php").respond(
            200, text=NEXUS_SEARCH_PAGE
        )

        async with services(config, http_client=http_client) as svc:
            result = await svc.search.search("dune", _accounts())

        assert result.failed_sites == ["mteam"]
        assert [r.id for r in result.results] == ["3301"]

    @respx.mock
    async def test_api_error_code(
        self, config: AppConfig, http_client: httpx.AsyncClient
    ) -> None:
        respx.post(MTEAM_SEARCH).respond(
            200, json={"code": "1", "message": "key invalid", "data": None}
        )

        async with services(config, http_client=http_client) as svc:
            result = await svc.search.search("dune", _accounts()[:1])

        assert result.results == []
        assert result.outcomes[0].error == "key invalid"


class TestUserInfo:
    @respx.mock
    async def test_markup_site(
        self, config: AppConfig, http_client: httpx.AsyncClient
    ) -> None:
        respx.get("https://nexus.example.org/index.php").respond(
            200, text=NEXUS_INDEX_PAGE
        )

        async with services(config, http_client=http_client) as svc:
            info = await svc.user_info.get_user_info(
                "nexus-demo", Credential(cookies="uid=7; pass=x")
            )

        assert info is not None
        assert info.username == "bob"
        assert info.uid == "7"
        assert info.share_ratio == "2.000"
        assert info.uploaded == "1.00 TB"
        assert info.seeding == 25
        assert info.leeching == 1
        assert info.bonus == "9,876.0"
        assert info.vip_group == "User"

    @respx.mock
    async def test_api_site_connection(
        self, config: AppConfig, http_client: httpx.AsyncClient
    ) -> None:
        respx.post(MTEAM_PROFILE).respond(
            200,
            json={
                "code": "0",
                "data": {
                    "id": "1",
                    "username": "carol",
                    "role": "9",
                    "memberCount": {
                        "uploaded": "2199023255552",
                        "downloaded": "0",
                        "shareRate": "無限",
                        "bonus": "100",
                    },
                },
            },
        )

        async with services(config, http_client=http_client) as svc:
            check = await svc.user_info.test_connection(
                "mteam", Credential(api_key="mt-key")
            )

        assert check.success
        assert check.message == "Connected to M-Team as carol"
        assert check.user_info.share_ratio == "∞"
        assert check.user_info.vip_group == "VIP"
