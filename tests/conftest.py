"""Shared test fixtures for the trackarr test suite."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from trackarr.domain.sites import Credential, SiteConfiguration
from trackarr.infrastructure.sites import parse_site_config

REPO_ROOT = Path(__file__).resolve().parent.parent


# ---------------------------------------------------------------------------
# Site documents
# ---------------------------------------------------------------------------

API_SITE_YAML = r"""
id: apisite
name: API Site
domain: https://api.example.test/
allow_auth_type: [api_key]
unlimited_ratio_tokens: ["unlimited"]
api_search:
  path: api/torrent/search
  headers:
    x-api-key: "{api_key}"
  body_template:
    keyword: "{keyword}"
    mode: normal
    pageSize: 100
  data_path: data
  list_path: data
  fields:
    id: id
    title: name
    size: size
    seeders: status.seeders
    leechers: status.leechers
    discount: status.discount
    downloadVolumeFactor:
      path: status.downloadVolumeFactor
      optional: true
    resolution:
      path: standard
      table: resolution
    imdb_rating:
      path: imdbRating
      filters:
        - {name: re_search, args: ['[\d.]+']}
    detail_url:
      text: "detail/{id}"
api_userinfo:
  path: api/member/profile
  headers:
    x-api-key: "{api_key}"
  data_path: data
  fields:
    uid: id
    username: username
    uploaded: memberCount.uploaded
    downloaded: memberCount.downloaded
    ratio: memberCount.shareRate
    bonus: memberCount.bonus
code_tables:
  resolution:
    "1": 1080p
    "6": 4K
"""

HTML_SITE_YAML = r"""
id: htmlsite
name: HTML Site
domain: https://nexus.example.test/
allow_auth_type: cookies
userinfo:
  path: index.php
  item:
    selector: "#info_block"
  fields:
    username:
      selector: "a.user"
    uid:
      selector: "a.user"
      attribute: href
      filters:
        - {name: querystring, args: [id]}
    vip_group:
      case:
        ".vip": VIP
        "*": User
    uploaded:
      selector: "span.up"
      method: next_sibling
    downloaded:
      selector: "span.down"
      method: next_sibling
    seeding:
      selector: "img[alt='seeding']"
      method: next_sibling
    bonus:
      selector: "#bonus"
search:
  paths:
    - path: torrents.php
      categories: [401]
  query:
    search: "{keyword}"
  rows:
    selector: "table.torrents tr.row"
  fields:
    id:
      selector: "a.title"
      attribute: href
      filters:
        - {name: querystring, args: [id]}
    title:
      selector: "a.title"
    size:
      selector: "td.size"
    seeders:
      selector: "td.seeders"
      default_value: 0
    leechers:
      selector: "td.leechers"
      default_value: 0
    discount:
      case:
        "img.free": FREE
        "*": NORMAL
    download_url:
      text: "download.php?id={id}"
category_mappings:
  - {id: 401, cate_level1: Movie, cate_level2: Movies}
"""

USERINFO_HTML = """
<html><body>
<div id="info_block">
  <a class="user" href="userdetails.php?id=42">alice</a>
  <span class="up">Uploaded:</span> 1.50 TB
  <span class="down">Downloaded:</span> 500.00 GB
  <img alt="seeding"> 12
</div>
<span id="bonus">1,234.5</span>
</body></html>
"""

SEARCH_HTML = """
<html><body>
<table class="torrents">
  <tr><td class="colhead">Title</td></tr>
  <tr class="row">
    <td><a class="title" href="details.php?id=101">Dune Part Two 2024 2160p</a>
        <img class="free" src="free.gif"></td>
    <td class="size">58.20 GB</td>
    <td class="seeders">120</td>
    <td class="leechers">4</td>
  </tr>
  <tr class="row">
    <td><a class="title" href="details.php?id=102">Dune 2021 1080p</a></td>
    <td class="size">12.5 GB</td>
    <td class="seeders">--</td>
    <td class="leechers"></td>
  </tr>
</table>
</body></html>
"""


@pytest.fixture()
def api_site() -> SiteConfiguration:
    """JSON API site: search + user info, resolution code table."""
    return parse_site_config(API_SITE_YAML, default_id="apisite")


@pytest.fixture()
def html_site() -> SiteConfiguration:
    """Markup site: search rows + user-info page with a container."""
    return parse_site_config(HTML_SITE_YAML, default_id="htmlsite")


@pytest.fixture()
def userinfo_html() -> str:
    return USERINFO_HTML


@pytest.fixture()
def search_html() -> str:
    return SEARCH_HTML


@pytest.fixture()
def api_credential() -> Credential:
    return Credential(api_key="secret-key")


@pytest.fixture()
def cookie_credential() -> Credential:
    return Credential(cookies="uid=42; pass=abc")


# ---------------------------------------------------------------------------
# Filesystem / HTTP fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sites_dir(tmp_path: Path) -> Path:
    """Directory holding the two test site documents."""
    directory = tmp_path / "sites"
    directory.mkdir()
    (directory / "apisite.yml").write_text(API_SITE_YAML, encoding="utf-8")
    (directory / "htmlsite.yml").write_text(HTML_SITE_YAML, encoding="utf-8")
    return directory


@pytest.fixture()
def repo_sites_dir() -> Path:
    """The example site documents shipped with the repository."""
    return REPO_ROOT / "sites"


@pytest.fixture()
def http_client() -> httpx.AsyncClient:
    """Real httpx.AsyncClient for use with respx mocking."""
    return httpx.AsyncClient()
