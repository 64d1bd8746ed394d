"""HTML markup extraction strategy."""

from __future__ import annotations

from collections.abc import Sequence

import httpx
from bs4 import BeautifulSoup, Tag

from trackarr.domain.entities import SiteUserInfo, TorrentRecord
from trackarr.domain.sites import ShapeError
from trackarr.domain.sites.site_schema import HtmlSearch, SearchPath, SelectorRule
from trackarr.infrastructure.common.html_selectors import (
    element_attr,
    element_text,
    find_first,
    next_text_sibling,
    parse_html,
    select_scope,
)
from trackarr.infrastructure.common.normalizer import map_code

from .adapters import CATEGORY_TABLE
from .auth import substitute
from .field_resolver import resolve_fields
from .httpx_base import HttpxExtractorBase
from .record_builder import build_torrent_record, build_user_info


class HtmlScopeSource:
    """Field source over a lookup scope of a parsed document.

    With ``document`` set, selectors not found inside the scope are retried
    against the whole document.
    """

    def __init__(
        self, scope: Sequence[Tag], document: BeautifulSoup | None = None
    ) -> None:
        self._scope = scope
        self._document = document

    def _find(self, selector: str) -> Tag | None:
        element = find_first(self._scope, selector)
        if element is None and self._document is not None:
            element = self._document.select_one(selector)
        return element

    def lookup_path(self, path: str) -> None:
        return None

    def matches(self, selector: str) -> bool:
        return self._find(selector) is not None

    def lookup_selector(self, rule: SelectorRule) -> str | None:
        element = self._find(rule.selector or "")
        if element is None:
            return None
        if rule.method == "next_sibling":
            return next_text_sibling(element)
        if rule.attribute:
            return element_attr(element, rule.attribute)
        return element_text(element)


class HtmlExtractor(HttpxExtractorBase):
    """Fetches configured pages and maps their markup."""

    def _decode(self, resp: httpx.Response) -> str:
        if self.config.encoding:
            resp.encoding = self.config.encoding
        return resp.text

    async def _fetch_document(
        self,
        path: str,
        params: dict[str, str] | None = None,
        keyword: str | None = None,
    ) -> BeautifulSoup:
        url = self._url(path, keyword)
        headers = self._base_headers()
        headers.update(self.auth.credential_headers())
        resp = await self._request("GET", url, headers=headers, params=params)
        html = self._decode(resp)
        if not html.strip():
            raise ShapeError(f"{url} returned an empty document")
        return parse_html(html)

    async def user_info(self) -> SiteUserInfo:
        page = self.config.userinfo
        if page is None:
            raise ShapeError("site has no userinfo rule-set")

        document = await self._fetch_document(page.path)
        scope = select_scope(document, page.container)
        if not scope:
            self._log.debug("site_container_missing", selector=page.container)

        values = resolve_fields(
            page.fields,
            HtmlScopeSource(scope, document=document),
            site=self.config.id,
            base_variables={"domain": self.config.domain},
            code_tables=self.config.code_tables,
        )
        return build_user_info(self.config, values)

    def _path_category(self, search_path: SearchPath) -> str | None:
        if not search_path.categories:
            return None
        table = self.config.code_tables.get(CATEGORY_TABLE)
        return map_code(search_path.categories[0], table)

    def _rows_to_records(
        self, rule_set: HtmlSearch, rows: Sequence[Tag], search_path: SearchPath
    ) -> list[TorrentRecord]:
        fallback_category = self._path_category(search_path)
        records: list[TorrentRecord] = []
        for row in rows:
            values = resolve_fields(
                rule_set.fields,
                HtmlScopeSource([row]),
                site=self.config.id,
                base_variables={"domain": self.config.domain},
                code_tables=self.config.code_tables,
            )
            if values.get("category") is None and fallback_category:
                values["category"] = fallback_category
            records.append(build_torrent_record(self.config, values))
        return records

    async def search(self, keyword: str) -> list[TorrentRecord]:
        rule_set = self.config.search
        if rule_set is None:
            return []

        variables = dict(self.auth.variables, keyword=keyword)
        params = {
            name: substitute(value, variables)
            for name, value in rule_set.query.items()
        }

        records: list[TorrentRecord] = []
        for search_path in rule_set.paths:
            document = await self._fetch_document(
                search_path.path, params=params, keyword=keyword
            )
            rows = select_scope(document, rule_set.rows)
            self._log.debug(
                "site_rows_found", path=search_path.path, count=len(rows)
            )
            records.extend(self._rows_to_records(rule_set, rows, search_path))
        return records
