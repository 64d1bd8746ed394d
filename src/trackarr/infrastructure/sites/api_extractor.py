"""JSON API extraction strategy."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from trackarr.domain.entities import SiteUserInfo, TorrentRecord
from trackarr.domain.sites import ApiEndpoint, ShapeError, SiteApiError
from trackarr.domain.sites.site_schema import SelectorRule
from trackarr.infrastructure.common.converters import to_text
from trackarr.infrastructure.common.field_mapper import get_nested

from .constants import JSON_CONTENT_TYPE
from .field_resolver import resolve_fields
from .httpx_base import HttpxExtractorBase
from .record_builder import build_torrent_record, build_user_info


class JsonItemSource:
    """Field source over one decoded JSON value."""

    def __init__(self, item: Any) -> None:
        self._item = item

    def lookup_path(self, path: str) -> Any:
        return get_nested(self._item, path)

    def lookup_selector(self, rule: SelectorRule) -> str | None:
        return None

    def matches(self, selector: str) -> bool:
        return False


def is_error_status(status: Any) -> bool:
    """Absent, falsy, ``0`` and ``"0"`` status values mean success."""
    if status is None or status is False:
        return False
    if isinstance(status, (int, float)):
        return status != 0
    if isinstance(status, str):
        return status.strip() not in ("", "0")
    return bool(status)


def _query_params(body: Any) -> dict[str, str]:
    if not isinstance(body, Mapping):
        return {}
    return {str(k): to_text(v) for k, v in body.items() if v is not None}


class ApiExtractor(HttpxExtractorBase):
    """Calls a configured JSON endpoint and maps its payload."""

    async def _call(self, endpoint: ApiEndpoint, keyword: str | None = None) -> Any:
        """Execute ``endpoint`` and return the payload at ``data_path``."""
        url = self._url(endpoint.path, keyword)
        headers = self._base_headers()
        headers["Content-Type"] = JSON_CONTENT_TYPE
        headers.update(self.auth.render_headers(endpoint.headers))

        body = self.auth.render_body(endpoint.body_template or {}, keyword)
        if endpoint.method == "GET":
            resp = await self._request(
                "GET", url, headers=headers, params=_query_params(body)
            )
        else:
            resp = await self._request("POST", url, headers=headers, json_body=body)

        try:
            payload = resp.json()
        except ValueError as exc:
            raise ShapeError(f"{url} returned malformed JSON") from exc

        if isinstance(payload, Mapping):
            status = payload.get(endpoint.status_field)
            if is_error_status(status):
                message = to_text(payload.get(endpoint.message_field)) or None
                self._log.warning(
                    "site_api_error", url=url, code=status, message=message
                )
                raise SiteApiError(status, message)

        if endpoint.data_path:
            return get_nested(payload, endpoint.data_path)
        return payload

    async def search(self, keyword: str) -> list[TorrentRecord]:
        endpoint = self.config.api_search
        if endpoint is None:
            return []

        data = await self._call(endpoint, keyword=keyword)
        items = get_nested(data, endpoint.list_path) if endpoint.list_path else data
        if not isinstance(items, list):
            where = endpoint.list_path or endpoint.data_path or "<root>"
            raise ShapeError(
                f"expected a list at '{where}', got {type(items).__name__}"
            )

        records: list[TorrentRecord] = []
        for item in items:
            if not isinstance(item, Mapping):
                self._log.debug("site_item_skipped", reason="not_an_object")
                continue
            values = resolve_fields(
                endpoint.fields,
                JsonItemSource(item),
                site=self.config.id,
                base_variables={"domain": self.config.domain},
                code_tables=self.config.code_tables,
            )
            records.append(build_torrent_record(self.config, values))
        return records

    async def user_info(self) -> SiteUserInfo:
        endpoint = self.config.api_userinfo
        if endpoint is None:
            raise ShapeError("site has no api_userinfo rule-set")

        data = await self._call(endpoint)
        if not isinstance(data, Mapping) or not data:
            raise ShapeError(
                f"expected an object at '{endpoint.data_path or '<root>'}'"
            )

        values = resolve_fields(
            endpoint.fields,
            JsonItemSource(data),
            site=self.config.id,
            base_variables={"domain": self.config.domain},
            code_tables=self.config.code_tables,
        )
        return build_user_info(self.config, values)
