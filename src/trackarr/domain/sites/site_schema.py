"""Pure domain models for site configuration documents (framework-free).

Field rules and filters are closed sets of tagged variants decided at load
time; extractors dispatch on the variant type and never inspect raw YAML.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal, Union

AuthType = Literal["cookies", "api_key"]
HttpMethod = Literal["GET", "POST"]


# === Filters ===


@dataclass(frozen=True)
class RegexExtract:
    """First match of ``pattern``; ``group`` selects the capture group."""

    pattern: re.Pattern[str]
    group: int | str = 0


@dataclass(frozen=True)
class Replace:
    """Replace the first literal occurrence of ``search``."""

    search: str
    replacement: str


@dataclass(frozen=True)
class QueryStringExtract:
    """Read one query parameter from a URL-like value."""

    param: str


@dataclass(frozen=True)
class UnknownFilter:
    """Filter name this version does not know; applied as a no-op."""

    name: str


Filter = Union[RegexExtract, Replace, QueryStringExtract, UnknownFilter]


# === Field rules ===


@dataclass(frozen=True)
class _RuleBase:
    default_value: str | None = None
    optional: bool = False
    filters: tuple[Filter, ...] = ()
    table: str | None = None


@dataclass(frozen=True)
class PathRule(_RuleBase):
    """Dot-separated key path into a JSON response item."""

    path: str = ""


@dataclass(frozen=True)
class SelectorRule(_RuleBase):
    """CSS selector with attribute / text / next-sibling extraction.

    A rule without selector resolves to its default value.
    """

    selector: str | None = None
    attribute: str | None = None
    method: str | None = None


@dataclass(frozen=True)
class CaseRule(_RuleBase):
    """Ordered selector -> literal branches; ``*`` is the fallback."""

    branches: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class LiteralRule(_RuleBase):
    """Literal text, may reference ``{domain}`` and earlier fields."""

    text: str = ""


FieldRule = Union[PathRule, SelectorRule, CaseRule, LiteralRule]


# === Rule-sets ===


@dataclass(frozen=True)
class ApiEndpoint:
    """JSON API call and response mapping (search or user info)."""

    path: str
    fields: Mapping[str, FieldRule]
    method: HttpMethod = "POST"
    headers: Mapping[str, str] = field(default_factory=dict)
    body_template: Mapping[str, Any] | None = None
    data_path: str | None = None
    list_path: str | None = None
    status_field: str = "code"
    message_field: str = "message"


@dataclass(frozen=True)
class HtmlPage:
    """HTML user-info page."""

    path: str
    fields: Mapping[str, FieldRule]
    container: str | None = None


@dataclass(frozen=True)
class SearchPath:
    path: str
    categories: tuple[str, ...] = ()


@dataclass(frozen=True)
class HtmlSearch:
    """HTML search pages; one record per row selector match."""

    paths: tuple[SearchPath, ...]
    rows: str
    fields: Mapping[str, FieldRule]
    query: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class VolumeFactors:
    download: float = 1.0
    upload: float = 1.0


@dataclass(frozen=True)
class HttpOverrides:
    """HTTP configuration overrides."""

    timeout_seconds: float | None = None
    user_agent: str | None = None


@dataclass(frozen=True)
class SiteConfiguration:
    """Immutable per-site descriptor loaded from one YAML document."""

    id: str
    name: str
    domain: str
    allow_auth_type: tuple[AuthType, ...] = ("cookies",)
    encoding: str | None = None

    api_search: ApiEndpoint | None = None
    search: HtmlSearch | None = None
    api_userinfo: ApiEndpoint | None = None
    userinfo: HtmlPage | None = None

    code_tables: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    discounts: Mapping[str, VolumeFactors] = field(default_factory=dict)
    unlimited_ratio_tokens: tuple[str, ...] = ()
    http: HttpOverrides | None = None


@dataclass(frozen=True)
class Credential:
    """Authentication material for one site; never persisted by this package."""

    cookies: str | None = None
    api_key: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.cookies and not self.api_key
