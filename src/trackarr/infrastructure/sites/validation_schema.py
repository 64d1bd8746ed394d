"""Pydantic validation models for site YAML documents."""

from __future__ import annotations

import codecs
import re
from typing import Any, Dict, List, Literal, Optional, Union

import soupsieve
from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)

SITE_ID_RE = r"^[A-Za-z0-9_.-]+$"

# Accepted spellings -> filter kind
FILTER_KINDS: dict[str, str] = {
    "re_search": "regex",
    "regex_extract": "regex",
    "regex": "regex",
    "replace": "replace",
    "querystring": "querystring",
    "query_string": "querystring",
    "query_string_extract": "querystring",
}

WILDCARD = "*"


def _scalar_text(value: Any, what: str) -> str:
    if isinstance(value, bool) or value is None or isinstance(value, (list, dict)):
        raise ValueError(f"{what} must be a string, got {value!r}")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _check_selector(selector: str) -> str:
    try:
        soupsieve.compile(selector)
    except soupsieve.SelectorSyntaxError as e:
        raise ValueError(f"invalid CSS selector {selector!r}: {e}") from e
    return selector


class FilterSpec(BaseModel):
    name: str
    args: List[Any] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _normalize_name(cls, v: str) -> str:
        return v.strip().lower().replace("-", "_")

    @property
    def kind(self) -> str | None:
        return FILTER_KINDS.get(self.name)

    @model_validator(mode="after")
    def _validate_args(self) -> "FilterSpec":
        if self.kind == "regex":
            if not self.args or not isinstance(self.args[0], str):
                raise ValueError(f"filter '{self.name}' requires a pattern string")
            try:
                compiled = re.compile(self.args[0])
            except re.error as e:
                raise ValueError(f"filter '{self.name}': invalid pattern: {e}") from e
            group = self.args[1] if len(self.args) > 1 else 0
            if isinstance(group, bool) or not isinstance(group, (int, str)):
                raise ValueError(f"filter '{self.name}': group must be int or name")
            if isinstance(group, int) and not 0 <= group <= compiled.groups:
                raise ValueError(
                    f"filter '{self.name}': group {group} out of range "
                    f"(pattern has {compiled.groups})"
                )
            if isinstance(group, str) and group not in compiled.groupindex:
                raise ValueError(f"filter '{self.name}': unknown group {group!r}")
        elif self.kind == "replace":
            if len(self.args) < 2:
                raise ValueError("filter 'replace' requires search and replacement")
            self.args = [
                _scalar_text(self.args[0], "replace search"),
                _scalar_text(self.args[1], "replace replacement"),
            ]
        elif self.kind == "querystring":
            if not self.args:
                raise ValueError(f"filter '{self.name}' requires a parameter name")
            self.args = [_scalar_text(self.args[0], "querystring parameter")]
        return self


class FieldRuleSpec(BaseModel):
    """One field rule; exactly one strategy applies (case > text > path/selector)."""

    path: Optional[str] = None
    selector: Optional[str] = None
    attribute: Optional[str] = None
    method: Optional[str] = None
    default_value: Optional[Union[str, int, float]] = None
    optional: bool = False
    filters: List[FilterSpec] = Field(default_factory=list)
    case: Optional[Dict[str, Any]] = None
    text: Optional[str] = None
    table: Optional[str] = None

    @field_validator("selector")
    @classmethod
    def _validate_selector(cls, v: Optional[str]) -> Optional[str]:
        return _check_selector(v) if v else v

    @field_validator("case")
    @classmethod
    def _validate_case(cls, v: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if v is None:
            return None
        if not v:
            raise ValueError("case requires at least one branch")
        for selector, value in v.items():
            if selector != WILDCARD:
                _check_selector(selector)
            _scalar_text(value, f"case value for {selector!r}")
        return v

    @field_validator("method")
    @classmethod
    def _validate_method(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in {"next_sibling", "text", "attribute"}:
            raise ValueError(f"unknown extraction method {v!r}")
        return v


FieldsSpec = Dict[str, Union[str, FieldRuleSpec]]


def _require_fields(fields: FieldsSpec, owner: str) -> None:
    if not fields:
        raise ValueError(f"{owner} requires at least one field")


class ApiEndpointSpec(BaseModel):
    path: str = Field(min_length=1)
    method: Literal["GET", "POST"] = "POST"
    headers: Dict[str, str] = Field(default_factory=dict)
    body_template: Optional[Dict[str, Any]] = Field(
        default=None,
        validation_alias=AliasChoices("body_template", "body"),
    )
    data_path: Optional[str] = None
    list_path: Optional[str] = None
    status_field: str = "code"
    message_field: str = "message"
    fields: FieldsSpec

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @model_validator(mode="after")
    def _validate_fields(self) -> "ApiEndpointSpec":
        _require_fields(self.fields, "api endpoint")
        for name, rule in self.fields.items():
            if isinstance(rule, FieldRuleSpec) and (rule.selector or rule.case):
                raise ValueError(
                    f"api field '{name}' must use 'path' or 'text', not selectors"
                )
        return self


class ItemSelector(BaseModel):
    selector: str

    @field_validator("selector")
    @classmethod
    def _validate_selector(cls, v: str) -> str:
        return _check_selector(v)


def _validate_html_fields(fields: FieldsSpec, owner: str) -> None:
    _require_fields(fields, owner)
    for name, rule in fields.items():
        if isinstance(rule, str) or rule.path:
            raise ValueError(f"html field '{name}' must use 'selector', not a path")


class HtmlPageSpec(BaseModel):
    path: str = Field(min_length=1)
    item: Optional[ItemSelector] = None
    fields: FieldsSpec

    @model_validator(mode="after")
    def _validate_fields(self) -> "HtmlPageSpec":
        _validate_html_fields(self.fields, "userinfo")
        return self


class SearchPathSpec(BaseModel):
    path: str = Field(min_length=1)
    categories: List[Union[str, int]] = Field(default_factory=list)


class HtmlSearchSpec(BaseModel):
    paths: List[SearchPathSpec] = Field(min_length=1)
    query: Dict[str, str] = Field(default_factory=dict)
    rows: ItemSelector
    fields: FieldsSpec

    @model_validator(mode="after")
    def _validate_fields(self) -> "HtmlSearchSpec":
        _validate_html_fields(self.fields, "search")
        return self


class CategoryMappingSpec(BaseModel):
    id: Union[int, str]
    cate_level1: str
    cate_level2: str
    cate_level2_desc: Optional[str] = None


class DiscountSpec(BaseModel):
    download: float = Field(
        default=1.0,
        ge=0,
        validation_alias=AliasChoices("download", "download_volume_factor"),
    )
    upload: float = Field(
        default=1.0,
        ge=0,
        validation_alias=AliasChoices("upload", "upload_volume_factor"),
    )


class HttpOverrides(BaseModel):
    timeout_seconds: Optional[float] = None
    user_agent: Optional[str] = None

    @field_validator("timeout_seconds")
    @classmethod
    def _validate_timeout(cls, v: Optional[float]) -> Optional[float]:
        if v is None:
            return None
        if v <= 0:
            raise ValueError("http.timeout_seconds must be > 0")
        return v


class SiteDocumentPydantic(BaseModel):
    """
    Pydantic validation model for site YAML documents.

    After validation, this is converted to domain.sites.site_schema.SiteConfiguration.
    """

    id: Optional[str] = Field(default=None, pattern=SITE_ID_RE)
    name: str = Field(min_length=1)
    domain: str
    encoding: Optional[str] = None
    config_url: Optional[str] = None
    allow_auth_type: List[Literal["cookies", "api_key"]] = Field(
        default_factory=lambda: ["cookies"], min_length=1
    )

    userinfo: Optional[HtmlPageSpec] = None
    api_userinfo: Optional[ApiEndpointSpec] = None
    api_search: Optional[ApiEndpointSpec] = None
    search: Optional[HtmlSearchSpec] = None

    code_tables: Dict[str, Dict[str, str]] = Field(default_factory=dict)
    discounts: Dict[str, DiscountSpec] = Field(default_factory=dict)
    category_mappings: List[CategoryMappingSpec] = Field(default_factory=list)
    unlimited_ratio_tokens: List[str] = Field(default_factory=list)

    http: Optional[HttpOverrides] = None

    @field_validator("domain")
    @classmethod
    def _validate_domain(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("domain must start with http:// or https://")
        return v

    @field_validator("encoding")
    @classmethod
    def _validate_encoding(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"unknown encoding {v!r}") from e
        return v

    @field_validator("code_tables", mode="before")
    @classmethod
    def _stringify_codes(cls, v: Any) -> Any:
        # YAML reads unquoted codes (6: 1080p) as ints
        if not isinstance(v, dict):
            return v
        return {
            str(table): (
                {str(code): str(label) for code, label in entries.items()}
                if isinstance(entries, dict)
                else entries
            )
            for table, entries in v.items()
        }

    @field_validator("allow_auth_type", mode="before")
    @classmethod
    def _normalize_auth_types(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = [v]
        if isinstance(v, list):
            return ["cookies" if t == "cookie" else t for t in v]
        return v
