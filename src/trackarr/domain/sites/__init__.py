from .exceptions import (
    ConfigNotFound,
    ConfigParseError,
    ExtractionError,
    SearchBadRequest,
    ShapeError,
    SiteApiError,
    SiteError,
    TransportError,
)
from .site_schema import (
    ApiEndpoint,
    CaseRule,
    Credential,
    FieldRule,
    Filter,
    HtmlPage,
    HtmlSearch,
    LiteralRule,
    PathRule,
    QueryStringExtract,
    RegexExtract,
    Replace,
    SelectorRule,
    SiteConfiguration,
    UnknownFilter,
    VolumeFactors,
)

__all__ = [
    "ApiEndpoint",
    "CaseRule",
    "ConfigNotFound",
    "ConfigParseError",
    "Credential",
    "ExtractionError",
    "FieldRule",
    "Filter",
    "HtmlPage",
    "HtmlSearch",
    "LiteralRule",
    "PathRule",
    "QueryStringExtract",
    "RegexExtract",
    "Replace",
    "SearchBadRequest",
    "SelectorRule",
    "ShapeError",
    "SiteApiError",
    "SiteConfiguration",
    "SiteError",
    "TransportError",
    "UnknownFilter",
    "VolumeFactors",
]
