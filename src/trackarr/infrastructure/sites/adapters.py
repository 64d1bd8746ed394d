"""Adapters to convert Pydantic validation models to domain models."""

from __future__ import annotations

import re

from trackarr.domain.sites import site_schema as domain
from trackarr.infrastructure.common.converters import to_text
from trackarr.infrastructure.sites import validation_schema as infra
from trackarr.infrastructure.sites.constants import FIELD_ALIASES

CATEGORY_TABLE = "category"

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def to_domain_filter(pydantic: infra.FilterSpec) -> domain.Filter:
    """Convert a validated filter entry to its typed variant."""
    kind = pydantic.kind
    if kind == "regex":
        group = pydantic.args[1] if len(pydantic.args) > 1 else 0
        return domain.RegexExtract(pattern=re.compile(pydantic.args[0]), group=group)
    if kind == "replace":
        return domain.Replace(search=pydantic.args[0], replacement=pydantic.args[1])
    if kind == "querystring":
        return domain.QueryStringExtract(param=pydantic.args[0])
    return domain.UnknownFilter(name=pydantic.name)


def _case_branches(case: dict[str, object]) -> tuple[tuple[str, str], ...]:
    ordered = [
        (sel, to_text(val)) for sel, val in case.items() if sel != infra.WILDCARD
    ]
    if infra.WILDCARD in case:
        ordered.append((infra.WILDCARD, to_text(case[infra.WILDCARD])))
    return tuple(ordered)


def to_domain_field_rule(pydantic: str | infra.FieldRuleSpec) -> domain.FieldRule:
    """Pick the single resolution strategy of a rule: case > text > path/selector."""
    if isinstance(pydantic, str):
        return domain.PathRule(path=pydantic)

    common = dict(
        default_value=(
            to_text(pydantic.default_value)
            if pydantic.default_value is not None
            else None
        ),
        optional=pydantic.optional,
        filters=tuple(to_domain_filter(f) for f in pydantic.filters),
        table=pydantic.table,
    )
    if pydantic.case is not None:
        return domain.CaseRule(branches=_case_branches(pydantic.case), **common)
    if pydantic.text is not None:
        return domain.LiteralRule(text=pydantic.text, **common)
    if pydantic.path is not None:
        return domain.PathRule(path=pydantic.path, **common)
    return domain.SelectorRule(
        selector=pydantic.selector,
        attribute=pydantic.attribute,
        method=pydantic.method,
        **common,
    )


def canonical_field_name(name: str) -> str:
    """``downloadVolumeFactor`` -> ``download_volume_factor``; aliases resolved."""
    snake = _CAMEL_BOUNDARY.sub("_", name).lower()
    return FIELD_ALIASES.get(snake, snake)


def to_domain_fields(fields: infra.FieldsSpec) -> dict[str, domain.FieldRule]:
    """Convert field rules keeping document order.

    A canonical name written explicitly wins over an alias of it.
    """
    out: dict[str, domain.FieldRule] = {}
    explicit = {name for name in fields if canonical_field_name(name) == name}
    for name, rule in fields.items():
        canonical = canonical_field_name(name)
        if canonical != name and canonical in explicit:
            continue
        out[canonical] = to_domain_field_rule(rule)
    return out


def to_domain_api_endpoint(pydantic: infra.ApiEndpointSpec) -> domain.ApiEndpoint:
    """Convert Pydantic ApiEndpointSpec to domain model."""
    return domain.ApiEndpoint(
        path=pydantic.path,
        fields=to_domain_fields(pydantic.fields),
        method=pydantic.method,
        headers=dict(pydantic.headers),
        body_template=pydantic.body_template,
        data_path=pydantic.data_path,
        list_path=pydantic.list_path,
        status_field=pydantic.status_field,
        message_field=pydantic.message_field,
    )


def to_domain_html_page(pydantic: infra.HtmlPageSpec) -> domain.HtmlPage:
    """Convert Pydantic HtmlPageSpec to domain model."""
    return domain.HtmlPage(
        path=pydantic.path,
        fields=to_domain_fields(pydantic.fields),
        container=pydantic.item.selector if pydantic.item else None,
    )


def to_domain_html_search(pydantic: infra.HtmlSearchSpec) -> domain.HtmlSearch:
    """Convert Pydantic HtmlSearchSpec to domain model."""
    return domain.HtmlSearch(
        paths=tuple(
            domain.SearchPath(
                path=p.path,
                categories=tuple(str(c) for c in p.categories),
            )
            for p in pydantic.paths
        ),
        rows=pydantic.rows.selector,
        fields=to_domain_fields(pydantic.fields),
        query=dict(pydantic.query),
    )


def to_domain_http_overrides(
    pydantic: infra.HttpOverrides,
) -> domain.HttpOverrides:
    """Convert Pydantic HttpOverrides to domain model."""
    return domain.HttpOverrides(
        timeout_seconds=pydantic.timeout_seconds,
        user_agent=pydantic.user_agent,
    )


def to_domain_code_tables(
    pydantic: infra.SiteDocumentPydantic,
) -> dict[str, dict[str, str]]:
    """Merge category_mappings into the ``category`` code table.

    Entries written directly under ``code_tables.category`` win.
    """
    tables = {name: dict(entries) for name, entries in pydantic.code_tables.items()}
    if pydantic.category_mappings:
        categories = {
            str(m.id): m.cate_level2_desc or m.cate_level2
            for m in pydantic.category_mappings
        }
        categories.update(tables.get(CATEGORY_TABLE, {}))
        tables[CATEGORY_TABLE] = categories
    return tables


def to_domain_site_configuration(
    pydantic: infra.SiteDocumentPydantic,
    default_id: str,
) -> domain.SiteConfiguration:
    """Convert validated Pydantic model to pure domain model."""
    return domain.SiteConfiguration(
        id=pydantic.id or default_id,
        name=pydantic.name,
        domain=pydantic.domain,
        allow_auth_type=tuple(dict.fromkeys(pydantic.allow_auth_type)),
        encoding=pydantic.encoding,
        api_search=to_domain_api_endpoint(pydantic.api_search)
        if pydantic.api_search
        else None,
        search=to_domain_html_search(pydantic.search) if pydantic.search else None,
        api_userinfo=to_domain_api_endpoint(pydantic.api_userinfo)
        if pydantic.api_userinfo
        else None,
        userinfo=to_domain_html_page(pydantic.userinfo)
        if pydantic.userinfo
        else None,
        code_tables=to_domain_code_tables(pydantic),
        discounts={
            code: domain.VolumeFactors(download=d.download, upload=d.upload)
            for code, d in pydantic.discounts.items()
        },
        unlimited_ratio_tokens=tuple(pydantic.unlimited_ratio_tokens),
        http=to_domain_http_overrides(pydantic.http) if pydantic.http else None,
    )
