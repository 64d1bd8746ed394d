"""Single resolver for every field-rule variant.

Extractors supply a ``FieldSource`` (a JSON item or an HTML lookup scope);
the resolver picks the strategy from the rule's variant type:
case branches, then literal text, then path/selector extraction, then the
rule's default value.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

import structlog

from trackarr.domain.sites.site_schema import (
    CaseRule,
    FieldRule,
    LiteralRule,
    PathRule,
    SelectorRule,
)
from trackarr.infrastructure.common.converters import to_text
from trackarr.infrastructure.common.field_mapper import apply_filters
from trackarr.infrastructure.common.normalizer import map_code

from .auth import substitute

log = structlog.get_logger(__name__)

WILDCARD = "*"


class FieldSource(Protocol):
    """Where raw field values come from."""

    def lookup_path(self, path: str) -> Any: ...

    def lookup_selector(self, rule: SelectorRule) -> str | None: ...

    def matches(self, selector: str) -> bool: ...


def _is_missing(raw: Any) -> bool:
    return raw is None or (isinstance(raw, str) and raw.strip() == "")


def _match_case(rule: CaseRule, source: FieldSource) -> str | None:
    for selector, value in rule.branches:
        if selector == WILDCARD or source.matches(selector):
            return value
    return None


def resolve_field(
    rule: FieldRule,
    source: FieldSource,
    variables: Mapping[str, str] | None = None,
    code_table: Mapping[str, str] | None = None,
) -> Any:
    """Resolve one rule to a raw value, or its default when nothing matches.

    Case and literal values are used as written. Extracted values run
    through the rule's filters, then through ``code_table`` when given.
    Returns None when the rule yields nothing and has no default.
    """
    if isinstance(rule, CaseRule):
        raw = _match_case(rule, source)
        return rule.default_value if raw is None else raw

    if isinstance(rule, LiteralRule):
        return substitute(rule.text, variables or {})

    if isinstance(rule, PathRule):
        raw = source.lookup_path(rule.path)
    elif rule.selector:
        raw = source.lookup_selector(rule)
    else:
        raw = None

    if _is_missing(raw):
        return rule.default_value

    if rule.filters:
        raw = apply_filters(raw, rule.filters)
        if raw == "":
            return rule.default_value

    if code_table is not None:
        raw = map_code(raw, code_table)
    return raw


def resolve_fields(
    fields: Mapping[str, FieldRule],
    source: FieldSource,
    *,
    site: str,
    base_variables: Mapping[str, str] | None = None,
    code_tables: Mapping[str, Mapping[str, str]] | None = None,
) -> dict[str, Any]:
    """Resolve every field in document order.

    Literal templates see ``base_variables`` plus every field resolved
    before them. A field's code table is the rule's ``table`` or, when
    absent, the table named after the field.
    """
    tables = code_tables or {}
    variables = dict(base_variables or {})
    values: dict[str, Any] = {}

    for name, rule in fields.items():
        table = tables.get(rule.table or name)
        value = resolve_field(rule, source, variables=variables, code_table=table)
        if value is None and not rule.optional:
            log.debug("site_field_missing", site=site, field=name)
        values[name] = value
        if value is not None:
            variables[name] = to_text(value)

    return values
