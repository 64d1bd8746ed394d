"""Nested key-path lookup and the value filter pipeline.

Both functions are total: malformed input degrades to ``None`` (lookup)
or ``""`` (filters) and never raises.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any
from urllib.parse import parse_qs, urlsplit

from trackarr.domain.sites.site_schema import (
    Filter,
    QueryStringExtract,
    RegexExtract,
    Replace,
)

from .converters import to_text


def get_nested(container: Any, path: str | None) -> Any:
    """Resolve a dot-separated ``path`` inside nested mappings.

    Numeric segments index into lists. Returns None as soon as an
    intermediate value is not a container or a key is missing.
    """
    if not path:
        return None

    current = container
    for part in path.split("."):
        if isinstance(current, Mapping):
            current = current.get(part)
        elif (
            isinstance(current, Sequence)
            and not isinstance(current, (str, bytes))
            and part.isdigit()
        ):
            index = int(part)
            current = current[index] if index < len(current) else None
        else:
            return None
        if current is None:
            return None
    return current


def apply_filters(value: Any, filters: Sequence[Filter]) -> str:
    """Run ``filters`` left-to-right over the string form of ``value``."""
    text = to_text(value)
    for f in filters:
        text = _apply_one(text, f)
    return text


def _apply_one(value: str, f: Filter) -> str:
    if isinstance(f, RegexExtract):
        match = f.pattern.search(value)
        if match is None:
            return ""
        try:
            return match.group(f.group) or ""
        except IndexError:
            return ""

    if isinstance(f, Replace):
        return value.replace(f.search, f.replacement, 1)

    if isinstance(f, QueryStringExtract):
        try:
            query = urlsplit(value).query
        except ValueError:
            return ""
        values = parse_qs(query, keep_blank_values=True).get(f.param)
        return values[0] if values else ""

    # UnknownFilter
    return value
