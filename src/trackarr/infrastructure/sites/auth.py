"""Credential binding and template substitution for site requests."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from trackarr.domain.sites import Credential

# {{name}} or {name}
_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}|\{(\w+)\}")

API_KEY_HEADER = "x-api-key"


def substitute(template: str, variables: Mapping[str, str]) -> str:
    """Replace every known placeholder; unknown placeholders stay as written."""

    def _repl(match: re.Match[str]) -> str:
        name = match.group(1) or match.group(2)
        if name in variables:
            return variables[name]
        return match.group(0)

    return _PLACEHOLDER.sub(_repl, template)


def substitute_deep(value: Any, variables: Mapping[str, str]) -> Any:
    """Copy a JSON-like structure, substituting placeholders inside strings.

    Keys and non-string leaves are copied unchanged.
    """
    if isinstance(value, str):
        return substitute(value, variables)
    if isinstance(value, dict):
        return {k: substitute_deep(v, variables) for k, v in value.items()}
    if isinstance(value, list):
        return [substitute_deep(v, variables) for v in value]
    return value


@dataclass(frozen=True)
class AuthContext:
    """Binds one site's credential to request templates."""

    credential: Credential

    @property
    def variables(self) -> dict[str, str]:
        return {
            "api_key": self.credential.api_key or "",
            "cookies": self.credential.cookies or "",
        }

    def render(self, template: str) -> str:
        return substitute(template, self.variables)

    def render_headers(self, headers: Mapping[str, str]) -> dict[str, str]:
        return {name: self.render(value) for name, value in headers.items()}

    def render_body(self, template: Any, keyword: str | None = None) -> Any:
        variables = self.variables
        if keyword is not None:
            variables["keyword"] = keyword
        return substitute_deep(template, variables)

    def credential_headers(self) -> dict[str, str]:
        """Cookie and API-key headers for markup pages; either or both may apply."""
        headers: dict[str, str] = {}
        if self.credential.cookies:
            headers["Cookie"] = self.credential.cookies
        if self.credential.api_key:
            headers[API_KEY_HEADER] = self.credential.api_key
        return headers
