"""Credentials file: YAML mapping ``site_id -> {cookies, api_key}``."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, RootModel, ValidationError

from trackarr.domain.sites import Credential


class CredentialEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    cookies: Optional[str] = None
    api_key: Optional[str] = None


class CredentialsFile(RootModel[Dict[str, CredentialEntry]]):
    pass


def load_credentials(path: Path) -> dict[str, Credential]:
    """Read a credentials file; entries without any secret are dropped.

    Raises:
        FileNotFoundError: ``path`` does not exist.
        ValueError: The file is not a valid credentials mapping.
    """
    if not path.exists():
        raise FileNotFoundError(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if isinstance(data, dict):
            data = {str(k): v for k, v in data.items()}
        parsed = CredentialsFile.model_validate(data)
    except (yaml.YAMLError, ValidationError) as e:
        raise ValueError(f"Invalid credentials file {path}: {e}") from e

    credentials: dict[str, Credential] = {}
    for site_id, entry in parsed.root.items():
        credential = Credential(cookies=entry.cookies, api_key=entry.api_key)
        if not credential.is_empty:
            credentials[site_id] = credential
    return credentials
