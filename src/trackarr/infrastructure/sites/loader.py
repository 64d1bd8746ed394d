"""Site document loading: YAML -> pydantic validation -> domain model."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from trackarr.domain.sites import ConfigParseError
from trackarr.domain.sites.site_schema import SiteConfiguration
from trackarr.infrastructure.sites.adapters import to_domain_site_configuration
from trackarr.infrastructure.sites.validation_schema import SiteDocumentPydantic

log = structlog.get_logger(__name__)


def _validate(data: Any, default_id: str, source: str) -> SiteConfiguration:
    if data is None:
        raise ConfigParseError(f"{source}: YAML document is empty")
    if not isinstance(data, dict):
        raise ConfigParseError(f"{source}: YAML root must be a mapping/object")

    # Validate with Pydantic (Infrastructure)
    pydantic_model = SiteDocumentPydantic.model_validate(data)

    # Convert to domain model
    return to_domain_site_configuration(pydantic_model, default_id=default_id)


def parse_site_config(
    text: str, default_id: str, source: str = "<text>"
) -> SiteConfiguration:
    """Parse and validate one site document given as YAML text.

    ``default_id`` is used when the document carries no ``id`` key.
    """
    try:
        data = yaml.safe_load(text)
        return _validate(data, default_id, source)
    except ValidationError as e:
        log.error(
            "site_validation_failed",
            site_source=source,
            error_type="ValidationError",
            error_details=e.errors(include_url=False, include_context=False),
        )
        raise ConfigParseError(f"{source}: {e}") from e
    except yaml.YAMLError as e:
        log.error(
            "site_validation_failed",
            site_source=source,
            error_type=type(e).__name__,
            error_message=str(e),
        )
        raise ConfigParseError(f"{source}: {e}") from e
    except ConfigParseError as e:
        log.error(
            "site_validation_failed",
            site_source=source,
            error_type="ConfigParseError",
            error_message=str(e),
        )
        raise


def load_site_config(path: Path) -> SiteConfiguration:
    """Load and validate a site YAML file, returning the domain model."""
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        log.error(
            "site_load_failed",
            site_file=str(path),
            error_type=type(e).__name__,
            error_message=str(e),
        )
        raise ConfigParseError(f"{path}: {e}") from e
    return parse_site_config(raw, default_id=path.stem, source=str(path))
