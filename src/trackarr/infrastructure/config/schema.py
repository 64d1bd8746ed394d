"""Application settings: the validated model and its env-var layer."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from trackarr.infrastructure.sites.constants import DEFAULT_USER_AGENT

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


def _normalize_path(value: Any) -> Path:
    """Expand ``~``; the path is not required to exist."""
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


class AppConfig(BaseModel):
    """
    Final settings after all layers are merged.

    Each field reads either its flat name (``http_timeout_seconds``) or its
    place in the sectioned YAML shape (``http.timeout_seconds``).
    """

    # General
    app_name: str = Field(default="trackarr", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="dev, test or prod.",
    )

    # Sites (YAML section: sites.sites_dir)
    sites_dir: Path = Field(
        default=Path("./sites"),
        validation_alias=AliasChoices(
            "sites_dir",
            AliasPath("sites", "sites_dir"),
        ),
        description="Directory containing one <site_id>.yml document per site.",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=30.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Per-request timeout in seconds.",
    )
    http_follow_redirects: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "http_follow_redirects",
            AliasPath("http", "follow_redirects"),
        ),
        description="Follow 3xx responses from sites.",
    )
    http_user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="Default User-Agent for outgoing site requests.",
    )

    # Aggregated search (YAML section: search.*)
    search_max_concurrent_sites: int = Field(
        default=10,
        validation_alias=AliasChoices(
            "search_max_concurrent_sites",
            AliasPath("search", "max_concurrent_sites"),
        ),
        description="Max site extractions running at the same time.",
    )
    search_site_timeout_seconds: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices(
            "search_site_timeout_seconds",
            AliasPath("search", "site_timeout_seconds"),
        ),
        description="Per-site timeout for aggregated search. None disables it.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Root log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description="console or json; unset means json in prod, console elsewhere.",
    )

    @field_validator("sites_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Path:
        return _normalize_path(v)

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @field_validator("search_max_concurrent_sites")
    @classmethod
    def _validate_max_concurrent(cls, v: int) -> int:
        if v < 1:
            raise ValueError("search_max_concurrent_sites must be >= 1")
        return v

    @field_validator("search_site_timeout_seconds")
    @classmethod
    def _validate_site_timeout(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("search_site_timeout_seconds must be > 0")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # json in prod, console otherwise
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """Inverse of the YAML layout, e.g. for printing the effective config."""
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "sites": {"sites_dir": str(self.sites_dir)},
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "follow_redirects": self.http_follow_redirects,
                "user_agent": self.http_user_agent,
            },
            "search": {
                "max_concurrent_sites": self.search_max_concurrent_sites,
                "site_timeout_seconds": self.search_site_timeout_seconds,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
        }


class EnvOverrides(BaseSettings):
    """
    ``TRACKARR_<FLAT_KEY>`` variables, e.g. ``TRACKARR_SITES_DIR`` or
    ``TRACKARR_SEARCH_SITE_TIMEOUT_SECONDS``. Unset variables stay None and
    are left out of the merge.
    """

    model_config = SettingsConfigDict(
        env_prefix="TRACKARR_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    sites_dir: Optional[Path] = None

    http_timeout_seconds: Optional[float] = None
    http_follow_redirects: Optional[bool] = None
    http_user_agent: Optional[str] = None

    search_max_concurrent_sites: Optional[int] = None
    search_site_timeout_seconds: Optional[float] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    @field_validator("sites_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    def to_update_dict(self) -> dict[str, Any]:
        """Flat dict of the variables that are set."""
        return self.model_dump(exclude_none=True)
