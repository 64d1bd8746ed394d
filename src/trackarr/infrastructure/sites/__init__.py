from .client import SiteClient, SiteClientFactory
from .loader import load_site_config, parse_site_config
from .registry import SiteRegistry

__all__ = [
    "SiteClient",
    "SiteClientFactory",
    "SiteRegistry",
    "load_site_config",
    "parse_site_config",
]
