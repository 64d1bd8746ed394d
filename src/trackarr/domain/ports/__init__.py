from .extraction_observer import (
    ExtractionObserverPort,
    ExtractionOperation,
    ExtractionOutcome,
    SiteExtractionEvent,
)
from .site_client import SiteClientFactoryPort, SiteClientPort
from .site_registry import SiteRegistryPort

__all__ = [
    "ExtractionObserverPort",
    "ExtractionOperation",
    "ExtractionOutcome",
    "SiteClientFactoryPort",
    "SiteClientPort",
    "SiteExtractionEvent",
    "SiteRegistryPort",
]
