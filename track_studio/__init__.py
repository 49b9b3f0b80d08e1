"""Journey track ingestion, metrics and elevation enrichment."""

from .errors import (
    ElevationDataError,
    ElevationEnrichmentError,
    ElevationProviderNotFoundError,
    ElevationServiceError,
    SourceFormatError,
)
from .journey import Journey
from .main import main
from .metrics import AggregateMetric, MetricsSettings
from .models import POI, Track

__all__ = [
    "main",
    "Journey",
    "Track",
    "POI",
    "AggregateMetric",
    "MetricsSettings",
    "SourceFormatError",
    "ElevationServiceError",
    "ElevationDataError",
    "ElevationProviderNotFoundError",
    "ElevationEnrichmentError",
]
