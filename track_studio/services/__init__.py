"""Service layer package.

Exports high-level services consumed by orchestration / presentation layers.
"""

from .enrichment_service import (
    ElevationEnrichmentConfig,
    ElevationEnrichmentService,
    EnrichmentOutcome,
    EnrichmentState,
)

__all__ = [
    "ElevationEnrichmentConfig",
    "ElevationEnrichmentService",
    "EnrichmentOutcome",
    "EnrichmentState",
]
