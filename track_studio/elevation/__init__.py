"""Elevation providers and the chunked enrichment pipeline."""

from .registry import (
    CLEAR,
    DEFAULT_REGISTRY,
    FILE_CONTENT,
    IGN_GEOPORTAIL,
    NONE,
    OPEN_ELEVATION,
    ElevationProviderDescriptor,
    ElevationProviderRegistry,
    build_default_registry,
)
from .server import ChunkFailure, ElevationServer, chunk_coordinates

__all__ = [
    "CLEAR",
    "DEFAULT_REGISTRY",
    "FILE_CONTENT",
    "IGN_GEOPORTAIL",
    "NONE",
    "OPEN_ELEVATION",
    "ElevationProviderDescriptor",
    "ElevationProviderRegistry",
    "build_default_registry",
    "ChunkFailure",
    "ElevationServer",
    "chunk_coordinates",
]
