"""Catalogue of elevation providers.

Pseudo providers (``none``, ``clear``, ``file-content``) never touch the
network; real providers wrap a remote lookup service and may cap the number
of points per request.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Callable, Dict, List, Optional, Sequence

import requests

from ..config import (
    ELEVATION_DEFAULT_MAX_PER_QUERY,
    IGN_GEOPORTAIL_URL,
    IGN_MAX_PER_QUERY,
    OPEN_ELEVATION_URL,
)
from ..errors import ElevationProviderNotFoundError
from ..geometry.models import Coordinate
from . import providers

NONE = "none"
CLEAR = "clear"
FILE_CONTENT = "file-content"
OPEN_ELEVATION = "open-elevation"
IGN_GEOPORTAIL = "ign-geoportail"

Fetcher = Callable[[Sequence[Coordinate], Sequence[Coordinate]], List[Coordinate]]


@dataclass(frozen=True, slots=True)
class ElevationProviderDescriptor:
    id: str
    label: str
    max_per_query: int = ELEVATION_DEFAULT_MAX_PER_QUERY
    doc: Optional[str] = None
    url: Optional[str] = None
    origin: bool = False
    pseudo: bool = False


class ElevationProviderRegistry:
    """Provider id -> descriptor and fetch function."""

    def __init__(self) -> None:
        self._descriptors: Dict[str, ElevationProviderDescriptor] = {}
        self._fetchers: Dict[str, Optional[Fetcher]] = {}

    def register(
        self, descriptor: ElevationProviderDescriptor, fetcher: Optional[Fetcher] = None
    ) -> None:
        if descriptor.max_per_query < 1:
            raise ValueError("max_per_query must be >= 1")
        self._descriptors[descriptor.id] = descriptor
        self._fetchers[descriptor.id] = fetcher

    def get(self, provider_id: str) -> ElevationProviderDescriptor:
        try:
            return self._descriptors[provider_id]
        except KeyError:
            raise ElevationProviderNotFoundError(provider_id) from None

    def fetcher(self, provider_id: str) -> Optional[Fetcher]:
        self.get(provider_id)
        return self._fetchers[provider_id]

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._descriptors

    def ids(self) -> List[str]:
        return list(self._descriptors)

    def pseudo_providers(self) -> List[ElevationProviderDescriptor]:
        return [d for d in self._descriptors.values() if d.pseudo]

    def real_providers(self) -> List[ElevationProviderDescriptor]:
        return [d for d in self._descriptors.values() if not d.pseudo]


def build_default_registry(
    session: requests.Session | None = None,
) -> ElevationProviderRegistry:
    """Registry with the three pseudo providers and the two remote services."""

    registry = ElevationProviderRegistry()
    registry.register(
        ElevationProviderDescriptor(id=NONE, label="No Elevation Data", pseudo=True)
    )
    registry.register(
        ElevationProviderDescriptor(id=CLEAR, label="Remove Elevation Data", pseudo=True),
        providers.clear_elevation,
    )
    registry.register(
        ElevationProviderDescriptor(
            id=FILE_CONTENT, label="Use File Elevation Data", origin=True, pseudo=True
        ),
        providers.restore_file_elevation,
    )
    registry.register(
        ElevationProviderDescriptor(
            id=OPEN_ELEVATION,
            label="From Open-Elevation (Worldwide, 30m)",
            doc="https://github.com/Jorl17/open-elevation/blob/master/docs/api.md",
            url=OPEN_ELEVATION_URL,
        ),
        partial(providers.fetch_open_elevation, session=session, url=OPEN_ELEVATION_URL),
    )
    registry.register(
        ElevationProviderDescriptor(
            id=IGN_GEOPORTAIL,
            label="From IGN GeoPortail (France, 2.5m)",
            doc="https://geoservices.ign.fr/documentation/services/services-deprecies/calcul-altimetrique-rest",
            url=IGN_GEOPORTAIL_URL,
            max_per_query=IGN_MAX_PER_QUERY,
        ),
        partial(providers.fetch_ign_geoportail, session=session, url=IGN_GEOPORTAIL_URL),
    )
    return registry


DEFAULT_REGISTRY = build_default_registry()

__all__ = [
    "NONE",
    "CLEAR",
    "FILE_CONTENT",
    "OPEN_ELEVATION",
    "IGN_GEOPORTAIL",
    "DEFAULT_REGISTRY",
    "ElevationProviderDescriptor",
    "ElevationProviderRegistry",
    "build_default_registry",
]
