"""Elevation fetchers, one per provider.

Every fetcher takes a chunk of ``(lon, lat)`` coordinates plus the matching
slice of originally parsed coordinates and returns new coordinate tuples in
the same order. Inputs are never mutated. Failures raise
:class:`ElevationServiceError` (or :class:`ElevationDataError` when the
provider has no data for the area).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import requests

from ..config import (
    IGN_GEOPORTAIL_RESOURCE,
    IGN_GEOPORTAIL_URL,
    OPEN_ELEVATION_URL,
    REQUEST_TIMEOUT,
)
from ..errors import ElevationDataError, ElevationServiceError
from ..geometry.models import Coordinate
from .session import get_default_session

LOGGER = logging.getLogger(__name__)

# Value returned by the IGN service where it has no coverage.
IGN_ERROR_DATA = -99999.0

WRONG_DATA_MESSAGE = (
    "The data is inconsistent. Elevation data is probably not available "
    "for this part of the globe."
)


def clear_elevation(
    coordinates: Sequence[Coordinate], origin: Sequence[Coordinate] = ()
) -> List[Coordinate]:
    """Drop the altitude component of every coordinate."""

    return [(coordinate[0], coordinate[1]) for coordinate in coordinates]


def restore_file_elevation(
    coordinates: Sequence[Coordinate], origin: Sequence[Coordinate] = ()
) -> List[Coordinate]:
    """Copy altitude back from the originally parsed coordinates, by index."""

    if len(origin) != len(coordinates):
        raise ElevationDataError(
            f"Origin data has {len(origin)} points, expected {len(coordinates)}",
            provider="file-content",
        )
    restored: List[Coordinate] = []
    for coordinate, source in zip(coordinates, origin):
        altitude = source[2] if len(source) > 2 else None
        if altitude is None:
            restored.append((coordinate[0], coordinate[1]))
        else:
            restored.append((coordinate[0], coordinate[1], altitude))
    return restored


def extract_error(resp: Optional[requests.Response]) -> Optional[str]:
    """Return a compact string with the provider's error message, if any."""

    if resp is None:
        return None
    try:
        data = resp.json()
    except (ValueError, requests.exceptions.JSONDecodeError):
        text = (getattr(resp, "text", "") or "").strip()
        return text[:200] or None
    if isinstance(data, dict):
        parts = [
            str(data[key])
            for key in ("error", "message", "detail")
            if data.get(key)
        ]
        return " | ".join(parts) if parts else None
    return None


def _raise_for_status(provider: str, response: requests.Response) -> None:
    status = response.status_code
    if status < 400:
        return
    detail = extract_error(response)

    def with_detail(message: str) -> str:
        return f"{message} | {detail}" if detail else message

    if status == 429:
        message = with_detail(f"{provider} rate limited the request (429)")
    elif status == 404:
        message = with_detail(f"{provider} endpoint not found (404)")
    elif 500 <= status < 600:
        message = with_detail(f"{provider} server error {status}")
    else:
        message = with_detail(f"{provider} request failed (status {status})")
    LOGGER.warning(message)
    raise ElevationServiceError(message, provider=provider, detail=detail)


def _post_json(
    provider: str,
    url: str,
    payload: Dict[str, Any],
    session: requests.Session | None,
    timeout: float,
) -> Any:
    http = session or get_default_session()
    LOGGER.debug("POST %s (%s)", url, provider)
    try:
        response = http.post(url, json=payload, timeout=timeout)
    except requests.RequestException as exc:
        raise ElevationServiceError(
            f"{provider} request failed: {exc}", provider=provider
        ) from exc
    _raise_for_status(provider, response)
    try:
        return response.json()
    except (ValueError, requests.exceptions.JSONDecodeError) as exc:
        raise ElevationServiceError(
            f"{provider} returned an unreadable body", provider=provider
        ) from exc


def _check_count(provider: str, expected: int, received: int) -> None:
    if expected != received:
        raise ElevationDataError(
            f"{provider} returned {received} elevations for {expected} points",
            provider=provider,
        )


def fetch_open_elevation(
    coordinates: Sequence[Coordinate],
    origin: Sequence[Coordinate] = (),
    *,
    session: requests.Session | None = None,
    url: str = OPEN_ELEVATION_URL,
    timeout: float = REQUEST_TIMEOUT,
) -> List[Coordinate]:
    """Look elevations up on an Open-Elevation server."""

    provider = "open-elevation"
    payload = {
        "locations": [
            {"longitude": coordinate[0], "latitude": coordinate[1]}
            for coordinate in coordinates
        ]
    }
    data = _post_json(provider, url, payload, session, timeout)
    results = data.get("results") if isinstance(data, dict) else None
    if not isinstance(results, list):
        raise ElevationDataError(f"{provider} answer has no results", provider=provider)
    _check_count(provider, len(coordinates), len(results))
    return [
        (coordinate[0], coordinate[1], float(result["elevation"]))
        for coordinate, result in zip(coordinates, results)
    ]


def fetch_ign_geoportail(
    coordinates: Sequence[Coordinate],
    origin: Sequence[Coordinate] = (),
    *,
    session: requests.Session | None = None,
    url: str = IGN_GEOPORTAIL_URL,
    timeout: float = REQUEST_TIMEOUT,
) -> List[Coordinate]:
    """Look elevations up on the IGN Geoportail altimetry service."""

    provider = "ign-geoportail"
    lon = [coordinate[0] for coordinate in coordinates]
    lat = [coordinate[1] for coordinate in coordinates]
    payload = {
        "lon": "|".join(str(value) for value in lon),
        "lat": "|".join(str(value) for value in lat),
        # Altitude only: no lon/lat echo in the answer.
        "zonly": "true",
        "resource": IGN_GEOPORTAIL_RESOURCE,
    }
    data = _post_json(provider, url, payload, session, timeout)
    elevations = data.get("elevations") if isinstance(data, dict) else None
    if not isinstance(elevations, list):
        raise ElevationDataError(
            f"{provider} answer has no elevations", provider=provider
        )
    _check_count(provider, len(coordinates), len(elevations))
    enriched: List[Coordinate] = []
    for index, value in enumerate(elevations):
        altitude = float(value["z"] if isinstance(value, dict) else value)
        if altitude == IGN_ERROR_DATA:
            raise ElevationDataError(
                WRONG_DATA_MESSAGE,
                provider=provider,
                detail=f"no data at lon={lon[index]} lat={lat[index]}",
            )
        enriched.append((lon[index], lat[index], altitude))
    return enriched


__all__ = [
    "IGN_ERROR_DATA",
    "clear_elevation",
    "restore_file_elevation",
    "fetch_open_elevation",
    "fetch_ign_geoportail",
]
