"""Source file readers.

GPX files are parsed with gpxpy and converted to GeoJSON-shaped payloads;
GeoJSON files are read as they are. Both end up as a FeatureCollection.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple

import gpxpy
import gpxpy.gpx

from .errors import SourceFormatError
from .geometry.features import feature_collection_from_geojson
from .geometry.models import (
    FEATURE,
    FEATURE_COLLECTION,
    FEATURE_LINE_STRING,
    FEATURE_MULTILINE_STRING,
    FEATURE_POINT,
    FeatureCollection,
)
from .utils import format_iso

LOGGER = logging.getLogger(__name__)

GPX = "gpx"
GEOJSON = "geojson"
JSON = "json"
SUPPORTED_TYPES = (GPX, GEOJSON, JSON)
UNSUPPORTED_TYPES = ("kml", "kmz")


def _coordinate(point: Any) -> List[float]:
    if point.elevation is None:
        return [point.longitude, point.latitude]
    return [point.longitude, point.latitude, point.elevation]


def _times(points: List[Any]) -> List[str] | None:
    if points and all(point.time is not None for point in points):
        return [format_iso(point.time) for point in points]
    return None


def _properties(name: str | None, description: str | None) -> Dict[str, Any]:
    properties: Dict[str, Any] = {}
    if name:
        properties["name"] = name
    if description:
        properties["desc"] = description
    return properties


def _track_feature(track: gpxpy.gpx.GPXTrack) -> Dict[str, Any] | None:
    segments = [segment.points for segment in track.segments if segment.points]
    if not segments:
        return None
    properties = _properties(track.name, track.description)
    if len(segments) == 1:
        geometry = {
            "type": FEATURE_LINE_STRING,
            "coordinates": [_coordinate(p) for p in segments[0]],
        }
        times: Any = _times(segments[0])
    else:
        geometry = {
            "type": FEATURE_MULTILINE_STRING,
            "coordinates": [[_coordinate(p) for p in seg] for seg in segments],
        }
        per_segment = [_times(seg) for seg in segments]
        times = per_segment if all(t is not None for t in per_segment) else None
    if times is not None:
        properties["coordinateProperties"] = {"times": times}
    return {"type": FEATURE, "geometry": geometry, "properties": properties}


def _route_feature(route: gpxpy.gpx.GPXRoute) -> Dict[str, Any] | None:
    if not route.points:
        return None
    properties = _properties(route.name, route.description)
    times = _times(route.points)
    if times is not None:
        properties["coordinateProperties"] = {"times": times}
    return {
        "type": FEATURE,
        "geometry": {
            "type": FEATURE_LINE_STRING,
            "coordinates": [_coordinate(p) for p in route.points],
        },
        "properties": properties,
    }


def _waypoint_feature(waypoint: gpxpy.gpx.GPXWaypoint) -> Dict[str, Any]:
    properties = _properties(waypoint.name, waypoint.description)
    if waypoint.time is not None:
        properties["time"] = format_iso(waypoint.time)
    return {
        "type": FEATURE,
        "geometry": {"type": FEATURE_POINT, "coordinates": _coordinate(waypoint)},
        "properties": properties,
    }


def gpx_to_geojson(content: str) -> Tuple[str | None, Dict[str, Any]]:
    """Return the GPX document name and its GeoJSON FeatureCollection."""

    try:
        gpx = gpxpy.parse(content)
    except gpxpy.gpx.GPXException as exc:
        raise SourceFormatError(f"Invalid GPX content: {exc}") from exc

    features: List[Dict[str, Any]] = []
    for track in gpx.tracks:
        feature = _track_feature(track)
        if feature is not None:
            features.append(feature)
    for route in gpx.routes:
        feature = _route_feature(route)
        if feature is not None:
            features.append(feature)
    features.extend(_waypoint_feature(w) for w in gpx.waypoints)
    return gpx.name, {"type": FEATURE_COLLECTION, "features": features}


def parse_source(content: str, source_type: str) -> Tuple[str | None, FeatureCollection]:
    """Parse file ``content`` of ``source_type`` into a FeatureCollection.

    Returns the title found in the content (if any) and the collection.
    """

    kind = source_type.lower().lstrip(".")
    if kind in UNSUPPORTED_TYPES:
        raise SourceFormatError(f"{kind.upper()} files are not supported")
    if kind == GPX:
        title, payload = gpx_to_geojson(content)
    elif kind in (GEOJSON, JSON):
        try:
            payload = json.loads(content)
        except json.JSONDecodeError as exc:
            raise SourceFormatError(f"Invalid JSON content: {exc}") from exc
        if not isinstance(payload, dict):
            raise SourceFormatError("GeoJSON content must be an object")
        title = payload.get("name") or (payload.get("properties") or {}).get("name")
    else:
        raise SourceFormatError(f"Unsupported source type: {source_type!r}")

    try:
        collection = feature_collection_from_geojson(payload)
    except (TypeError, ValueError) as exc:
        raise SourceFormatError(f"Invalid {kind} content: {exc}") from exc
    LOGGER.debug("Parsed %d feature(s) from %s content", len(collection), kind)
    return title, collection


def load_journey_file(path: str | Path) -> Tuple[str, str, FeatureCollection]:
    """Read ``path`` and return ``(title, source_type, collection)``."""

    source = Path(path)
    source_type = source.suffix.lower().lstrip(".")
    try:
        content = source.read_text(encoding="utf-8")
    except OSError as exc:
        raise SourceFormatError(f"Cannot read {source}: {exc}") from exc
    title, collection = parse_source(content, source_type)
    return title or source.stem, source_type, collection


__all__ = [
    "SUPPORTED_TYPES",
    "gpx_to_geojson",
    "load_journey_file",
    "parse_source",
]
