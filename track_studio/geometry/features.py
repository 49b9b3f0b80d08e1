"""Conversion between GeoJSON payloads and the internal feature model.

Also hosts the coordinate bookkeeping used by elevation enrichment: a
collection is flattened into a single coordinate list for the providers, and
the provider answer is sliced back into the original per-feature shapes.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..utils import parse_iso_datetime
from .models import (
    FEATURE,
    FEATURE_COLLECTION,
    FEATURE_LINE_STRING,
    FEATURE_MULTILINE_STRING,
    FEATURE_POINT,
    Coordinate,
    Feature,
    FeatureCollection,
    Geometry,
    MultiPathGeometry,
    PathGeometry,
    Point,
    PointGeometry,
    geometry_points,
)

LOGGER = logging.getLogger(__name__)


def _times_for(values: Any, count: int) -> List[Any]:
    if not isinstance(values, (list, tuple)):
        return [None] * count
    parsed = [parse_iso_datetime(value) for value in values[:count]]
    return parsed + [None] * (count - len(parsed))


def _build_points(coordinates: Sequence[Sequence[Any]], times: Any) -> List[Point]:
    stamps = _times_for(times, len(coordinates))
    return [
        Point.from_coordinate(coordinate, stamp)
        for coordinate, stamp in zip(coordinates, stamps)
    ]


def geometry_from_geojson(
    geometry: Mapping[str, Any], properties: Mapping[str, Any]
) -> Optional[Geometry]:
    """Build a geometry from a GeoJSON geometry object.

    Returns None for geometry types the pipeline does not handle.
    """

    kind = geometry.get("type")
    coordinates = geometry.get("coordinates") or []
    times = (properties.get("coordinateProperties") or {}).get("times")

    if kind == FEATURE_POINT:
        stamp = parse_iso_datetime(properties.get("time"))
        return PointGeometry(Point.from_coordinate(coordinates, stamp))
    if kind == FEATURE_LINE_STRING:
        return PathGeometry(_build_points(coordinates, times))
    if kind == FEATURE_MULTILINE_STRING:
        segment_times = times if isinstance(times, (list, tuple)) else []
        segments = []
        for index, segment in enumerate(coordinates):
            seg_times = segment_times[index] if index < len(segment_times) else None
            segments.append(_build_points(segment, seg_times))
        return MultiPathGeometry(segments)
    return None


def feature_collection_from_geojson(payload: Mapping[str, Any]) -> FeatureCollection:
    """Convert a GeoJSON FeatureCollection (or a single Feature)."""

    kind = payload.get("type")
    if kind == FEATURE:
        raw_features: Sequence[Mapping[str, Any]] = [payload]
    elif kind == FEATURE_COLLECTION:
        raw_features = payload.get("features") or []
    else:
        raise ValueError(f"Expected a GeoJSON Feature or FeatureCollection, got {kind!r}")

    features: List[Feature] = []
    for raw in raw_features:
        properties = copy.deepcopy(dict(raw.get("properties") or {}))
        geometry = raw.get("geometry") or {}
        built = geometry_from_geojson(geometry, properties)
        if built is None:
            LOGGER.debug("Skipping unsupported geometry type %s", geometry.get("type"))
            continue
        features.append(Feature(geometry=built, properties=properties))
    return FeatureCollection(features)


def geometry_to_geojson(geometry: Geometry) -> Dict[str, Any]:
    if isinstance(geometry, PointGeometry):
        coordinates: Any = list(geometry.point.coordinate)
    elif isinstance(geometry, PathGeometry):
        coordinates = [list(point.coordinate) for point in geometry.points]
    elif isinstance(geometry, MultiPathGeometry):
        coordinates = [
            [list(point.coordinate) for point in segment]
            for segment in geometry.segments
        ]
    else:
        raise TypeError(f"Unsupported geometry: {type(geometry).__name__}")
    return {"type": geometry.kind, "coordinates": coordinates}


def feature_collection_to_geojson(collection: FeatureCollection) -> Dict[str, Any]:
    """Return a JSON-serialisable GeoJSON FeatureCollection."""

    return {
        "type": FEATURE_COLLECTION,
        "features": [
            {
                "type": FEATURE,
                "geometry": geometry_to_geojson(feature.geometry),
                "properties": copy.deepcopy(feature.properties),
            }
            for feature in collection.features
        ],
    }


def flatten_coordinates(collection: FeatureCollection) -> List[Coordinate]:
    """Return ``(lon, lat)`` for every point of every feature, in order."""

    return [
        (point.longitude, point.latitude)
        for feature in collection.features
        for point in geometry_points(feature.geometry)
    ]


def origin_coordinates(collection: FeatureCollection) -> List[Coordinate]:
    """Return the full coordinate tuples (altitude included when present)."""

    return [
        point.coordinate
        for feature in collection.features
        for point in geometry_points(feature.geometry)
    ]


def _realign_geometry(geometry: Geometry, chunk: Sequence[Coordinate]) -> Geometry:
    if isinstance(geometry, PointGeometry):
        return PointGeometry(geometry.point.with_coordinate(chunk[0]))
    if isinstance(geometry, PathGeometry):
        return PathGeometry(
            [point.with_coordinate(c) for point, c in zip(geometry.points, chunk)]
        )
    if isinstance(geometry, MultiPathGeometry):
        segments = []
        cursor = 0
        # Segment lengths never change with enrichment: re-split on them.
        for segment in geometry.segments:
            part = chunk[cursor : cursor + len(segment)]
            cursor += len(segment)
            segments.append(
                [point.with_coordinate(c) for point, c in zip(segment, part)]
            )
        return MultiPathGeometry(segments)
    raise TypeError(f"Unsupported geometry: {type(geometry).__name__}")


def realign_coordinates(
    collection: FeatureCollection, coordinates: Sequence[Coordinate]
) -> FeatureCollection:
    """Slice a flat coordinate list back into ``collection``'s shapes.

    Returns a new collection; ``collection`` itself is left untouched.
    """

    expected = sum(len(geometry_points(f.geometry)) for f in collection.features)
    if len(coordinates) != expected:
        raise ValueError(
            f"Cannot realign {len(coordinates)} coordinates onto {expected} points"
        )

    features: List[Feature] = []
    counter = 0
    for feature in collection.features:
        length = len(geometry_points(feature.geometry))
        chunk = coordinates[counter : counter + length]
        counter += length
        features.append(
            Feature(
                geometry=_realign_geometry(feature.geometry, chunk),
                properties=copy.deepcopy(feature.properties),
            )
        )
    return FeatureCollection(features)


def clone_collection(collection: FeatureCollection) -> FeatureCollection:
    """Deep copy of ``collection`` (geometries are immutable and shared)."""

    return FeatureCollection(
        [
            Feature(geometry=f.geometry, properties=copy.deepcopy(f.properties))
            for f in collection.features
        ]
    )
