"""Track geometry model and GeoJSON coordinate bookkeeping."""

from .models import (
    Coordinate,
    Feature,
    FeatureCollection,
    Geometry,
    MultiPathGeometry,
    PathGeometry,
    Point,
    PointGeometry,
    geometry_points,
    geometry_segments,
)
from .features import (
    clone_collection,
    feature_collection_from_geojson,
    feature_collection_to_geojson,
    flatten_coordinates,
    origin_coordinates,
    realign_coordinates,
)

__all__ = [
    "Coordinate",
    "Feature",
    "FeatureCollection",
    "Geometry",
    "MultiPathGeometry",
    "PathGeometry",
    "Point",
    "PointGeometry",
    "geometry_points",
    "geometry_segments",
    "clone_collection",
    "feature_collection_from_geojson",
    "feature_collection_to_geojson",
    "flatten_coordinates",
    "origin_coordinates",
    "realign_coordinates",
]
