"""Dataclasses describing track geometry: points, paths and features."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, ClassVar, Dict, List, Optional, Sequence, Tuple, Union


Coordinate = Tuple[float, ...]

FEATURE_COLLECTION = "FeatureCollection"
FEATURE = "Feature"
FEATURE_POINT = "Point"
FEATURE_LINE_STRING = "LineString"
FEATURE_MULTILINE_STRING = "MultiLineString"


@dataclass(frozen=True, slots=True)
class Point:
    """A single recorded position, altitude and time being optional."""

    longitude: float
    latitude: float
    altitude: Optional[float] = None
    timestamp: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude out of range: {self.longitude}")
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude out of range: {self.latitude}")

    @property
    def has_altitude(self) -> bool:
        return self.altitude is not None

    @property
    def coordinate(self) -> Coordinate:
        """GeoJSON ordered tuple: ``(lon, lat)`` or ``(lon, lat, alt)``."""

        if self.altitude is None:
            return (self.longitude, self.latitude)
        return (self.longitude, self.latitude, self.altitude)

    @classmethod
    def from_coordinate(
        cls, coordinate: Sequence[Any], timestamp: Optional[datetime] = None
    ) -> "Point":
        if len(coordinate) < 2:
            raise ValueError(f"Expected at least lon/lat, got {coordinate!r}")
        altitude = coordinate[2] if len(coordinate) > 2 else None
        return cls(
            longitude=float(coordinate[0]),
            latitude=float(coordinate[1]),
            altitude=float(altitude) if altitude is not None else None,
            timestamp=timestamp,
        )

    def with_coordinate(self, coordinate: Sequence[Any]) -> "Point":
        """Return a copy placed at ``coordinate``; the timestamp is kept."""

        moved = Point.from_coordinate(coordinate)
        return replace(
            self,
            longitude=moved.longitude,
            latitude=moved.latitude,
            altitude=moved.altitude,
        )


@dataclass(frozen=True, slots=True)
class PointGeometry:
    """A lone position (waypoint)."""

    kind: ClassVar[str] = FEATURE_POINT

    point: Point


@dataclass(frozen=True, slots=True)
class PathGeometry:
    """A single ordered run of points."""

    kind: ClassVar[str] = FEATURE_LINE_STRING

    points: Tuple[Point, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))
        if not self.points:
            raise ValueError("A path needs at least one point")


@dataclass(frozen=True, slots=True)
class MultiPathGeometry:
    """Several ordered segments recorded as one track."""

    kind: ClassVar[str] = FEATURE_MULTILINE_STRING

    segments: Tuple[Tuple[Point, ...], ...]

    def __post_init__(self) -> None:
        segments = tuple(tuple(segment) for segment in self.segments)
        if not segments or any(not segment for segment in segments):
            raise ValueError("Every segment needs at least one point")
        object.__setattr__(self, "segments", segments)

    @property
    def segment_lengths(self) -> List[int]:
        return [len(segment) for segment in self.segments]


Geometry = Union[PointGeometry, PathGeometry, MultiPathGeometry]


def geometry_segments(geometry: Geometry) -> List[Tuple[Point, ...]]:
    """Return the geometry as a list of segments.

    A path becomes a one-segment list. A lone point has no segment and yields
    an empty list so it never contributes metrics.
    """

    if isinstance(geometry, MultiPathGeometry):
        return list(geometry.segments)
    if isinstance(geometry, PathGeometry):
        return [geometry.points]
    if isinstance(geometry, PointGeometry):
        return []
    raise TypeError(f"Unsupported geometry: {type(geometry).__name__}")


def geometry_points(geometry: Geometry) -> List[Point]:
    """Return every point of the geometry in order."""

    if isinstance(geometry, PointGeometry):
        return [geometry.point]
    if isinstance(geometry, PathGeometry):
        return list(geometry.points)
    if isinstance(geometry, MultiPathGeometry):
        return [point for segment in geometry.segments for point in segment]
    raise TypeError(f"Unsupported geometry: {type(geometry).__name__}")


@dataclass(slots=True)
class Feature:
    """One GeoJSON-like feature: a geometry plus free-form properties."""

    geometry: Geometry
    properties: Dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return str(self.properties.get("name") or "")

    @property
    def description(self) -> str:
        return str(self.properties.get("desc") or self.properties.get("description") or "")

    @property
    def has_time(self) -> bool:
        coordinate_properties = self.properties.get("coordinateProperties") or {}
        return coordinate_properties.get("times") is not None

    @property
    def has_altitude(self) -> bool:
        """True when every point carries a third coordinate component."""

        points = geometry_points(self.geometry)
        return bool(points) and all(point.has_altitude for point in points)


@dataclass(slots=True)
class FeatureCollection:
    """Ordered list of features parsed from a single source file."""

    features: List[Feature] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.features)

    def __iter__(self):
        return iter(self.features)
