"""Track and journey metrics.

Pure computation: a track geometry is walked segment by segment to produce
per-point metrics, which are then reduced into an :class:`AggregateMetric`.
Journeys combine their tracks' aggregates without re-walking points.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from . import mobility
from .config import METRICS_MIN_SLOPE, METRICS_STOP_DURATION, METRICS_STOP_SPEED_LIMIT
from .geometry.models import Geometry, Point, geometry_points, geometry_segments


@dataclass(frozen=True, slots=True)
class MetricsSettings:
    """Thresholds used while classifying steps."""

    min_slope: float = METRICS_MIN_SLOPE
    stop_speed_limit: float = METRICS_STOP_SPEED_LIMIT
    stop_duration: float = METRICS_STOP_DURATION


@dataclass(slots=True)
class PointMetric:
    """Metrics of the step ending at ``point`` (from the previous point)."""

    point: Point
    distance: float
    elevation: Optional[float] = None
    slope: Optional[float] = None
    duration: Optional[float] = None
    speed: Optional[float] = None
    pace: Optional[float] = None
    idle: Optional[bool] = None


@dataclass(slots=True)
class ElevationBucket:
    """Sums for the steps sharing one slope class (climb, descent, flat).

    ``speed`` and ``pace`` hold sums while accumulating and per-step averages
    once :meth:`finalise` has run.
    """

    elevation: float = 0.0
    distance: float = 0.0
    duration: float = 0.0
    speed: float = 0.0
    pace: float = 0.0
    points: int = 0

    def add(self, metric: PointMetric) -> None:
        self.elevation += metric.elevation or 0.0
        self.distance += metric.distance
        self.duration += metric.duration or 0.0
        self.speed += metric.speed or 0.0
        self.pace += metric.pace or 0.0
        self.points += 1

    def finalise(self) -> None:
        if self.points:
            self.speed /= self.points
            self.pace /= self.points


@dataclass(slots=True)
class AggregateMetric:
    """Summary statistics for a track or a journey."""

    distance: float = 0.0
    min_altitude: Optional[float] = None
    max_altitude: Optional[float] = None
    duration: Optional[float] = None
    idle_time: Optional[float] = None
    max_speed: Optional[float] = None
    min_speed: Optional[float] = None
    average_speed: Optional[float] = None
    average_pace: Optional[float] = None
    max_pace: Optional[float] = None
    min_pace: Optional[float] = None
    max_slope: Optional[float] = None
    positive: Optional[ElevationBucket] = None
    negative: Optional[ElevationBucket] = None
    flat: Optional[ElevationBucket] = None


@dataclass(slots=True)
class TrackMetrics:
    points: List[PointMetric] = field(default_factory=list)
    summary: AggregateMetric = field(default_factory=AggregateMetric)


def _max(values: Iterable[Optional[float]]) -> Optional[float]:
    present = [value for value in values if value is not None]
    return max(present) if present else None


def _min(values: Iterable[Optional[float]]) -> Optional[float]:
    present = [value for value in values if value is not None]
    return min(present) if present else None


def _mean(values: Sequence[float]) -> Optional[float]:
    return sum(values) / len(values) if values else None


def point_metric(
    prev: Point,
    current: Point,
    *,
    has_altitude: bool,
    has_time: bool,
    settings: MetricsSettings,
) -> PointMetric:
    """Compute the metrics of the step ``prev -> current``."""

    metric = PointMetric(point=current, distance=mobility.distance(prev, current))
    if has_time:
        metric.duration = mobility.duration(prev, current)
        metric.speed = mobility.speed(metric.distance, metric.duration)
        metric.pace = mobility.pace(metric.distance, metric.duration)
        metric.idle = (
            metric.speed > settings.stop_speed_limit
            or metric.duration > settings.stop_duration
        )
    if has_altitude:
        metric.elevation = mobility.elevation_delta(prev, current)
        metric.slope = (
            metric.elevation / metric.distance * 100.0 if metric.distance else 0.0
        )
    return metric


def segment_point_metrics(
    geometry: Geometry,
    *,
    has_altitude: bool,
    has_time: bool,
    settings: MetricsSettings,
) -> List[PointMetric]:
    """Per-step metrics for every segment, concatenated.

    Each segment contributes ``len(segment) - 1`` entries: steps never cross a
    segment boundary.
    """

    metrics: List[PointMetric] = []
    for segment in geometry_segments(geometry):
        for prev, current in zip(segment, segment[1:]):
            metrics.append(
                point_metric(
                    prev,
                    current,
                    has_altitude=has_altitude,
                    has_time=has_time,
                    settings=settings,
                )
            )
    return metrics


def aggregate_point_metrics(
    metrics: Sequence[PointMetric],
    *,
    has_altitude: bool,
    has_time: bool,
    settings: MetricsSettings | None = None,
    altitudes: Optional[Iterable[Optional[float]]] = None,
) -> AggregateMetric:
    """Reduce per-step metrics into an aggregate.

    ``altitudes`` defaults to the altitude of each step's end point; callers
    holding the full geometry pass every point's altitude instead.
    """

    settings = settings or MetricsSettings()
    summary = AggregateMetric()

    if has_altitude:
        if altitudes is None:
            altitudes = [metric.point.altitude for metric in metrics]
        altitude_values = list(altitudes)
        summary.min_altitude = _min(altitude_values)
        summary.max_altitude = _max(altitude_values)

    if has_time:
        moving = [metric for metric in metrics if metric.speed]
        if moving:
            speeds = [metric.speed or 0.0 for metric in moving]
            paces = [metric.pace or 0.0 for metric in moving]
            summary.max_speed = max(speeds)
            summary.min_speed = min(speeds)
            summary.average_speed = _mean(speeds)
            summary.average_pace = _mean(paces)
            summary.min_pace = min(paces)
        summary.max_pace = _max(metric.pace for metric in metrics)
        summary.duration = sum(metric.duration or 0.0 for metric in metrics)
        summary.idle_time = sum(
            metric.duration or 0.0 for metric in metrics if metric.idle
        )

    if has_altitude:
        summary.max_slope = _max(metric.slope for metric in metrics)
        positive, negative, flat = ElevationBucket(), ElevationBucket(), ElevationBucket()
        for metric in metrics:
            slope = metric.slope or 0.0
            if slope > settings.min_slope:
                positive.add(metric)
            elif slope < -settings.min_slope:
                negative.add(metric)
            else:
                flat.add(metric)
        for bucket in (positive, negative, flat):
            bucket.finalise()
        summary.positive, summary.negative, summary.flat = positive, negative, flat

    summary.distance = sum(metric.distance for metric in metrics)
    return summary


def calculate_track_metrics(
    geometry: Geometry,
    *,
    has_altitude: bool,
    has_time: bool,
    settings: MetricsSettings | None = None,
) -> TrackMetrics:
    """Compute per-point and aggregate metrics for one track geometry."""

    settings = settings or MetricsSettings()
    points = segment_point_metrics(
        geometry, has_altitude=has_altitude, has_time=has_time, settings=settings
    )
    altitudes = [point.altitude for point in geometry_points(geometry)]
    summary = aggregate_point_metrics(
        points,
        has_altitude=has_altitude,
        has_time=has_time,
        settings=settings,
        altitudes=altitudes,
    )
    return TrackMetrics(points=points, summary=summary)


def _merge_buckets(buckets: Sequence[ElevationBucket]) -> ElevationBucket:
    merged = ElevationBucket()
    for bucket in buckets:
        merged.elevation += bucket.elevation
        merged.distance += bucket.distance
        merged.duration += bucket.duration
        # Buckets hold averages: weight them back by their point count.
        merged.speed += bucket.speed * bucket.points
        merged.pace += bucket.pace * bucket.points
        merged.points += bucket.points
    merged.finalise()
    return merged


def _sum_optional(values: Iterable[Optional[float]]) -> Optional[float]:
    present = [value for value in values if value is not None]
    return sum(present) if present else None


def aggregate_journey_metrics(summaries: Sequence[AggregateMetric]) -> AggregateMetric:
    """Combine track aggregates into a journey aggregate.

    A single track's aggregate is returned as-is (same object).
    """

    if len(summaries) == 1:
        return summaries[0]

    journey = AggregateMetric()
    journey.distance = sum(summary.distance for summary in summaries)
    journey.min_altitude = _min(summary.min_altitude for summary in summaries)
    journey.max_altitude = _max(summary.max_altitude for summary in summaries)

    journey.duration = _sum_optional(summary.duration for summary in summaries)
    journey.idle_time = _sum_optional(summary.idle_time for summary in summaries)
    journey.max_speed = _max(s.max_speed for s in summaries if s.max_speed)
    journey.min_speed = _min(s.min_speed for s in summaries if s.min_speed)
    journey.average_speed = _mean(
        [s.average_speed for s in summaries if s.average_speed]
    )
    journey.average_pace = _mean([s.average_pace for s in summaries if s.average_pace])
    journey.max_pace = _max(summary.max_pace for summary in summaries)
    journey.min_pace = _min(s.min_pace for s in summaries if s.min_pace)

    journey.max_slope = _max(summary.max_slope for summary in summaries)
    for name in ("positive", "negative", "flat"):
        buckets = [
            getattr(summary, name)
            for summary in summaries
            if getattr(summary, name) is not None
        ]
        if buckets:
            setattr(journey, name, _merge_buckets(buckets))
    return journey


__all__ = [
    "AggregateMetric",
    "ElevationBucket",
    "MetricsSettings",
    "PointMetric",
    "TrackMetrics",
    "aggregate_journey_metrics",
    "aggregate_point_metrics",
    "calculate_track_metrics",
    "point_metric",
    "segment_point_metrics",
]
