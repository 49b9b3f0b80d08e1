from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from .geometry.models import Geometry
from .metrics import MetricsSettings, TrackMetrics, calculate_track_metrics

POI_STANDARD_TYPE = "standard"
POI_FLAG_START = "flag-start"
POI_FLAG_STOP = "flag-stop"


@dataclass
class POI:
    id: str
    parent: str
    type: str
    title: str
    longitude: float
    latitude: float
    altitude: Optional[float] = None
    time: Optional[datetime] = None
    description: str = ""
    visible: bool = True


@dataclass
class TrackFlags:
    start: Optional[str] = None
    stop: Optional[str] = None


@dataclass
class Track:
    slug: str
    title: str
    parent: str
    geometry: Geometry
    has_altitude: bool = False
    has_time: bool = False
    description: str = ""
    visible: bool = True
    flags: TrackFlags = field(default_factory=TrackFlags)
    metrics: TrackMetrics = field(default_factory=TrackMetrics)

    def extract_metrics(self, settings: MetricsSettings | None = None) -> TrackMetrics:
        """Recompute and store this track's metrics from its geometry."""

        self.metrics = calculate_track_metrics(
            self.geometry,
            has_altitude=self.has_altitude,
            has_time=self.has_time,
            settings=settings,
        )
        return self.metrics

    def context(self) -> Dict[str, Any]:
        """User-editable attributes kept across rebuilds."""

        return {
            "title": self.title,
            "description": self.description,
            "visible": self.visible,
        }
