"""Journey: the tracks and POIs parsed from one source file.

A journey is built from a feature collection. Path features become tracks
(with start / stop flag POIs) and point features become standard POIs. The
collection originally parsed is kept apart so elevation can be restored from
it later.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from .config import POIS_ON_LIMITS
from .elevation.registry import FILE_CONTENT, NONE
from .geometry.features import (
    clone_collection,
    feature_collection_from_geojson,
    feature_collection_to_geojson,
)
from .geometry.models import (
    Feature,
    FeatureCollection,
    MultiPathGeometry,
    PathGeometry,
    Point,
    PointGeometry,
    geometry_segments,
)
from .metrics import AggregateMetric, MetricsSettings, aggregate_journey_metrics
from .models import POI, POI_FLAG_START, POI_FLAG_STOP, POI_STANDARD_TYPE, Track
from .storage import JOURNEYS_STORE, ORIGIN_STORE, JourneyStore
from .utils import set_slug

TRACK_SLUG = "track"
POI_SLUG = "poi"


def tri_state(flags: List[bool]) -> Optional[bool]:
    """True if every flag is set, False if none is, None when mixed."""

    if flags and all(flags):
        return True
    if any(flags):
        return None
    return False


class Journey:
    def __init__(
        self,
        title: str,
        source_type: str,
        *,
        slug: str | None = None,
        description: str = "",
        visible: bool = True,
        pois_on_limits: bool = POIS_ON_LIMITS,
        settings: MetricsSettings | None = None,
    ) -> None:
        self.title = title
        self.source_type = source_type
        self.slug = slug or set_slug([title, source_type])
        self.description = description
        self.visible = visible
        self.pois_on_limits = pois_on_limits
        self.settings = settings or MetricsSettings()

        self.tracks: Dict[str, Track] = {}
        self.pois: Dict[str, POI] = {}
        self.has_elevation: Optional[bool] = False
        self.has_time: Optional[bool] = False
        self.elevation_provider: str = NONE
        self.metrics: AggregateMetric = AggregateMetric()
        self.collection = FeatureCollection()
        self.origin = FeatureCollection()
        self._log = logging.getLogger(self.__class__.__name__)

    @classmethod
    def create(
        cls,
        title: str,
        source_type: str,
        collection: FeatureCollection,
        **options: Any,
    ) -> "Journey":
        """Build a journey from freshly parsed content."""

        journey = cls(title, source_type, **options)
        journey.origin = clone_collection(collection)
        journey.load_collection(collection)
        journey.global_settings()
        journey._log.info(
            "Journey %s built: %d track(s), %d POI(s), elevation=%s time=%s",
            journey.slug,
            len(journey.tracks),
            len(journey.pois),
            journey.has_elevation,
            journey.has_time,
        )
        return journey

    def load_collection(
        self,
        collection: FeatureCollection,
        context: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> None:
        """(Re)build tracks, POIs and metrics from ``collection``.

        ``context`` maps track slugs to user-edited attributes (title,
        description, visibility) that survive the rebuild.
        """

        self.collection = collection
        self.tracks = {}
        self.pois = {}
        for feature in collection.features:
            if isinstance(feature.geometry, (PathGeometry, MultiPathGeometry)):
                track = self._track_from_feature(feature, context or {})
                self.tracks[track.slug] = track
                self._add_flags(track, feature)
            elif isinstance(feature.geometry, PointGeometry):
                self._add_standard_poi(feature, feature.geometry.point)
            else:
                raise TypeError(
                    f"Unsupported geometry: {type(feature.geometry).__name__}"
                )
        if self.pois_on_limits:
            self._show_flags_on_limits()
        self.update_availability()
        self.extract_metrics()

    def _track_slug(self, feature: Feature) -> str:
        slug = set_slug([self.slug, feature.name or self.title], prefix=TRACK_SLUG)
        candidate, counter = slug, 1
        while candidate in self.tracks:
            counter += 1
            candidate = f"{slug}#{counter}"
        return candidate

    def _track_from_feature(
        self, feature: Feature, context: Mapping[str, Mapping[str, Any]]
    ) -> Track:
        slug = self._track_slug(feature)
        kept = context.get(slug, {})
        return Track(
            slug=slug,
            title=kept.get("title") or feature.name or self.title,
            parent=self.slug,
            geometry=feature.geometry,
            has_altitude=feature.has_altitude,
            has_time=feature.has_time,
            description=kept.get("description", feature.description),
            visible=kept.get("visible", True),
        )

    def _add_flags(self, track: Track, feature: Feature) -> None:
        segments = geometry_segments(track.geometry)
        start, stop = segments[0][0], segments[-1][-1]
        for kind, point, title, text in (
            (POI_FLAG_START, start, "Start", "Track start"),
            (POI_FLAG_STOP, stop, "End", "Track end"),
        ):
            poi = POI(
                id=f"{track.slug}#{kind}",
                parent=track.slug,
                type=kind,
                title=title,
                description=text,
                longitude=point.longitude,
                latitude=point.latitude,
                altitude=point.altitude,
                time=point.timestamp if track.has_time else None,
            )
            self.pois[poi.id] = poi
        track.flags.start = f"{track.slug}#{POI_FLAG_START}"
        track.flags.stop = f"{track.slug}#{POI_FLAG_STOP}"

    def _add_standard_poi(self, feature: Feature, point: Point) -> None:
        poi_id = set_slug([self.slug, feature.name or str(len(self.pois))], prefix=POI_SLUG)
        while poi_id in self.pois:
            poi_id = f"{poi_id}#{len(self.pois)}"
        self.pois[poi_id] = POI(
            id=poi_id,
            parent=self.slug,
            type=POI_STANDARD_TYPE,
            title=feature.name,
            description=feature.description,
            longitude=point.longitude,
            latitude=point.latitude,
            altitude=point.altitude,
            time=point.timestamp,
        )

    def _show_flags_on_limits(self) -> None:
        tracks = list(self.tracks.values())
        for index, track in enumerate(tracks):
            if track.flags.start in self.pois:
                self.pois[track.flags.start].visible = index == 0
            if track.flags.stop in self.pois:
                self.pois[track.flags.stop].visible = index == len(tracks) - 1

    def update_availability(self) -> None:
        """Recompute the elevation / time tri-states from the tracks."""

        tracks = list(self.tracks.values())
        self.has_time = tri_state([track.has_time for track in tracks])
        self.has_elevation = tri_state([track.has_altitude for track in tracks])

    def global_settings(self) -> None:
        """Availability tri-states plus the default elevation provider."""

        self.update_availability()
        self.elevation_provider = FILE_CONTENT if self.has_elevation else NONE

    def extract_metrics(self) -> AggregateMetric:
        summaries = [
            track.extract_metrics(self.settings).summary
            for track in self.tracks.values()
        ]
        self.metrics = aggregate_journey_metrics(summaries)
        return self.metrics

    def has_one_track(self) -> bool:
        return len(self.tracks) == 1

    def track_context(self) -> Dict[str, Dict[str, Any]]:
        return {slug: track.context() for slug, track in self.tracks.items()}

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def to_record(self) -> Dict[str, Any]:
        """JSON-friendly record stored in the journeys store."""

        return {
            "slug": self.slug,
            "title": self.title,
            "source_type": self.source_type,
            "description": self.description,
            "visible": self.visible,
            "pois_on_limits": self.pois_on_limits,
            "elevation_provider": self.elevation_provider,
            "tracks": self.track_context(),
            "collection": feature_collection_to_geojson(self.collection),
        }

    @classmethod
    def from_record(
        cls,
        record: Mapping[str, Any],
        origin: FeatureCollection | None = None,
        settings: MetricsSettings | None = None,
    ) -> "Journey":
        journey = cls(
            record["title"],
            record["source_type"],
            slug=record["slug"],
            description=record.get("description", ""),
            visible=record.get("visible", True),
            pois_on_limits=record.get("pois_on_limits", POIS_ON_LIMITS),
            settings=settings,
        )
        collection = feature_collection_from_geojson(record["collection"])
        journey.origin = origin if origin is not None else FeatureCollection()
        journey.load_collection(collection, record.get("tracks") or {})
        journey.elevation_provider = record.get("elevation_provider", NONE)
        return journey

    def persist(self, store: JourneyStore) -> None:
        """Write the record, and the origin on first write only."""

        if self.origin.features and store.get(self.slug, ORIGIN_STORE) is None:
            self.save_origin(store)
        store.put(self.slug, self.to_record(), JOURNEYS_STORE)
        self._log.debug("Journey %s persisted", self.slug)

    def save_origin(self, store: JourneyStore) -> None:
        store.put(self.slug, feature_collection_to_geojson(self.origin), ORIGIN_STORE)

    def read_origin(self, store: JourneyStore | None) -> FeatureCollection:
        """Originally parsed content, from the store when it has it."""

        if store is not None:
            payload = store.get(self.slug, ORIGIN_STORE)
            if payload:
                return feature_collection_from_geojson(payload)
        return self.origin

    def remove(self, store: JourneyStore) -> None:
        store.delete(self.slug, ORIGIN_STORE)
        store.delete(self.slug, JOURNEYS_STORE)
        self._log.info("Journey %s removed", self.slug)

    @classmethod
    def read_from_store(
        cls, store: JourneyStore, slug: str, settings: MetricsSettings | None = None
    ) -> Optional["Journey"]:
        record = store.get(slug, JOURNEYS_STORE)
        if record is None:
            return None
        origin_payload = store.get(slug, ORIGIN_STORE)
        origin = (
            feature_collection_from_geojson(origin_payload) if origin_payload else None
        )
        return cls.from_record(record, origin=origin, settings=settings)

    @classmethod
    def read_all_from_store(
        cls, store: JourneyStore, settings: MetricsSettings | None = None
    ) -> List["Journey"]:
        journeys = []
        for slug in store.keys(JOURNEYS_STORE):
            journey = cls.read_from_store(store, slug, settings)
            if journey is not None:
                journeys.append(journey)
        return journeys


def load_journey(
    store: JourneyStore, slug: str, settings: MetricsSettings | None = None
) -> Optional[Journey]:
    """Rebuild the journey persisted under ``slug``, or None."""

    return Journey.read_from_store(store, slug, settings)


__all__ = ["Journey", "load_journey", "tri_state"]
