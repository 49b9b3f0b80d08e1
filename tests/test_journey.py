"""Journey construction, flags, availability and persistence."""

import pytest

from track_studio.elevation import FILE_CONTENT, NONE
from track_studio.geometry import Feature, FeatureCollection, feature_collection_from_geojson
from track_studio.journey import Journey, tri_state
from track_studio.models import POI_FLAG_START, POI_FLAG_STOP, POI_STANDARD_TYPE
from track_studio.storage import JOURNEYS_STORE, ORIGIN_STORE

from conftest import make_collection, make_line_feature, make_waypoint


def _journey(payload, **options):
    return Journey.create(
        "Weekend", "geojson", feature_collection_from_geojson(payload), **options
    )


def test_tri_state():
    assert tri_state([True, True]) is True
    assert tri_state([False, False]) is False
    assert tri_state([True, False]) is None
    assert tri_state([]) is False


def test_tracks_and_pois_are_built(two_track_payload):
    journey = _journey(two_track_payload)

    assert len(journey.tracks) == 2
    kinds = sorted(poi.type for poi in journey.pois.values())
    assert kinds == sorted(
        [POI_FLAG_START, POI_FLAG_STOP] * 2 + [POI_STANDARD_TYPE]
    )
    standard = next(p for p in journey.pois.values() if p.type == POI_STANDARD_TYPE)
    assert standard.title == "Summit"
    assert standard.altitude == 120.0
    assert all(track.parent == journey.slug for track in journey.tracks.values())


def test_flags_visible_only_on_journey_limits(two_track_payload):
    journey = _journey(two_track_payload)
    first, second = journey.tracks.values()

    assert journey.pois[first.flags.start].visible is True
    assert journey.pois[first.flags.stop].visible is False
    assert journey.pois[second.flags.start].visible is False
    assert journey.pois[second.flags.stop].visible is True
    assert journey.pois[first.flags.start].latitude == 0.0


def test_flags_all_visible_when_limits_disabled(two_track_payload):
    journey = _journey(two_track_payload, pois_on_limits=False)
    flags = [p for p in journey.pois.values() if p.type != POI_STANDARD_TYPE]
    assert flags and all(poi.visible for poi in flags)


def test_availability_and_default_provider(two_track_payload):
    journey = _journey(two_track_payload)
    assert journey.has_elevation is True
    assert journey.has_time is True
    assert journey.elevation_provider == FILE_CONTENT


def test_mixed_availability_defaults_to_no_provider():
    journey = _journey(
        {
            "type": "FeatureCollection",
            "features": [
                make_line_feature("With", altitudes=[1.0, 2.0, 3.0, 4.0]),
                make_line_feature("Without", with_time=False),
            ],
        }
    )
    assert journey.has_elevation is None
    assert journey.has_time is None
    assert journey.elevation_provider == NONE


def test_single_track_journey_shares_track_summary():
    journey = Journey.create(
        "Solo", "gpx", make_collection(make_line_feature("Only", altitudes=[1, 2, 3, 4]))
    )
    assert journey.has_one_track()
    track = next(iter(journey.tracks.values()))
    assert journey.metrics is track.metrics.summary


def test_journey_metrics_sum_tracks(two_track_payload):
    journey = _journey(two_track_payload)
    distances = [t.metrics.summary.distance for t in journey.tracks.values()]
    assert journey.metrics.distance == pytest.approx(sum(distances))
    assert journey.metrics.min_altitude == 100.0
    assert journey.metrics.max_altitude == 200.0


def test_duplicate_track_names_get_distinct_slugs():
    journey = Journey.create(
        "Laps",
        "geojson",
        make_collection(make_line_feature("Lap"), make_line_feature("Lap", lon=1.0)),
    )
    slugs = list(journey.tracks)
    assert len(slugs) == 2
    assert slugs[0].startswith("track#")
    assert slugs[1] == f"{slugs[0]}#2"


def test_unsupported_geometry_is_rejected():
    journey = Journey("Broken", "geojson")
    with pytest.raises(TypeError):
        journey.load_collection(FeatureCollection([Feature(geometry=object())]))


def test_persist_and_read_back(two_track_payload, memory_store):
    journey = _journey(two_track_payload)
    first_slug = next(iter(journey.tracks))
    journey.tracks[first_slug].title = "Renamed"
    journey.persist(memory_store)

    loaded = Journey.read_from_store(memory_store, journey.slug)

    assert loaded is not None
    assert loaded.title == "Weekend"
    assert loaded.elevation_provider == FILE_CONTENT
    assert list(loaded.tracks) == list(journey.tracks)
    assert loaded.tracks[first_slug].title == "Renamed"
    assert loaded.metrics.distance == pytest.approx(journey.metrics.distance)
    assert [j.slug for j in Journey.read_all_from_store(memory_store)] == [journey.slug]


def test_read_origin_prefers_store(memory_store):
    journey = Journey.create(
        "Origin", "geojson", make_collection(make_waypoint("A", 1.0, 1.0, 5.0))
    )
    assert journey.read_origin(memory_store) is journey.origin

    memory_store.put(
        journey.slug,
        {"type": "FeatureCollection", "features": [make_waypoint("B", 2.0, 2.0, 7.0)]},
        ORIGIN_STORE,
    )
    stored = journey.read_origin(memory_store)
    assert stored.features[0].name == "B"


def test_remove_deletes_both_stores(two_track_payload, memory_store):
    journey = _journey(two_track_payload)
    journey.persist(memory_store)

    journey.remove(memory_store)

    assert memory_store.get(journey.slug, JOURNEYS_STORE) is None
    assert memory_store.get(journey.slug, ORIGIN_STORE) is None
    assert Journey.read_from_store(memory_store, journey.slug) is None


def test_first_persist_writes_origin_once(two_track_payload, memory_store):
    journey = _journey(two_track_payload)
    journey.persist(memory_store)

    stored = memory_store.get(journey.slug, ORIGIN_STORE)
    assert feature_collection_from_geojson(stored).features[0].name == "Morning"

    marker = {"type": "FeatureCollection", "features": [make_waypoint("Kept", 0.0, 0.0)]}
    memory_store.put(journey.slug, marker, ORIGIN_STORE)
    journey.persist(memory_store)
    assert memory_store.get(journey.slug, ORIGIN_STORE) == marker


def test_record_without_origin_has_empty_origin(two_track_payload):
    journey = _journey(two_track_payload)

    loaded = Journey.from_record(journey.to_record())

    assert len(loaded.origin) == 0
    assert len(loaded.collection) == len(journey.collection)
