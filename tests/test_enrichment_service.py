"""Provider changes: success rebuild, failure rollback and no-op selections."""

from __future__ import annotations

import logging

import pytest

from track_studio.elevation import (
    CLEAR,
    FILE_CONTENT,
    NONE,
    ElevationProviderDescriptor,
    ElevationServer,
    build_default_registry,
)
from track_studio.errors import ElevationProviderNotFoundError, ElevationServiceError
from track_studio.geometry import feature_collection_from_geojson, geometry_points
from track_studio.journey import Journey, load_journey
from track_studio.notifications import RecordingNotifier
from track_studio.services import (
    ElevationEnrichmentConfig,
    ElevationEnrichmentService,
    EnrichmentState as S,
)
from track_studio.storage import JOURNEYS_STORE, ORIGIN_STORE

from conftest import make_line_feature, make_payload


def _dem(chunk, origin):
    return [(lon, lat, 500.0) for lon, lat in chunk]


def _broken(chunk, origin):
    raise ElevationServiceError("service down", provider="broken")


def _short(chunk, origin):
    return [(lon, lat, 1.0) for lon, lat in chunk][:-1]


def _malformed(chunk, origin):
    return [(lon, lat, [1.0]) for lon, lat in chunk]


@pytest.fixture
def registry():
    registry = build_default_registry()
    registry.register(
        ElevationProviderDescriptor(id="fake-dem", label="Fake DEM", max_per_query=3),
        _dem,
    )
    registry.register(ElevationProviderDescriptor(id="broken", label="Broken"), _broken)
    registry.register(ElevationProviderDescriptor(id="short", label="Short"), _short)
    registry.register(
        ElevationProviderDescriptor(id="malformed", label="Malformed"), _malformed
    )
    return registry


@pytest.fixture
def journey(two_track_payload, memory_store):
    journey = Journey.create(
        "Weekend", "geojson", feature_collection_from_geojson(two_track_payload)
    )
    journey.persist(memory_store)
    return journey


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def service(registry, memory_store, notifier):
    return ElevationEnrichmentService(
        ElevationEnrichmentConfig(
            server=ElevationServer(registry, max_workers=2),
            store=memory_store,
            notifier=notifier,
        )
    )


def _altitudes(journey):
    return [
        point.altitude
        for track in journey.tracks.values()
        for point in geometry_points(track.geometry)
    ]


def test_success_rebuilds_and_persists(service, journey, memory_store, notifier):
    before = _altitudes(journey)

    outcome = service.change_provider(journey, "fake-dem")

    assert outcome.ok
    assert outcome.states == [S.FETCHING, S.SUCCESS, S.RECOMPUTE, S.PERSISTED, S.IDLE]
    updated = outcome.journey
    assert updated is not journey
    assert updated.slug == journey.slug
    assert updated.elevation_provider == "fake-dem"
    assert set(_altitudes(updated)) == {500.0}
    assert updated.metrics.max_altitude == 500.0
    # the standard POI follows the enriched geometry as well
    assert all(poi.altitude == 500.0 for poi in updated.pois.values())
    # the journey passed in is untouched apart from its selection
    assert _altitudes(journey) == before
    assert memory_store.get(journey.slug, JOURNEYS_STORE)["elevation_provider"] == "fake-dem"
    assert notifier.messages == [
        {
            "level": "success",
            "caption": "Elevation data have been modified",
            "text": "Source: Fake DEM",
        }
    ]
    assert service.state is S.IDLE


def test_failure_reverts_selection(
    service, journey, memory_store, notifier, caplog: pytest.LogCaptureFixture
):
    collection = journey.collection
    metrics = journey.metrics

    with caplog.at_level(logging.WARNING):
        outcome = service.change_provider(journey, "broken")

    assert not outcome.ok
    assert outcome.states == [S.FETCHING, S.FAILURE, S.REVERTED, S.IDLE]
    assert outcome.journey is journey
    assert journey.elevation_provider == FILE_CONTENT
    assert journey.collection is collection
    assert journey.metrics is metrics
    assert [str(e) for e in outcome.errors] == ["service down"]
    stored = memory_store.get(journey.slug, JOURNEYS_STORE)
    assert stored["elevation_provider"] == FILE_CONTENT
    message = notifier.messages[-1]
    assert message["level"] == "failure"
    assert message["caption"] == "An error occurred when calculating elevations"
    assert message["text"].startswith("Changes aborted!")
    assert "aborted" in caplog.text


def test_inconsistent_provider_answer_is_a_failure(service, journey):
    outcome = service.change_provider(journey, "short")
    assert not outcome.ok
    assert journey.elevation_provider == FILE_CONTENT


def test_clear_then_restore_from_file(service, journey):
    original = _altitudes(journey)

    cleared = service.change_provider(journey, CLEAR).journey
    assert cleared.has_elevation is False
    assert set(_altitudes(cleared)) == {None}

    restored = service.change_provider(cleared, FILE_CONTENT).journey
    assert restored.elevation_provider == FILE_CONTENT
    assert _altitudes(restored) == original
    assert restored.has_elevation is True


def test_none_and_same_provider_are_noops(service, journey, notifier):
    same = service.change_provider(journey, FILE_CONTENT)
    assert same.states == [S.IDLE]
    assert not same.fetched
    assert same.journey is journey

    none = service.change_provider(journey, NONE)
    assert none.states == [S.IDLE]
    assert journey.elevation_provider == NONE
    assert _altitudes(journey)[0] == 100.0
    assert notifier.messages == []


def test_track_edits_survive_enrichment(service, journey):
    slug = next(iter(journey.tracks))
    journey.tracks[slug].title = "Renamed"
    journey.tracks[slug].visible = False

    updated = service.change_provider(journey, "fake-dem").journey

    assert updated.tracks[slug].title == "Renamed"
    assert updated.tracks[slug].visible is False


def test_unknown_provider_leaves_journey_alone(service, journey):
    with pytest.raises(ElevationProviderNotFoundError):
        service.change_provider(journey, "srtm")
    assert journey.elevation_provider == FILE_CONTENT


@pytest.fixture
def climb(memory_store):
    payload = make_payload(make_line_feature("Climb", count=3, altitudes=[10, 15, 5]))
    journey = Journey.create("Climb", "geojson", feature_collection_from_geojson(payload))
    journey.persist(memory_store)
    return journey


def test_file_content_restores_after_reload(service, climb, memory_store):
    cleared = service.change_provider(climb, CLEAR).journey
    assert set(_altitudes(cleared)) == {None}

    reloaded = load_journey(memory_store, climb.slug)
    outcome = service.change_provider(reloaded, FILE_CONTENT)

    assert outcome.ok
    assert _altitudes(outcome.journey) == [10.0, 15.0, 5.0]
    assert outcome.journey.has_elevation is True


def test_file_content_without_stored_origin_fails(service, climb, memory_store):
    service.change_provider(climb, CLEAR)
    memory_store.delete(climb.slug, ORIGIN_STORE)

    reloaded = load_journey(memory_store, climb.slug)
    outcome = service.change_provider(reloaded, FILE_CONTENT)

    assert not outcome.ok
    assert outcome.states == [S.FETCHING, S.FAILURE, S.REVERTED, S.IDLE]
    assert reloaded.elevation_provider == CLEAR
    assert set(_altitudes(reloaded)) == {None}


def test_unexpected_error_reverts_selection(
    service, journey, notifier, caplog: pytest.LogCaptureFixture
):
    collection = journey.collection

    with caplog.at_level(logging.ERROR):
        outcome = service.change_provider(journey, "malformed")

    assert not outcome.ok
    assert outcome.states == [S.FETCHING, S.FAILURE, S.REVERTED, S.IDLE]
    assert isinstance(outcome.errors[0], TypeError)
    assert journey.elevation_provider == FILE_CONTENT
    assert journey.collection is collection
    assert notifier.messages[-1]["level"] == "failure"
    assert service.state is S.IDLE
    assert "Unexpected error applying malformed" in caplog.text
