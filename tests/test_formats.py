import json

import pytest

from track_studio.errors import SourceFormatError
from track_studio.formats import gpx_to_geojson, load_journey_file, parse_source
from track_studio.geometry import MultiPathGeometry, PathGeometry, PointGeometry

from conftest import GPX_SAMPLE, make_line_feature, make_payload


def test_gpx_features_in_track_route_waypoint_order():
    title, collection = parse_source(GPX_SAMPLE, "gpx")

    assert title == "Lake loop"
    kinds = [type(feature.geometry) for feature in collection.features]
    assert kinds == [MultiPathGeometry, PathGeometry, PointGeometry]

    track = collection.features[0]
    assert track.name == "Loop"
    assert track.geometry.segment_lengths == [2, 3]
    assert track.has_time is True
    assert track.has_altitude is True
    assert track.geometry.segments[1][0].altitude == 1215.0

    route = collection.features[1]
    assert route.name == "Approach"
    assert route.has_time is False
    assert route.has_altitude is False

    waypoint = collection.features[2]
    assert waypoint.name == "Hut"
    assert waypoint.geometry.point.coordinate == (6.0, 45.0, 1200.0)


def test_gpx_times_are_iso_strings():
    _, payload = gpx_to_geojson(GPX_SAMPLE)
    times = payload["features"][0]["properties"]["coordinateProperties"]["times"]
    assert times[0] == ["2024-05-01T08:00:00Z", "2024-05-01T08:01:00Z"]
    json.dumps(payload)


def test_invalid_gpx():
    with pytest.raises(SourceFormatError):
        parse_source("<gpx><trk>", "gpx")


def test_geojson_content():
    content = json.dumps(make_payload(make_line_feature("Run")))
    title, collection = parse_source(content, ".GeoJSON")
    assert title is None
    assert len(collection) == 1


@pytest.mark.parametrize("kind", ["kml", "kmz", "fit"])
def test_unsupported_types(kind):
    with pytest.raises(SourceFormatError):
        parse_source("<kml/>", kind)


def test_bad_json_content():
    with pytest.raises(SourceFormatError):
        parse_source("{not json", "geojson")
    with pytest.raises(SourceFormatError):
        parse_source("[]", "json")
    with pytest.raises(SourceFormatError):
        parse_source(json.dumps({"type": "Topology"}), "json")


def test_load_journey_file(tmp_path, gpx_file):
    title, source_type, collection = load_journey_file(gpx_file)
    assert (title, source_type) == ("Lake loop", "gpx")
    assert len(collection) == 3

    path = tmp_path / "commute.geojson"
    path.write_text(json.dumps(make_payload(make_line_feature("Run"))), encoding="utf-8")
    title, source_type, _ = load_journey_file(path)
    assert (title, source_type) == ("commute", "geojson")


def test_load_missing_file(tmp_path):
    with pytest.raises(SourceFormatError):
        load_journey_file(tmp_path / "missing.gpx")
