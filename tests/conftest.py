"""Global pytest fixtures & helpers.

Adds project root to path and provides GeoJSON / GPX builders shared by the
journey, metrics and elevation tests.
"""
from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta, timezone

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from track_studio.geometry import feature_collection_from_geojson
from track_studio.storage import MemoryStore
from track_studio.utils import format_iso

BASE_TIME = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)

# Distance between two points 0.001 degree apart on the same meridian.
STEP_METRES = 6_371_000.0 * 0.001 * 3.141592653589793 / 180.0


# --- Factory helpers -------------------------------------------------
def make_line_feature(
    name,
    count=4,
    *,
    lon=0.0,
    lat=0.0,
    altitudes=None,
    seconds=60,
    with_time=True,
):
    coordinates = []
    for index in range(count):
        coordinate = [lon, lat + index * 0.001]
        if altitudes is not None:
            coordinate.append(altitudes[index])
        coordinates.append(coordinate)
    properties = {"name": name}
    if with_time:
        properties["coordinateProperties"] = {
            "times": [
                format_iso(BASE_TIME + timedelta(seconds=seconds * index))
                for index in range(count)
            ]
        }
    return {
        "type": "Feature",
        "geometry": {"type": "LineString", "coordinates": coordinates},
        "properties": properties,
    }


def make_multiline_feature(name, segments):
    return {
        "type": "Feature",
        "geometry": {"type": "MultiLineString", "coordinates": segments},
        "properties": {"name": name},
    }


def make_waypoint(name, lon, lat, alt=None):
    coordinates = [lon, lat] if alt is None else [lon, lat, alt]
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": coordinates},
        "properties": {"name": name},
    }


def make_payload(*features):
    return {"type": "FeatureCollection", "features": list(features)}


def make_collection(*features):
    return feature_collection_from_geojson(make_payload(*features))


GPX_SAMPLE = """<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="tests" xmlns="http://www.topografix.com/GPX/1/1">
  <metadata><name>Lake loop</name></metadata>
  <wpt lat="45.0" lon="6.0"><ele>1200</ele><name>Hut</name></wpt>
  <rte>
    <name>Approach</name>
    <rtept lat="44.999" lon="6.0"></rtept>
    <rtept lat="45.0" lon="6.0"></rtept>
  </rte>
  <trk>
    <name>Loop</name>
    <trkseg>
      <trkpt lat="45.0" lon="6.0"><ele>1200</ele><time>2024-05-01T08:00:00Z</time></trkpt>
      <trkpt lat="45.001" lon="6.0"><ele>1210</ele><time>2024-05-01T08:01:00Z</time></trkpt>
    </trkseg>
    <trkseg>
      <trkpt lat="45.002" lon="6.0"><ele>1215</ele><time>2024-05-01T08:05:00Z</time></trkpt>
      <trkpt lat="45.003" lon="6.0"><ele>1205</ele><time>2024-05-01T08:06:00Z</time></trkpt>
      <trkpt lat="45.004" lon="6.0"><ele>1200</ele><time>2024-05-01T08:07:00Z</time></trkpt>
    </trkseg>
  </trk>
</gpx>
"""


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def two_track_payload():
    return make_payload(
        make_line_feature("Morning", altitudes=[100.0, 110.0, 110.0, 100.0]),
        make_line_feature("Evening", lon=0.01, altitudes=[200.0, 190.0, 190.0, 195.0]),
        make_waypoint("Summit", 0.005, 0.002, 120.0),
    )


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def gpx_file(tmp_path):
    path = tmp_path / "lake.gpx"
    path.write_text(GPX_SAMPLE, encoding="utf-8")
    return path
