"""Command line entry point.

Usage:
    python -m track_studio FILE [--elevation PROVIDER] [--store DIR]
    python -m track_studio --list-providers
"""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from typing import Any, Dict, List

from .elevation.registry import DEFAULT_REGISTRY
from .errors import ElevationProviderNotFoundError, SourceFormatError
from .formats import load_journey_file
from .geometry.models import geometry_points
from .journey import Journey
from .services import ElevationEnrichmentConfig, ElevationEnrichmentService
from .storage import JourneyStore, JsonFileStore, MemoryStore
from .utils import normalise_value

LOGGER = logging.getLogger(__name__)


def _setup_logging(verbose: bool = False) -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="track_studio",
        description="Import a GPX / GeoJSON journey, compute its metrics and enrich its elevation",
    )
    parser.add_argument("file", nargs="?", help="GPX or GeoJSON file to import")
    parser.add_argument(
        "--elevation",
        metavar="PROVIDER",
        help="Elevation provider to apply after import (see --list-providers)",
    )
    parser.add_argument(
        "--store",
        metavar="DIR",
        help="Persist the journey as JSON under DIR (in memory when omitted)",
    )
    parser.add_argument(
        "--list-providers",
        action="store_true",
        help="List elevation providers and exit",
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)
    if not args.file and not args.list_providers:
        parser.error("a FILE is required unless --list-providers is given")
    return args


def journey_summary(journey: Journey) -> Dict[str, Any]:
    """JSON-friendly overview of a journey and its metrics."""

    return {
        "slug": journey.slug,
        "title": journey.title,
        "source_type": journey.source_type,
        "elevation_provider": journey.elevation_provider,
        "has_elevation": journey.has_elevation,
        "has_time": journey.has_time,
        "metrics": asdict(journey.metrics),
        "tracks": [
            {
                "slug": track.slug,
                "title": track.title,
                "points": len(geometry_points(track.geometry)),
                "has_altitude": track.has_altitude,
                "has_time": track.has_time,
                "metrics": asdict(track.metrics.summary),
            }
            for track in journey.tracks.values()
        ],
        "pois": [
            {"id": poi.id, "type": poi.type, "title": poi.title, "visible": poi.visible}
            for poi in journey.pois.values()
        ],
    }


def _list_providers() -> None:
    for descriptor in DEFAULT_REGISTRY.pseudo_providers() + DEFAULT_REGISTRY.real_providers():
        print(f"{descriptor.id:<16} {descriptor.label}")


def main(argv: List[str] | None = None) -> int:
    args = parse_args(argv)
    _setup_logging(args.verbose)

    if args.list_providers:
        _list_providers()
        if not args.file:
            return 0

    try:
        title, source_type, collection = load_journey_file(args.file)
    except SourceFormatError as exc:
        LOGGER.error("Failed to load '%s': %s", args.file, exc)
        return 1

    store: JourneyStore = JsonFileStore(args.store) if args.store else MemoryStore()
    journey = Journey.create(title, source_type, collection)
    journey.persist(store)

    summary: Dict[str, Any]
    status = 0
    if args.elevation:
        service = ElevationEnrichmentService(ElevationEnrichmentConfig(store=store))
        try:
            outcome = service.change_provider(journey, args.elevation)
        except ElevationProviderNotFoundError:
            LOGGER.error(
                "Unknown elevation provider %r (known: %s)",
                args.elevation,
                ", ".join(DEFAULT_REGISTRY.ids()),
            )
            return 1
        journey = outcome.journey
        summary = journey_summary(journey)
        if not outcome.ok:
            summary["errors"] = [str(error) for error in outcome.errors]
            status = 1
    else:
        summary = journey_summary(journey)

    print(json.dumps(normalise_value(summary), indent=2))
    return status


__all__ = ["main", "parse_args", "journey_summary"]
