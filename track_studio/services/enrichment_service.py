"""Elevation enrichment service.

Drives one provider change for a journey:

    IDLE -> FETCHING -> SUCCESS -> RECOMPUTE -> PERSISTED -> IDLE
                     -> FAILURE -> REVERTED -> IDLE

The journey's current provider is read once before any request is sent. On
failure it is restored and the journey geometry is left untouched. On
success a new journey is rebuilt from the enriched geometry, its metrics
recomputed and the result persisted; the caller swaps it in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List

from ..elevation.registry import NONE
from ..elevation.server import ElevationServer
from ..errors import (
    ElevationDataError,
    ElevationEnrichmentError,
    ElevationServiceError,
)
from ..geometry.features import (
    flatten_coordinates,
    origin_coordinates,
    realign_coordinates,
)
from ..geometry.models import FeatureCollection
from ..journey import Journey
from ..notifications import LoggingNotifier, Notifier
from ..storage import JourneyStore, MemoryStore


class EnrichmentState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    SUCCESS = "success"
    RECOMPUTE = "recompute"
    PERSISTED = "persisted"
    FAILURE = "failure"
    REVERTED = "reverted"


@dataclass(slots=True)
class EnrichmentOutcome:
    """Result of one provider change.

    ``journey`` is the journey to use from now on: a rebuilt instance on
    success, the untouched input otherwise.
    """

    journey: Journey
    provider: str
    former_provider: str
    states: List[EnrichmentState] = field(default_factory=list)
    errors: List[BaseException] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return EnrichmentState.FAILURE not in self.states

    @property
    def fetched(self) -> bool:
        return EnrichmentState.FETCHING in self.states


@dataclass(slots=True)
class ElevationEnrichmentConfig:
    server: ElevationServer | None = None
    store: JourneyStore | None = None
    notifier: Notifier | None = None
    logger: logging.Logger | None = None


class ElevationEnrichmentService:
    def __init__(self, config: ElevationEnrichmentConfig | None = None):
        self.config = config or ElevationEnrichmentConfig()
        self.server = self.config.server or ElevationServer()
        self.store = self.config.store if self.config.store is not None else MemoryStore()
        self.notifier = self.config.notifier or LoggingNotifier()
        self._log = self.config.logger or logging.getLogger(self.__class__.__name__)
        self.state = EnrichmentState.IDLE

    def _enter(self, outcome: EnrichmentOutcome, state: EnrichmentState) -> None:
        self.state = state
        outcome.states.append(state)
        self._log.debug("Journey %s enrichment -> %s", outcome.journey.slug, state.value)

    def change_provider(self, journey: Journey, provider_id: str) -> EnrichmentOutcome:
        """Select ``provider_id`` for ``journey`` and apply its elevations."""

        descriptor = self.server.registry.get(provider_id)
        former = journey.elevation_provider
        outcome = EnrichmentOutcome(
            journey=journey, provider=provider_id, former_provider=former
        )

        if provider_id == former or provider_id == NONE:
            journey.elevation_provider = provider_id
            self._enter(outcome, EnrichmentState.IDLE)
            return outcome

        journey.elevation_provider = provider_id
        self._enter(outcome, EnrichmentState.FETCHING)
        coordinates = flatten_coordinates(journey.collection)

        try:
            origin = (
                origin_coordinates(journey.read_origin(self.store))
                if descriptor.origin
                else []
            )
            enriched = self.server.get_elevation(provider_id, coordinates, origin)
            collection = self._realign(journey.collection, enriched, provider_id)
            updated = self._rebuild(journey, collection, provider_id)
        except ElevationServiceError as exc:
            errors = exc.errors if isinstance(exc, ElevationEnrichmentError) else [exc]
            self._fail(outcome, former, errors)
            return outcome
        except Exception as exc:  # noqa: BLE001
            self._log.exception(
                "Unexpected error applying %s to journey %s", provider_id, journey.slug
            )
            self._fail(outcome, former, [exc])
            return outcome

        self._enter(outcome, EnrichmentState.SUCCESS)
        outcome.journey = updated
        self._enter(outcome, EnrichmentState.RECOMPUTE)
        updated.persist(self.store)
        self._enter(outcome, EnrichmentState.PERSISTED)
        self.notifier.success(
            "Elevation data have been modified", f"Source: {descriptor.label}"
        )
        self._log.info(
            "Journey %s elevation provider %s -> %s", journey.slug, former, provider_id
        )
        self._enter(outcome, EnrichmentState.IDLE)
        return outcome

    def _realign(
        self,
        collection: FeatureCollection,
        coordinates: List,
        provider_id: str,
    ) -> FeatureCollection:
        try:
            return realign_coordinates(collection, coordinates)
        except ValueError as exc:
            raise ElevationDataError(str(exc), provider=provider_id) from exc

    def _fail(
        self,
        outcome: EnrichmentOutcome,
        former: str,
        errors: List[BaseException],
    ) -> None:
        journey = outcome.journey
        outcome.errors = list(errors)
        self._enter(outcome, EnrichmentState.FAILURE)
        journey.elevation_provider = former
        self._enter(outcome, EnrichmentState.REVERTED)
        self._log.warning(
            "Journey %s elevation change to %s aborted (%d error(s)); provider reverted to %s",
            journey.slug,
            outcome.provider,
            len(errors),
            former,
        )
        self.notifier.failure(
            "An error occurred when calculating elevations",
            "Changes aborted! Check logs to see error details.",
            errors,
        )
        self._enter(outcome, EnrichmentState.IDLE)

    def _rebuild(
        self, journey: Journey, collection: FeatureCollection, provider_id: str
    ) -> Journey:
        updated = Journey(
            journey.title,
            journey.source_type,
            slug=journey.slug,
            description=journey.description,
            visible=journey.visible,
            pois_on_limits=journey.pois_on_limits,
            settings=journey.settings,
        )
        updated.origin = journey.origin
        updated.load_collection(collection, journey.track_context())
        updated.elevation_provider = provider_id
        return updated


__all__ = [
    "ElevationEnrichmentConfig",
    "ElevationEnrichmentService",
    "EnrichmentOutcome",
    "EnrichmentState",
]
