"""Chunked, parallel elevation lookups.

A flat coordinate list is cut into provider-sized chunks, each chunk is
fetched on its own worker thread, and the join collects every outcome before
deciding. One failed chunk fails the whole request: callers never receive a
partially enriched list.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import List, Sequence

from ..config import ELEVATION_CHUNK_TIMEOUT, ELEVATION_MAX_WORKERS
from ..errors import ElevationEnrichmentError, ElevationServiceError
from ..geometry.models import Coordinate
from .registry import DEFAULT_REGISTRY, NONE, ElevationProviderRegistry


@dataclass(slots=True)
class ChunkFailure:
    """A chunk that could not be enriched."""

    index: int
    size: int
    error: BaseException

    def __str__(self) -> str:
        return f"chunk {self.index} ({self.size} points): {self.error}"


def chunk_coordinates(
    coordinates: Sequence[Coordinate], size: int
) -> List[Sequence[Coordinate]]:
    """Cut ``coordinates`` into consecutive slices of at most ``size`` items."""

    if size < 1:
        raise ValueError("chunk size must be >= 1")
    return [
        coordinates[cursor : cursor + size]
        for cursor in range(0, len(coordinates), size)
    ]


class ElevationServer:
    def __init__(
        self,
        registry: ElevationProviderRegistry | None = None,
        *,
        max_workers: int = ELEVATION_MAX_WORKERS,
        chunk_timeout: float | None = ELEVATION_CHUNK_TIMEOUT,
    ) -> None:
        if max_workers <= 0:
            raise ValueError("max_workers must be positive")
        self.registry = registry or DEFAULT_REGISTRY
        self.max_workers = max_workers
        self.chunk_timeout = chunk_timeout or None
        self._log = logging.getLogger(self.__class__.__name__)

    def get_elevation(
        self,
        provider_id: str,
        coordinates: Sequence[Coordinate],
        origin: Sequence[Coordinate] = (),
    ) -> List[Coordinate]:
        """Return ``coordinates`` enriched by ``provider_id``, in input order.

        Raises:
            ElevationProviderNotFoundError: unknown provider id.
            ElevationEnrichmentError: at least one chunk failed.
        """

        descriptor = self.registry.get(provider_id)
        if provider_id == NONE:
            return list(coordinates)
        fetcher = self.registry.fetcher(provider_id)
        if fetcher is None:
            return list(coordinates)

        chunks = chunk_coordinates(coordinates, descriptor.max_per_query)
        origin_chunks = [
            origin[cursor : cursor + descriptor.max_per_query]
            for cursor in range(0, len(coordinates), descriptor.max_per_query)
        ]
        if not chunks:
            return []

        self._log.info(
            "Fetching elevation for %d points from %s in %d chunk(s)",
            len(coordinates),
            provider_id,
            len(chunks),
        )
        results: List[List[Coordinate] | None] = [None] * len(chunks)
        failures: List[ChunkFailure] = []
        executor = ThreadPoolExecutor(max_workers=min(self.max_workers, len(chunks)))
        try:
            futures: List[Future] = [
                executor.submit(fetcher, chunk, origin_chunks[index])
                for index, chunk in enumerate(chunks)
            ]
            # Collect by chunk position, not completion order.
            for index, future in enumerate(futures):
                try:
                    results[index] = future.result(timeout=self.chunk_timeout)
                except FutureTimeoutError:
                    future.cancel()
                    failures.append(
                        ChunkFailure(
                            index,
                            len(chunks[index]),
                            ElevationServiceError(
                                f"{provider_id} chunk timed out after {self.chunk_timeout}s",
                                provider=provider_id,
                            ),
                        )
                    )
                except Exception as exc:
                    failures.append(ChunkFailure(index, len(chunks[index]), exc))
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        if failures:
            for failure in failures:
                self._log.warning("Elevation %s failed: %s", provider_id, failure)
            raise ElevationEnrichmentError(failures, provider=provider_id)

        enriched: List[Coordinate] = []
        for batch in results:
            enriched.extend(batch or [])
        return enriched


__all__ = ["ChunkFailure", "ElevationServer", "chunk_coordinates"]
