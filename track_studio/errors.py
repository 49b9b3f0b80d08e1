"""Central error types used across the application."""

from __future__ import annotations

from typing import Any, List, Sequence


class SourceFormatError(RuntimeError):
    """Raised when a track file cannot be read or its format is unsupported."""


class ElevationServiceError(RuntimeError):
    """Base error for elevation provider failures."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        detail: str | None = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.detail = detail


class ElevationDataError(ElevationServiceError):
    """Raised when a provider answers with its "no data here" sentinel.

    Kept apart from transport failures: the request went through, but the
    provider has no elevation coverage for part of the requested area.
    """


class ElevationProviderNotFoundError(KeyError):
    """Raised when an elevation provider id is not registered."""


class ElevationEnrichmentError(ElevationServiceError):
    """Raised when one or more chunks of an enrichment request failed."""

    def __init__(self, failures: Sequence[Any], *, provider: str | None = None):
        self.failures: List[Any] = list(failures)
        count = len(self.failures)
        super().__init__(
            f"{count} elevation chunk(s) failed for provider {provider}",
            provider=provider,
        )

    @property
    def errors(self) -> List[BaseException]:
        """Underlying exceptions, one per failed chunk."""

        return [getattr(failure, "error", failure) for failure in self.failures]


__all__ = [
    "SourceFormatError",
    "ElevationServiceError",
    "ElevationDataError",
    "ElevationProviderNotFoundError",
    "ElevationEnrichmentError",
]
