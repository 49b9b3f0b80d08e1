"""User notifications emitted after elevation changes.

Notifiers are purely observational: return values are ignored.
"""

from __future__ import annotations

import logging
from typing import Any, List, Protocol, Sequence

LOGGER = logging.getLogger(__name__)


class Notifier(Protocol):
    def success(self, caption: str, text: str) -> None: ...

    def failure(
        self, caption: str, text: str, errors: Sequence[BaseException] = ()
    ) -> None: ...


class LoggingNotifier:
    """Report notifications through ``logging``."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._log = logger or LOGGER

    def success(self, caption: str, text: str) -> None:
        self._log.info("%s | %s", caption, text)

    def failure(
        self, caption: str, text: str, errors: Sequence[BaseException] = ()
    ) -> None:
        self._log.error("%s | %s", caption, text)
        for error in errors:
            self._log.error("  %s: %s", type(error).__name__, error)


class RecordingNotifier:
    """Keep notifications in memory (used by the CLI summary and tests)."""

    def __init__(self) -> None:
        self.messages: List[dict[str, Any]] = []

    def success(self, caption: str, text: str) -> None:
        self.messages.append({"level": "success", "caption": caption, "text": text})

    def failure(
        self, caption: str, text: str, errors: Sequence[BaseException] = ()
    ) -> None:
        self.messages.append(
            {
                "level": "failure",
                "caption": caption,
                "text": text,
                "errors": list(errors),
            }
        )


__all__ = ["Notifier", "LoggingNotifier", "RecordingNotifier"]
