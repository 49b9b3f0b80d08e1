"""Key/value persistence for journeys.

Journeys and their originally parsed content live in two named stores. Any
object offering ``put`` / ``get`` / ``delete`` / ``keys`` can be used; two
implementations ship here: an in-memory one and a JSON-file one.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
from hashlib import sha256
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from .config import STORAGE_DIR

_LOGGER = logging.getLogger(__name__)

JOURNEYS_STORE = "journeys"
ORIGIN_STORE = "origin"


class JourneyStore(Protocol):
    def put(self, key: str, value: Any, store: str) -> None: ...

    def get(self, key: str, store: str) -> Optional[Any]: ...

    def delete(self, key: str, store: str) -> None: ...

    def keys(self, store: str) -> List[str]: ...


class MemoryStore:
    """Process-local store; values are deep-copied in and out."""

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def put(self, key: str, value: Any, store: str) -> None:
        with self._lock:
            self._data.setdefault(store, {})[key] = copy.deepcopy(value)

    def get(self, key: str, store: str) -> Optional[Any]:
        with self._lock:
            value = self._data.get(store, {}).get(key)
        return copy.deepcopy(value)

    def delete(self, key: str, store: str) -> None:
        with self._lock:
            self._data.get(store, {}).pop(key, None)

    def keys(self, store: str) -> List[str]:
        with self._lock:
            return list(self._data.get(store, {}))


class JsonFileStore:
    """One JSON file per key under ``<base>/<store>/``."""

    def __init__(self, base_dir: str | Path = STORAGE_DIR) -> None:
        base = Path(base_dir)
        self._base_dir = base if base.is_absolute() else Path.cwd() / base
        self._lock = threading.Lock()
        self._base_dir.mkdir(parents=True, exist_ok=True)
        _LOGGER.debug("Journey store initialised dir=%s", self._base_dir)

    def _file_path(self, key: str, store: str) -> Path:
        # Slugs contain '#': hash them into a safe, deterministic file name.
        signature = sha256(key.encode("utf-8")).hexdigest()
        return self._base_dir / store / f"{signature}.json"

    def put(self, key: str, value: Any, store: str) -> None:
        path = self._file_path(key, store)
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = path.with_suffix(".tmp")
        with self._lock:
            with temp_path.open("w", encoding="utf-8") as handle:
                json.dump({"key": key, "value": value}, handle, ensure_ascii=True, indent=2)
            temp_path.replace(path)

    def _read(self, path: Path) -> Optional[Dict[str, Any]]:
        try:
            with path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except FileNotFoundError:
            return None

    def get(self, key: str, store: str) -> Optional[Any]:
        payload = self._read(self._file_path(key, store))
        if payload is None:
            return None
        return payload.get("value")

    def delete(self, key: str, store: str) -> None:
        path = self._file_path(key, store)
        with self._lock:
            path.unlink(missing_ok=True)

    def keys(self, store: str) -> List[str]:
        folder = self._base_dir / store
        if not folder.is_dir():
            return []
        found = []
        for path in sorted(folder.glob("*.json")):
            payload = self._read(path)
            if payload and "key" in payload:
                found.append(payload["key"])
        return found


__all__ = [
    "JOURNEYS_STORE",
    "ORIGIN_STORE",
    "JourneyStore",
    "JsonFileStore",
    "MemoryStore",
]
