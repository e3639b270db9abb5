"""
Key-Value Stores
================

Settings are persisted as named blobs (nested dicts of primitives) in a
key-value store. The host platform owns the real storage; this module defines
the small interface the settings core relies on plus two implementations:

- ``InMemoryStore`` for tests and embedding.
- ``JsonFileStore`` which keeps every key in one JSON document on disk.

Both hand out deep copies so that callers can never mutate stored state by
accident.
"""

from __future__ import annotations

import copy
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

import structlog

log = structlog.get_logger(__name__)


class KeyValueStore(Protocol):
    """Opaque persistent store of named settings blobs."""

    def get(self, key: str, default: Any = None) -> Any:
        ...

    def set(self, key: str, value: Any) -> None:
        ...


class InMemoryStore:
    """A dict-backed store."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)


class JsonFileStore:
    """
    A store persisted as a single JSON object, one top-level entry per key.

    Writes go through a temporary file in the same directory followed by an
    atomic rename, so a crash never leaves a half-written settings file.
    """

    def __init__(self, path: str | os.PathLike[str]):
        self.path = Path(path)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        raw = self.path.read_text(encoding="utf-8")
        if not raw.strip():
            return {}
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"Settings file {self.path} does not contain a JSON object.")
        return data

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False, indent=2, sort_keys=True)
            os.replace(tmp_name, self.path)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        log.debug("Stored settings key", key=key, path=str(self.path))
