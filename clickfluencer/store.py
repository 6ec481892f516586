"""Where save payloads go. The slot manager only sees ``save``/``load``."""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from clickfluencer._types import Clock, now_ms

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Persisting or reading a payload failed."""


@dataclass(frozen=True)
class StoreReceipt:
    version: int
    updated_at: int


@dataclass(frozen=True)
class StoredSave:
    save_data: dict[str, Any]
    version: int
    updated_at: int


class SaveStore(ABC):
    """Opaque persistence for one save payload, versioned per write."""

    @abstractmethod
    def save(self, data: dict[str, Any]) -> StoreReceipt: ...

    @abstractmethod
    def load(self) -> StoredSave | None: ...


class MemoryStore(SaveStore):
    """In-process store, mostly for tests and headless simulation."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or now_ms
        self._stored: StoredSave | None = None

    def save(self, data: dict[str, Any]) -> StoreReceipt:
        try:
            # round-trip through JSON so non-serializable payloads fail here
            payload = json.loads(json.dumps(data))
        except (TypeError, ValueError) as exc:
            raise StoreError(f"Payload is not JSON-serializable: {exc}") from exc
        version = self._stored.version + 1 if self._stored else 1
        self._stored = StoredSave(payload, version, self._clock())
        return StoreReceipt(version, self._stored.updated_at)

    def load(self) -> StoredSave | None:
        if self._stored is None:
            return None
        return StoredSave(
            copy.deepcopy(self._stored.save_data),
            self._stored.version,
            self._stored.updated_at,
        )


class JsonFileStore(SaveStore):
    """Keeps the payload in a JSON file, replaced atomically on every save."""

    def __init__(self, path: str | Path, clock: Clock | None = None) -> None:
        self.path = Path(path)
        self._clock = clock or now_ms

    def save(self, data: dict[str, Any]) -> StoreReceipt:
        try:
            previous = self._read_envelope()
        except StoreError as exc:
            # an unreadable file must not block the save that replaces it
            logger.warning("Overwriting unreadable save file: %s", exc)
            previous = None
        version = previous["version"] + 1 if previous else 1
        envelope = {"version": version, "updated_at": self._clock(), "save_data": data}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            try:
                with os.fdopen(fd, "w") as f:
                    json.dump(envelope, f, indent=2)
                os.replace(tmp, self.path)
            except BaseException:
                os.unlink(tmp)
                raise
        except (OSError, TypeError, ValueError) as exc:
            raise StoreError(f"Could not write {self.path}: {exc}") from exc
        return StoreReceipt(version, envelope["updated_at"])

    def load(self) -> StoredSave | None:
        envelope = self._read_envelope()
        if envelope is None:
            return None
        return StoredSave(envelope["save_data"], envelope["version"], envelope["updated_at"])

    def _read_envelope(self) -> dict[str, Any] | None:
        if not self.path.exists():
            return None
        try:
            with open(self.path) as f:
                envelope = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreError(f"Could not read {self.path}: {exc}") from exc
        if not isinstance(envelope, dict) or not {"version", "updated_at", "save_data"} <= set(
            envelope
        ):
            raise StoreError(f"{self.path} is not a save file")
        return envelope
