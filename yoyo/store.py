"""Seed persistence keyed by item identifier."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from typing import Any, Dict, List, Optional

from yoyo.config import CollectionSettings
from yoyo.core import Seed
from yoyo.exceptions import NotFound

_LOGGER = logging.getLogger("yoyo.store")
_FORMAT_VERSION = 1


class SeedStore:
    """Hold minted seeds, the next identifier and the collection settings.

    When *path* is given every change is written back to a JSON file via a
    temporary file and :func:`os.replace`, so readers never observe a partial
    document.
    """

    def __init__(
        self,
        path: Optional[str] = None,
        *,
        settings: Optional[CollectionSettings] = None,
        next_id: int = 1,
        seeds: Optional[Dict[int, Seed]] = None,
    ) -> None:
        self.path = path
        self._settings = settings or CollectionSettings()
        self._next_id = next_id
        self._seeds: Dict[int, Seed] = dict(seeds or {})
        self._lock = threading.RLock()

    @classmethod
    def load(cls, path: str, *, settings: Optional[CollectionSettings] = None) -> "SeedStore":
        """Open the store at *path*; a missing file yields an empty store.

        *settings* seeds a new store only. A store that already exists keeps
        the settings recorded in it.
        """

        if not os.path.exists(path):
            _LOGGER.info("No store at %s; starting empty", path)
            return cls(path, settings=settings)

        with open(path, "r", encoding="utf-8") as handle:
            payload = json.load(handle)

        if not isinstance(payload, dict):
            raise ValueError(f"store file {path} must hold a JSON object")
        version = payload.get("format_version")
        if version != _FORMAT_VERSION:
            raise ValueError(f"unsupported store format version: {version!r}")

        seeds = {int(key): Seed.from_sequence(value) for key, value in payload.get("seeds", {}).items()}
        return cls(
            path,
            settings=CollectionSettings.from_dict(payload.get("settings", {})),
            next_id=int(payload.get("next_id", 1)),
            seeds=seeds,
        )

    @property
    def settings(self) -> CollectionSettings:
        return self._settings

    @property
    def next_id(self) -> int:
        return self._next_id

    def update_settings(self, settings: CollectionSettings) -> None:
        with self._lock:
            self._flush(self._snapshot(settings=settings))
            self._settings = settings

    def put(self, identifier: int, seed: Seed) -> None:
        """Store *seed* under *identifier*; memory changes only after the file is written."""

        with self._lock:
            if identifier in self._seeds:
                raise ValueError(f"seed for identifier {identifier} already stored")
            seeds = dict(self._seeds)
            seeds[identifier] = seed
            next_id = max(self._next_id, identifier + 1)
            self._flush(self._snapshot(next_id=next_id, seeds=seeds))
            self._seeds = seeds
            self._next_id = next_id

    def get(self, identifier: int) -> Seed:
        with self._lock:
            try:
                return self._seeds[identifier]
            except KeyError:
                raise NotFound(identifier) from None

    def identifiers(self) -> List[int]:
        with self._lock:
            return sorted(self._seeds)

    def __contains__(self, identifier: object) -> bool:
        with self._lock:
            return identifier in self._seeds

    def __len__(self) -> int:
        with self._lock:
            return len(self._seeds)

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            return self._snapshot()

    def _snapshot(
        self,
        *,
        next_id: Optional[int] = None,
        settings: Optional[CollectionSettings] = None,
        seeds: Optional[Dict[int, Seed]] = None,
    ) -> Dict[str, Any]:
        seeds = self._seeds if seeds is None else seeds
        return {
            "format_version": _FORMAT_VERSION,
            "next_id": self._next_id if next_id is None else next_id,
            "settings": (settings or self._settings).to_dict(),
            "seeds": {str(key): seeds[key].to_list() for key in sorted(seeds)},
        }

    def _flush(self, payload: Dict[str, Any]) -> None:
        if not self.path:
            return

        directory = os.path.dirname(self.path) or "."
        os.makedirs(directory, exist_ok=True)
        handle = tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=directory, prefix=".store-", suffix=".json", delete=False
        )
        try:
            with handle:
                json.dump(payload, handle, sort_keys=True, indent=2)
                handle.write("\n")
            os.replace(handle.name, self.path)
        except OSError:
            if os.path.exists(handle.name):
                os.unlink(handle.name)
            raise


__all__ = ["SeedStore"]
