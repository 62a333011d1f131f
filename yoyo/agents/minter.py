"""Minting engine that derives, persists and serves trait seeds."""

from __future__ import annotations

import json
import logging
import os
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from yoyo.config import CollectionSettings
from yoyo.core import Seed, TraitCountsConfig
from yoyo.generator.metadata import MetadataEncoder
from yoyo.generator.names import TraitNameTable
from yoyo.generator.seed import Entropy, Requester, SeedGenerator
from yoyo.logging import DEFAULT_ADMIN_LOG, DEFAULT_MINT_LOG, log_admin_change, log_jsonl, utc_timestamp
from yoyo.store import SeedStore


@dataclass(frozen=True)
class MintRecord:
    """Outcome of a single mint."""

    identifier: int
    seed: Seed
    requester: str
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identifier": self.identifier,
            "seed": self.seed.to_dict(),
            "requester": self.requester,
            "timestamp": self.timestamp,
        }


def _requester_label(requester: Requester) -> str:
    if isinstance(requester, (bytes, bytearray)):
        return "0x" + bytes(requester).hex()
    return str(requester).lower()


class MintingEngine:
    """Coordinate seed derivation, persistence and metadata reads.

    Parameters
    ----------
    store:
        Seed store holding minted seeds and the collection settings. An
        in-memory store is created when omitted.
    name_table:
        Trait name table used to render documents.
    log_path:
        JSONL sink for mint records.
    admin_log_path:
        JSONL sink for configuration changes.
    """

    def __init__(
        self,
        store: Optional[SeedStore] = None,
        *,
        name_table: Optional[TraitNameTable] = None,
        log_path: str = DEFAULT_MINT_LOG,
        admin_log_path: str = DEFAULT_ADMIN_LOG,
    ) -> None:
        self._store = store if store is not None else SeedStore()
        settings = self._store.settings
        self._generator = SeedGenerator(settings.trait_counts, hash_name=settings.hash_name)
        self._encoder = MetadataEncoder(
            image_base_uri=settings.image_base_uri,
            description=settings.description,
            external_url=settings.external_url,
            name_prefix=settings.name_prefix,
            name_table=name_table,
        )
        self.log_path = log_path
        self.admin_log_path = admin_log_path
        self._lock = threading.RLock()
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    def store(self) -> SeedStore:
        return self._store

    @property
    def settings(self) -> CollectionSettings:
        return self._store.settings

    @property
    def encoder(self) -> MetadataEncoder:
        return self._encoder

    @property
    def counts(self) -> TraitCountsConfig:
        return self._generator.counts

    def mint(
        self,
        requester: Requester,
        entropy: Entropy,
        *,
        timestamp: Optional[int] = None,
    ) -> MintRecord:
        """Create the next item and persist its seed before returning."""

        resolved_timestamp = int(time.time()) if timestamp is None else timestamp
        with self._lock:
            identifier = self._store.next_id
            counts = self._generator.counts
            seed = self._generator.generate(identifier, requester, entropy, resolved_timestamp)
            self._store.put(identifier, seed)

        record = MintRecord(
            identifier=identifier,
            seed=seed,
            requester=_requester_label(requester),
            timestamp=resolved_timestamp,
        )
        self._logger.info("Minted identifier %s with seed %s", identifier, seed.to_list())

        log_entry = record.to_dict()
        log_entry["event"] = "mint"
        log_entry["counts"] = counts.to_list()
        log_entry["hash"] = self._generator.hash_name
        log_entry["recorded_at"] = utc_timestamp()
        log_jsonl(self.log_path, log_entry)
        return record

    def mint_batch(
        self,
        count: int,
        requester: Requester,
        entropy_source: Callable[[int], Entropy],
        *,
        timestamp: Optional[int] = None,
    ) -> List[MintRecord]:
        """Mint *count* items, asking *entropy_source* for each identifier's entropy."""

        if count < 1:
            raise ValueError("count must be at least 1")

        records: List[MintRecord] = []
        for _ in range(count):
            with self._lock:
                entropy = entropy_source(self._store.next_id)
                records.append(self.mint(requester, entropy, timestamp=timestamp))
        return records

    def seed_of(self, identifier: int) -> Seed:
        return self._store.get(identifier)

    def token_uri(self, identifier: int) -> str:
        """Return the metadata document for *identifier*.

        Raises:
            NotFound: If no seed was persisted for *identifier*.
            IndexOutOfRange: If the stored seed has no name for one of its indices.
        """

        seed = self._store.get(identifier)
        with self._lock:
            return self._encoder.render(identifier, seed)

    def metadata(self, identifier: int) -> Dict[str, Any]:
        seed = self._store.get(identifier)
        with self._lock:
            return self._encoder.build(identifier, seed)

    def export_metadata(self, directory: str) -> List[str]:
        """Write ``<id>.json`` for every stored seed into *directory*."""

        os.makedirs(directory, exist_ok=True)
        paths: List[str] = []
        for identifier in self._store.identifiers():
            document = self.metadata(identifier)
            path = os.path.join(directory, f"{identifier}.json")
            with open(path, "w", encoding="utf-8") as handle:
                json.dump(document, handle, indent=2, ensure_ascii=False)
                handle.write("\n")
            paths.append(path)
        self._logger.info("Exported %d metadata documents to %s", len(paths), directory)
        return paths

    def set_counts(self, new_counts: Union[TraitCountsConfig, Sequence[int]]) -> TraitCountsConfig:
        """Replace the trait counts used by later mints.

        Seeds already stored keep their indices. The previous counts stay in
        effect when the store cannot be written.
        """

        with self._lock:
            previous = self._generator.counts
            applied = self._generator.set_counts(new_counts)
            try:
                self._store.update_settings(self.settings.with_updates(trait_counts=applied))
            except OSError:
                self._generator.set_counts(previous)
                raise
        self._record_admin("set_counts", previous.to_list(), applied.to_list())
        return applied

    def set_image_base_uri(self, value: str) -> None:
        self._set_encoder_field("image_base_uri", self._encoder.set_image_base_uri, value)

    def set_collection_description(self, value: str) -> None:
        self._set_encoder_field("description", self._encoder.set_collection_description, value)

    def set_external_url(self, value: str) -> None:
        self._set_encoder_field("external_url", self._encoder.set_external_url, value)

    def _set_encoder_field(self, field: str, setter: Callable[[str], None], value: str) -> None:
        with self._lock:
            previous = getattr(self._encoder, field)
            setter(value)
            try:
                self._store.update_settings(self.settings.with_updates(**{field: value}))
            except OSError:
                setter(previous)
                raise
        self._record_admin(setter.__name__, previous, value)

    def _record_admin(self, action: str, previous: Any, current: Any) -> None:
        self._logger.info("Admin %s: %r -> %r", action, previous, current)
        log_admin_change(
            {"action": action, "previous": previous, "current": current},
            path=self.admin_log_path,
        )


__all__ = ["MintRecord", "MintingEngine"]
