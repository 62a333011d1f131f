"""Deterministic trait seed derivation."""

from __future__ import annotations

import hashlib
import logging
import threading
from typing import Callable, Dict, List, Optional, Sequence, Union

from yoyo.core import CATEGORY_COUNT, Seed, TraitCountsConfig

DEFAULT_HASH = "sha3_256"
WINDOW_BITS = 32
WINDOW_MASK = (1 << WINDOW_BITS) - 1
ADDRESS_BYTES = 20

_UINT256_LIMIT = 1 << 256

_HASHES: Dict[str, Callable[[bytes], bytes]] = {
    "sha3_256": lambda data: hashlib.sha3_256(data).digest(),
    "sha256": lambda data: hashlib.sha256(data).digest(),
    "blake2b": lambda data: hashlib.blake2b(data, digest_size=32).digest(),
}

Requester = Union[str, bytes, bytearray]
Entropy = Union[int, str, bytes, bytearray]


def available_hashes() -> List[str]:
    return sorted(_HASHES)


def _uint256(value: int, *, field: str) -> bytes:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field} must be an integer")
    if value < 0 or value >= _UINT256_LIMIT:
        raise ValueError(f"{field} must fit in an unsigned 256-bit integer")
    return value.to_bytes(32, "big")


def _hex_bytes(text: str, *, field: str) -> bytes:
    stripped = text.strip()
    if stripped[:2].lower() == "0x":
        stripped = stripped[2:]
    try:
        return bytes.fromhex(stripped)
    except ValueError as exc:
        raise ValueError(f"{field} must be hexadecimal") from exc


def pack_requester(requester: Requester) -> bytes:
    """Return the 20-byte address form of *requester*."""

    if isinstance(requester, (bytes, bytearray)):
        raw = bytes(requester)
    elif isinstance(requester, str):
        raw = _hex_bytes(requester, field="requester")
    else:
        raise ValueError("requester must be an address string or bytes")
    if len(raw) != ADDRESS_BYTES:
        raise ValueError(f"requester must be a {ADDRESS_BYTES}-byte address (got {len(raw)} bytes)")
    return raw


def pack_entropy(entropy: Entropy) -> bytes:
    """Return the byte form of *entropy*; integers pack as uint256."""

    if isinstance(entropy, (bytes, bytearray)):
        return bytes(entropy)
    if isinstance(entropy, str):
        return _hex_bytes(entropy, field="entropy")
    return _uint256(entropy, field="entropy")


def pack_inputs(identifier: int, requester: Requester, entropy: Entropy, timestamp: int) -> bytes:
    """Concatenate the mint inputs in their fixed order.

    Only the entropy field has a variable width and it is followed by the
    fixed-width timestamp, so distinct inputs never share a packing.
    """

    return b"".join(
        (
            _uint256(identifier, field="identifier"),
            pack_requester(requester),
            pack_entropy(entropy),
            _uint256(timestamp, field="timestamp"),
        )
    )


def digest_inputs(
    identifier: int,
    requester: Requester,
    entropy: Entropy,
    timestamp: int,
    *,
    hash_name: str = DEFAULT_HASH,
) -> int:
    """Return the 256-bit digest of the packed inputs as an unsigned integer."""

    try:
        hasher = _HASHES[hash_name]
    except KeyError:
        raise ValueError(
            f"unknown hash {hash_name!r}; expected one of {', '.join(available_hashes())}"
        ) from None
    return int.from_bytes(hasher(pack_inputs(identifier, requester, entropy, timestamp)), "big")


def derive_windows(
    identifier: int,
    requester: Requester,
    entropy: Entropy,
    timestamp: int,
    *,
    hash_name: str = DEFAULT_HASH,
) -> List[int]:
    """Return the seven raw 32-bit windows, lowest bits first."""

    digest = digest_inputs(identifier, requester, entropy, timestamp, hash_name=hash_name)
    return [(digest >> (WINDOW_BITS * position)) & WINDOW_MASK for position in range(CATEGORY_COUNT)]


def generate_seed(
    identifier: int,
    requester: Requester,
    entropy: Entropy,
    timestamp: int,
    counts: TraitCountsConfig,
    *,
    hash_name: str = DEFAULT_HASH,
) -> Seed:
    """Derive the trait seed for a newly minted item.

    Parameters
    ----------
    identifier:
        Never-reused item identifier.
    requester:
        20-byte address of the account requesting the mint.
    entropy:
        Opaque randomness supplied by the caller.
    timestamp:
        Mint time in seconds.
    counts:
        Snapshot of the per-category variant counts. Every count must be at
        least one; :class:`~yoyo.exceptions.InvalidTraitCount` is raised
        before any reduction otherwise.
    """

    counts.validate()
    windows = derive_windows(identifier, requester, entropy, timestamp, hash_name=hash_name)
    return Seed(tuple(window % count for window, count in zip(windows, counts.counts)))


class SeedGenerator:
    """Hold the trait count configuration and derive seeds against it."""

    def __init__(
        self,
        counts: Optional[TraitCountsConfig] = None,
        *,
        hash_name: str = DEFAULT_HASH,
    ) -> None:
        if hash_name not in _HASHES:
            raise ValueError(f"unknown hash {hash_name!r}")
        self.hash_name = hash_name
        self._counts = counts if counts is not None else TraitCountsConfig.uniform(1)
        self._lock = threading.Lock()
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    def counts(self) -> TraitCountsConfig:
        return self._counts

    def set_counts(self, new_counts: Union[TraitCountsConfig, Sequence[int]]) -> TraitCountsConfig:
        """Replace the count configuration for subsequent derivations.

        Seeds produced earlier are unaffected.
        """

        if not isinstance(new_counts, TraitCountsConfig):
            new_counts = TraitCountsConfig.from_sequence(new_counts)
        new_counts.validate()
        with self._lock:
            previous = self._counts
            self._counts = new_counts
        self._logger.info("Trait counts updated %s -> %s", previous.to_list(), new_counts.to_list())
        return new_counts

    def generate(
        self,
        identifier: int,
        requester: Requester,
        entropy: Entropy,
        timestamp: int,
    ) -> Seed:
        with self._lock:
            snapshot = self._counts
        seed = generate_seed(
            identifier,
            requester,
            entropy,
            timestamp,
            snapshot,
            hash_name=self.hash_name,
        )
        self._logger.debug("Derived seed %s for identifier %s", seed.to_list(), identifier)
        return seed


__all__ = [
    "DEFAULT_HASH",
    "SeedGenerator",
    "available_hashes",
    "derive_windows",
    "digest_inputs",
    "generate_seed",
    "pack_entropy",
    "pack_inputs",
    "pack_requester",
]
