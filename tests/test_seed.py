"""Tests for deterministic seed derivation."""

from __future__ import annotations

import hashlib

import pytest

from yoyo.core import TRAIT_CATEGORIES, Seed, TraitCategory, TraitCountsConfig
from yoyo.exceptions import InvalidTraitCount
from yoyo.generator.seed import (
    SeedGenerator,
    available_hashes,
    derive_windows,
    digest_inputs,
    generate_seed,
    pack_inputs,
)

REQUESTER = "0x" + "ab" * 20
ENTROPY = "0x" + "5e" * 32
TIMESTAMP = 1_700_000_000


def test_generate_seed_is_deterministic() -> None:
    counts = TraitCountsConfig.uniform(8)

    first = generate_seed(1, REQUESTER, ENTROPY, TIMESTAMP, counts)
    second = generate_seed(1, REQUESTER, ENTROPY, TIMESTAMP, counts)

    assert first == second
    assert first.to_list() == second.to_list()


@pytest.mark.parametrize("hash_name", available_hashes())
def test_generate_seed_respects_counts(hash_name: str) -> None:
    counts = TraitCountsConfig.from_sequence([2, 3, 5, 7, 8, 1, 4])
    for identifier in range(1, 200):
        seed = generate_seed(identifier, REQUESTER, identifier * 7919, TIMESTAMP, counts, hash_name=hash_name)
        for category, index in seed.items():
            assert 0 <= index < counts[category]


def test_windows_follow_digest_bit_layout() -> None:
    packed = pack_inputs(42, REQUESTER, ENTROPY, TIMESTAMP)
    digest = int.from_bytes(hashlib.sha3_256(packed).digest(), "big")

    assert digest_inputs(42, REQUESTER, ENTROPY, TIMESTAMP) == digest
    windows = derive_windows(42, REQUESTER, ENTROPY, TIMESTAMP)
    assert windows == [(digest >> (32 * position)) & 0xFFFFFFFF for position in range(7)]

    counts = TraitCountsConfig.from_sequence([3, 4, 5, 6, 7, 8, 9])
    seed = generate_seed(42, REQUESTER, ENTROPY, TIMESTAMP, counts)
    assert seed.to_list() == [window % count for window, count in zip(windows, counts)]


def test_pack_inputs_layout() -> None:
    packed = pack_inputs(1, REQUESTER, b"\x01\x02", 3)

    assert len(packed) == 32 + 20 + 2 + 32
    assert packed[:32] == (1).to_bytes(32, "big")
    assert packed[32:52] == bytes.fromhex("ab" * 20)
    assert packed[52:54] == b"\x01\x02"
    assert packed[54:] == (3).to_bytes(32, "big")


def test_integer_entropy_packs_as_uint256() -> None:
    assert pack_inputs(1, REQUESTER, 5, 3) == pack_inputs(1, REQUESTER, (5).to_bytes(32, "big"), 3)


def test_inputs_are_order_sensitive() -> None:
    counts = TraitCountsConfig.uniform(1)
    base = derive_windows(1, REQUESTER, ENTROPY, TIMESTAMP)

    assert derive_windows(2, REQUESTER, ENTROPY, TIMESTAMP) != base
    assert derive_windows(1, "0x" + "cd" * 20, ENTROPY, TIMESTAMP) != base
    assert derive_windows(1, REQUESTER, "0x" + "5f" * 32, TIMESTAMP) != base
    assert derive_windows(1, REQUESTER, ENTROPY, TIMESTAMP + 1) != base
    assert generate_seed(1, REQUESTER, ENTROPY, TIMESTAMP, counts).to_list() == [0] * 7


def test_requester_bytes_and_hex_are_equivalent() -> None:
    raw = bytes.fromhex("ab" * 20)
    assert derive_windows(1, raw, ENTROPY, TIMESTAMP) == derive_windows(1, REQUESTER.upper().replace("0X", "0x"), ENTROPY, TIMESTAMP)


@pytest.mark.parametrize("position", range(7))
def test_zero_count_is_rejected(position: int) -> None:
    values = [4] * 7
    values[position] = 0
    counts = TraitCountsConfig.from_sequence(values)

    with pytest.raises(InvalidTraitCount) as excinfo:
        generate_seed(1, REQUESTER, ENTROPY, TIMESTAMP, counts)

    assert excinfo.value.category is TRAIT_CATEGORIES[position]
    assert excinfo.value.count == 0


def test_negative_count_is_rejected() -> None:
    counts = TraitCountsConfig.from_sequence([1, 1, -3, 1, 1, 1, 1])
    with pytest.raises(InvalidTraitCount):
        generate_seed(1, REQUESTER, ENTROPY, TIMESTAMP, counts)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"identifier": -1},
        {"identifier": 1 << 256},
        {"timestamp": -5},
        {"requester": "0x1234"},
        {"requester": "not-an-address"},
        {"requester": 12345},
        {"entropy": "0xzz"},
        {"entropy": -1},
    ],
)
def test_invalid_inputs_raise_value_error(kwargs) -> None:
    params = {"identifier": 1, "requester": REQUESTER, "entropy": ENTROPY, "timestamp": TIMESTAMP}
    params.update(kwargs)
    with pytest.raises(ValueError):
        generate_seed(
            params["identifier"],
            params["requester"],
            params["entropy"],
            params["timestamp"],
            TraitCountsConfig.uniform(2),
        )


def test_unknown_hash_is_rejected() -> None:
    with pytest.raises(ValueError):
        generate_seed(1, REQUESTER, ENTROPY, TIMESTAMP, TraitCountsConfig.uniform(2), hash_name="md5")
    with pytest.raises(ValueError):
        SeedGenerator(hash_name="md5")


def test_single_variant_scenario() -> None:
    counts = TraitCountsConfig.from_mapping(
        {
            "Shoes": 2,
            "Pants": 1,
            "Shirt": 1,
            "Hoodie": 1,
            "Face": 1,
            "Hair": 1,
            "Accessory": 1,
        }
    )

    seed = generate_seed(1, REQUESTER, ENTROPY, TIMESTAMP, counts)
    again = generate_seed(1, REQUESTER, ENTROPY, TIMESTAMP, counts)

    assert seed[TraitCategory.PANTS] == 0
    assert seed[TraitCategory.SHOES] in {0, 1}
    assert again[TraitCategory.SHOES] == seed[TraitCategory.SHOES]
    assert all(seed[category] == 0 for category in TRAIT_CATEGORIES[1:])


def test_seed_generator_set_counts_affects_later_calls_only() -> None:
    generator = SeedGenerator(TraitCountsConfig.uniform(1))
    before = generator.generate(7, REQUESTER, ENTROPY, TIMESTAMP)

    generator.set_counts([8, 8, 8, 8, 8, 8, 8])
    after = generator.generate(7, REQUESTER, ENTROPY, TIMESTAMP)

    assert before == Seed((0,) * 7)
    assert after.to_list() == [window % 8 for window in derive_windows(7, REQUESTER, ENTROPY, TIMESTAMP)]
    assert generator.counts.to_list() == [8] * 7


def test_seed_generator_set_counts_validates() -> None:
    generator = SeedGenerator(TraitCountsConfig.uniform(3))

    with pytest.raises(InvalidTraitCount):
        generator.set_counts([3, 3, 3, 0, 3, 3, 3])
    with pytest.raises(ValueError):
        generator.set_counts([3, 3])

    assert generator.counts == TraitCountsConfig.uniform(3)
