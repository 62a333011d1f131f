"""Trait categories, count configuration and seed values."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Sequence, Tuple, Union

from yoyo.exceptions import InvalidTraitCount


class TraitCategory(str, Enum):
    """Visual slots of a character, in layering order."""

    SHOES = "Shoes"
    PANTS = "Pants"
    SHIRT = "Shirt"
    HOODIE = "Hoodie"
    FACE = "Face"
    HAIR = "Hair"
    ACCESSORY = "Accessory"

    @classmethod
    def coerce(cls, value: Union["TraitCategory", str]) -> "TraitCategory":
        """Return the member for *value*, accepting members and case-insensitive names."""

        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if lowered in (member.value.lower(), member.name.lower()):
                    return member
        raise ValueError(f"unknown trait category: {value!r}")


TRAIT_CATEGORIES: Tuple[TraitCategory, ...] = tuple(TraitCategory)
CATEGORY_COUNT = len(TRAIT_CATEGORIES)


def _ordered_values(values: Sequence[Any], *, what: str) -> Tuple[Any, ...]:
    items = tuple(values)
    if len(items) != CATEGORY_COUNT:
        raise ValueError(f"{what} requires exactly {CATEGORY_COUNT} values (got {len(items)})")
    return items


def _values_from_mapping(mapping: Mapping[Any, Any], *, what: str) -> Tuple[Any, ...]:
    resolved: Dict[TraitCategory, Any] = {}
    for key, value in mapping.items():
        resolved[TraitCategory.coerce(key)] = value
    missing = [category.value for category in TRAIT_CATEGORIES if category not in resolved]
    if missing:
        raise ValueError(f"{what} missing categories: {', '.join(missing)}")
    return tuple(resolved[category] for category in TRAIT_CATEGORIES)


@dataclass(frozen=True)
class TraitCountsConfig:
    """Number of available variants per category.

    Construction does not check the counts; :meth:`validate` does, and seed
    derivation calls it before reducing any window.
    """

    counts: Tuple[int, ...]

    def __post_init__(self) -> None:
        items = _ordered_values(self.counts, what="TraitCountsConfig")
        for value in items:
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"trait counts must be integers (got {value!r})")
        object.__setattr__(self, "counts", items)

    @classmethod
    def from_sequence(cls, values: Sequence[int]) -> "TraitCountsConfig":
        return cls(tuple(values))

    @classmethod
    def from_mapping(cls, mapping: Mapping[Any, int]) -> "TraitCountsConfig":
        return cls(_values_from_mapping(mapping, what="TraitCountsConfig"))

    @classmethod
    def uniform(cls, count: int) -> "TraitCountsConfig":
        return cls((count,) * CATEGORY_COUNT)

    @classmethod
    def parse(cls, text: str) -> "TraitCountsConfig":
        """Parse a comma separated list such as ``"2,1,1,1,1,1,1"``."""

        chunks = [chunk.strip() for chunk in (text or "").split(",")]
        if not all(chunks):
            raise ValueError(f"invalid trait counts: {text!r} has an empty entry")
        try:
            values = [int(chunk) for chunk in chunks]
        except ValueError as exc:
            raise ValueError(f"invalid trait counts: {text!r}") from exc
        return cls.from_sequence(values)

    def validate(self) -> "TraitCountsConfig":
        """Return ``self`` or raise :class:`InvalidTraitCount` for the first bad count."""

        for category, count in zip(TRAIT_CATEGORIES, self.counts):
            if count < 1:
                raise InvalidTraitCount(category, count)
        return self

    def __getitem__(self, category: Union[TraitCategory, str]) -> int:
        return self.counts[TRAIT_CATEGORIES.index(TraitCategory.coerce(category))]

    def __iter__(self) -> Iterator[int]:
        return iter(self.counts)

    def to_list(self) -> List[int]:
        return list(self.counts)

    def to_dict(self) -> Dict[str, int]:
        return {category.value: count for category, count in zip(TRAIT_CATEGORIES, self.counts)}


@dataclass(frozen=True)
class Seed:
    """Trait indices assigned to one minted item, one per category."""

    indices: Tuple[int, ...]

    def __post_init__(self) -> None:
        items = _ordered_values(self.indices, what="Seed")
        for value in items:
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"seed indices must be integers (got {value!r})")
            if value < 0:
                raise ValueError(f"seed indices must be non-negative (got {value})")
        object.__setattr__(self, "indices", items)

    @classmethod
    def from_sequence(cls, values: Iterable[int]) -> "Seed":
        return cls(tuple(values))

    @classmethod
    def from_mapping(cls, mapping: Mapping[Any, int]) -> "Seed":
        return cls(_values_from_mapping(mapping, what="Seed"))

    def __getitem__(self, category: Union[TraitCategory, str]) -> int:
        return self.indices[TRAIT_CATEGORIES.index(TraitCategory.coerce(category))]

    def __iter__(self) -> Iterator[int]:
        return iter(self.indices)

    def __len__(self) -> int:
        return len(self.indices)

    def items(self) -> Iterator[Tuple[TraitCategory, int]]:
        return zip(TRAIT_CATEGORIES, self.indices)

    def to_list(self) -> List[int]:
        return list(self.indices)

    def to_dict(self) -> Dict[str, int]:
        return {category.value: index for category, index in self.items()}


__all__ = [
    "CATEGORY_COUNT",
    "Seed",
    "TRAIT_CATEGORIES",
    "TraitCategory",
    "TraitCountsConfig",
]
