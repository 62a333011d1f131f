"""Versioned trait name tables."""

from __future__ import annotations

import json
from types import MappingProxyType
from typing import Any, Dict, Mapping, Sequence, Tuple, Union

from yoyo.core import TRAIT_CATEGORIES, TraitCategory
from yoyo.exceptions import IndexOutOfRange, NameTableError
from yoyo.validate import NAME_TABLE_SCHEMA, validate_document

NAMES_PER_CATEGORY = 8

_DEFAULT_NAMES: Dict[TraitCategory, Tuple[str, ...]] = {
    TraitCategory.SHOES: (
        "Canvas Low",
        "High Top",
        "Skate Slip",
        "Trail Runner",
        "Moon Boot",
        "Sandal",
        "Sock Only",
        "Gold Kicks",
    ),
    TraitCategory.PANTS: (
        "Denim",
        "Cargo",
        "Track",
        "Shorts",
        "Corduroy",
        "Plaid",
        "Overalls",
        "Camo",
    ),
    TraitCategory.SHIRT: (
        "Plain Tee",
        "Striped Tee",
        "Polo",
        "Tank",
        "Flannel",
        "Jersey",
        "Tie Dye",
        "Pixel Logo",
    ),
    TraitCategory.HOODIE: (
        "None",
        "Grey Zip",
        "Black Pullover",
        "Neon",
        "Varsity",
        "Windbreaker",
        "Puffer",
        "Rainbow",
    ),
    TraitCategory.FACE: (
        "Smile",
        "Grin",
        "Wink",
        "Shades",
        "Surprised",
        "Sleepy",
        "Tongue Out",
        "Laser Eyes",
    ),
    TraitCategory.HAIR: (
        "Buzz",
        "Mohawk",
        "Bowl Cut",
        "Afro",
        "Ponytail",
        "Beanie",
        "Cap",
        "Bald",
    ),
    TraitCategory.ACCESSORY: (
        "Classic Yoyo",
        "Glow Yoyo",
        "Butterfly Yoyo",
        "Metal Yoyo",
        "Twin Yoyos",
        "Wooden Yoyo",
        "Diamond Yoyo",
        "Broken String",
    ),
}


class TraitNameTable:
    """Per-category names resolved by seed index.

    Every category carries exactly :data:`NAMES_PER_CATEGORY` entries. Adding
    variants to a category means publishing a new table version rather than
    resizing an existing one.
    """

    def __init__(self, version: str, tables: Mapping[Any, Sequence[str]]) -> None:
        if not isinstance(version, str) or not version.strip():
            raise ValueError("name table version must be a non-empty string")

        resolved: Dict[TraitCategory, Tuple[str, ...]] = {}
        for key, names in tables.items():
            category = TraitCategory.coerce(key)
            entries = tuple(names)
            if len(entries) != NAMES_PER_CATEGORY:
                raise ValueError(
                    f"{category.value} requires exactly {NAMES_PER_CATEGORY} names (got {len(entries)})"
                )
            for entry in entries:
                if not isinstance(entry, str) or not entry:
                    raise ValueError(f"{category.value} names must be non-empty strings")
            resolved[category] = entries

        missing = [category.value for category in TRAIT_CATEGORIES if category not in resolved]
        if missing:
            raise ValueError(f"name table missing categories: {', '.join(missing)}")

        self.version = version
        self._tables = MappingProxyType(resolved)

    def names(self, category: Union[TraitCategory, str]) -> Tuple[str, ...]:
        return self._tables[TraitCategory.coerce(category)]

    def lookup(self, category: Union[TraitCategory, str], index: int) -> str:
        """Return entry *index* of *category*; out-of-table indices raise."""

        category = TraitCategory.coerce(category)
        entries = self._tables[category]
        if index < 0 or index >= len(entries):
            raise IndexOutOfRange(category, index, len(entries))
        return entries[index]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "traits": {category.value: list(self._tables[category]) for category in TRAIT_CATEGORIES},
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TraitNameTable):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"TraitNameTable(version={self.version!r})"


DEFAULT_NAME_TABLE = TraitNameTable("v1", _DEFAULT_NAMES)


def parse_name_table(document: Mapping[str, Any]) -> TraitNameTable:
    """Build a :class:`TraitNameTable` from a schema-validated JSON document."""

    result = validate_document(document, NAME_TABLE_SCHEMA)
    if not result["ok"]:
        raise NameTableError("name table failed schema validation", result["errors"])
    return TraitNameTable(document["version"], document["traits"])


def load_name_table(path: str) -> TraitNameTable:
    """Read a name table JSON file from *path*."""

    try:
        with open(path, "r", encoding="utf-8") as handle:
            document = json.load(handle)
    except OSError as exc:
        raise NameTableError(f"cannot read name table {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise NameTableError(f"name table {path} is not valid JSON: {exc}") from exc
    return parse_name_table(document)


__all__ = [
    "DEFAULT_NAME_TABLE",
    "NAMES_PER_CATEGORY",
    "TraitNameTable",
    "load_name_table",
    "parse_name_table",
]
