"""Environment-driven collection settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional

from yoyo.core import TraitCountsConfig
from yoyo.generator.metadata import (
    DEFAULT_DESCRIPTION,
    DEFAULT_EXTERNAL_URL,
    DEFAULT_IMAGE_BASE_URI,
    DEFAULT_NAME_PREFIX,
)
from yoyo.generator.seed import DEFAULT_HASH

DEFAULT_STORE_PATH = os.path.join("meta", "output", "yoyo", "store.json")


@dataclass(frozen=True)
class CollectionSettings:
    """Strings and counts that feed seed derivation and document assembly."""

    name_prefix: str = DEFAULT_NAME_PREFIX
    description: str = DEFAULT_DESCRIPTION
    external_url: str = DEFAULT_EXTERNAL_URL
    image_base_uri: str = DEFAULT_IMAGE_BASE_URI
    trait_counts: TraitCountsConfig = field(default_factory=lambda: TraitCountsConfig.uniform(1))
    hash_name: str = DEFAULT_HASH

    def with_updates(self, **changes: Any) -> "CollectionSettings":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name_prefix": self.name_prefix,
            "description": self.description,
            "external_url": self.external_url,
            "image_base_uri": self.image_base_uri,
            "trait_counts": self.trait_counts.to_list(),
            "hash_name": self.hash_name,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CollectionSettings":
        defaults = cls()
        counts = payload.get("trait_counts")
        return cls(
            name_prefix=payload.get("name_prefix", defaults.name_prefix),
            description=payload.get("description", defaults.description),
            external_url=payload.get("external_url", defaults.external_url),
            image_base_uri=payload.get("image_base_uri", defaults.image_base_uri),
            trait_counts=(
                TraitCountsConfig.from_sequence(counts) if counts is not None else defaults.trait_counts
            ),
            hash_name=payload.get("hash_name", defaults.hash_name),
        )


def load_settings(env: Optional[Mapping[str, str]] = None) -> CollectionSettings:
    """Build settings from ``YOYO_*`` environment variables.

    Unset variables fall back to the defaults of :class:`CollectionSettings`.
    A malformed ``YOYO_TRAIT_COUNTS`` raises :class:`ValueError`.
    """

    source = os.environ if env is None else env
    defaults = CollectionSettings()

    raw_counts = source.get("YOYO_TRAIT_COUNTS")
    counts = TraitCountsConfig.parse(raw_counts) if raw_counts else defaults.trait_counts

    return CollectionSettings(
        name_prefix=source.get("YOYO_NAME_PREFIX", defaults.name_prefix),
        description=source.get("YOYO_DESCRIPTION", defaults.description),
        external_url=source.get("YOYO_EXTERNAL_URL", defaults.external_url),
        image_base_uri=source.get("YOYO_IMAGE_BASE_URI", defaults.image_base_uri),
        trait_counts=counts,
        hash_name=(source.get("YOYO_HASH") or defaults.hash_name).strip().lower(),
    )


def store_path(env: Optional[Mapping[str, str]] = None) -> str:
    source = os.environ if env is None else env
    return source.get("YOYO_STORE_PATH") or DEFAULT_STORE_PATH


__all__ = ["CollectionSettings", "DEFAULT_STORE_PATH", "load_settings", "store_path"]
