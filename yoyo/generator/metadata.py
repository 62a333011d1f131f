"""Metadata document assembly and data URI encoding."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from yoyo import codec
from yoyo.core import TRAIT_CATEGORIES, Seed
from yoyo.exceptions import MalformedEncoding

from .names import DEFAULT_NAME_TABLE, TraitNameTable

DATA_URI_PREFIX = "data:application/json;base64,"
IMAGE_SUFFIX = ".png"
DEFAULT_NAME_PREFIX = "YOYO"
DEFAULT_DESCRIPTION = "Generated YOYO DAO NFT (64x64 pixel art)."
DEFAULT_IMAGE_BASE_URI = "REPLACE_ME_WITH_IPFS_CID/"
DEFAULT_EXTERNAL_URL = ""


def build_attributes(seed: Seed, name_table: TraitNameTable) -> List[Dict[str, str]]:
    """Resolve each seed index to its trait name, in category order."""

    return [
        {"trait_type": category.value, "value": name_table.lookup(category, seed[category])}
        for category in TRAIT_CATEGORIES
    ]


def build_metadata(
    identifier: int,
    seed: Seed,
    image_base_uri: str,
    description: str,
    external_url: str,
    name_table: TraitNameTable,
    *,
    name_prefix: str = DEFAULT_NAME_PREFIX,
) -> Dict[str, Any]:
    """Return the metadata object with its keys in publication order."""

    if isinstance(identifier, bool) or not isinstance(identifier, int) or identifier < 0:
        raise ValueError("identifier must be a non-negative integer")

    attributes = build_attributes(seed, name_table)
    return {
        "name": f"{name_prefix} #{identifier}",
        "description": description,
        "external_url": external_url,
        "image": f"{image_base_uri}{identifier}{IMAGE_SUFFIX}",
        "attributes": attributes,
    }


def serialize_metadata(document: Dict[str, Any]) -> bytes:
    """Return the compact UTF-8 JSON form of *document*, preserving key order."""

    return json.dumps(document, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def render_metadata(
    identifier: int,
    seed: Seed,
    image_base_uri: str,
    description: str,
    external_url: str,
    name_table: TraitNameTable,
    *,
    name_prefix: str = DEFAULT_NAME_PREFIX,
) -> str:
    """Return the self-contained ``data:`` URI describing *identifier*.

    Raises:
        IndexOutOfRange: If a seed index has no entry in *name_table*.
    """

    document = build_metadata(
        identifier,
        seed,
        image_base_uri,
        description,
        external_url,
        name_table,
        name_prefix=name_prefix,
    )
    return DATA_URI_PREFIX + codec.encode(serialize_metadata(document))


def decode_metadata(uri: str) -> Dict[str, Any]:
    """Strip the scheme prefix from *uri* and return the embedded JSON object."""

    if not isinstance(uri, str) or not uri.startswith(DATA_URI_PREFIX):
        raise MalformedEncoding(f"metadata URI must start with {DATA_URI_PREFIX!r}")
    payload = codec.decode(uri[len(DATA_URI_PREFIX):])
    try:
        return json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedEncoding(f"metadata payload is not UTF-8 JSON: {exc}") from exc


class MetadataEncoder:
    """Render metadata documents from stored seeds and collection strings."""

    def __init__(
        self,
        *,
        image_base_uri: str = DEFAULT_IMAGE_BASE_URI,
        description: str = DEFAULT_DESCRIPTION,
        external_url: str = DEFAULT_EXTERNAL_URL,
        name_prefix: str = DEFAULT_NAME_PREFIX,
        name_table: Optional[TraitNameTable] = None,
    ) -> None:
        self.image_base_uri = image_base_uri
        self.description = description
        self.external_url = external_url
        self.name_prefix = name_prefix
        self.name_table = name_table or DEFAULT_NAME_TABLE
        self._logger = logging.getLogger(self.__class__.__name__)

    def set_image_base_uri(self, value: str) -> None:
        self.image_base_uri = _require_string(value, "image base URI")

    def set_collection_description(self, value: str) -> None:
        self.description = _require_string(value, "description")

    def set_external_url(self, value: str) -> None:
        self.external_url = _require_string(value, "external URL")

    def build(self, identifier: int, seed: Seed) -> Dict[str, Any]:
        return build_metadata(
            identifier,
            seed,
            self.image_base_uri,
            self.description,
            self.external_url,
            self.name_table,
            name_prefix=self.name_prefix,
        )

    def render(self, identifier: int, seed: Seed) -> str:
        uri = render_metadata(
            identifier,
            seed,
            self.image_base_uri,
            self.description,
            self.external_url,
            self.name_table,
            name_prefix=self.name_prefix,
        )
        self._logger.debug("Rendered metadata for identifier %s (%d chars)", identifier, len(uri))
        return uri


def _require_string(value: Any, label: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{label} must be a string")
    return value


__all__ = [
    "DATA_URI_PREFIX",
    "DEFAULT_DESCRIPTION",
    "DEFAULT_EXTERNAL_URL",
    "DEFAULT_IMAGE_BASE_URI",
    "DEFAULT_NAME_PREFIX",
    "MetadataEncoder",
    "build_attributes",
    "build_metadata",
    "decode_metadata",
    "render_metadata",
    "serialize_metadata",
]
