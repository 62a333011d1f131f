"""Seed derivation and metadata encoding for YOYO characters."""

from __future__ import annotations

from .metadata import MetadataEncoder, decode_metadata, render_metadata
from .names import DEFAULT_NAME_TABLE, TraitNameTable, load_name_table
from .seed import SeedGenerator, generate_seed

__all__ = [
    "DEFAULT_NAME_TABLE",
    "MetadataEncoder",
    "SeedGenerator",
    "TraitNameTable",
    "decode_metadata",
    "generate_seed",
    "load_name_table",
    "render_metadata",
]
