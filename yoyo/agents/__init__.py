"""Agents that drive minting and metadata review."""

from .critic import MetadataCritic
from .minter import MintingEngine, MintRecord

__all__ = ["MetadataCritic", "MintRecord", "MintingEngine"]
