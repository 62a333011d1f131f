"""YOYO trait seeds and on-chain style metadata documents."""

from .agents.critic import MetadataCritic
from .agents.minter import MintingEngine

__all__ = ["MetadataCritic", "MintingEngine"]
