"""Error taxonomy for trait derivation and metadata encoding."""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class YoyoError(Exception):
    """Base error raised by the yoyo package."""


class InvalidTraitCount(YoyoError, ValueError):
    """Raised when a configured trait count is not a positive integer."""

    def __init__(self, category: Any, count: Any) -> None:
        label = getattr(category, "value", category)
        super().__init__(f"trait count for {label} must be >= 1 (got {count!r})")
        self.category = category
        self.count = count


class IndexOutOfRange(YoyoError, IndexError):
    """Raised when a seed index falls outside its category's name table."""

    def __init__(self, category: Any, index: int, size: int) -> None:
        label = getattr(category, "value", category)
        super().__init__(f"{label} index {index} outside name table of size {size}")
        self.category = category
        self.index = index
        self.size = size


class NotFound(YoyoError, LookupError):
    """Raised when no seed has been persisted for an identifier."""

    def __init__(self, identifier: int) -> None:
        super().__init__(f"no seed stored for identifier {identifier}")
        self.identifier = identifier


class MalformedEncoding(YoyoError, ValueError):
    """Raised when a base64 payload or data URI cannot be decoded."""


class NameTableError(YoyoError, ValueError):
    """Raised when a name table document fails schema validation."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])


__all__ = [
    "IndexOutOfRange",
    "InvalidTraitCount",
    "MalformedEncoding",
    "NameTableError",
    "NotFound",
    "YoyoError",
]
