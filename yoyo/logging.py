"""Utilities for structured logging of mint and admin events."""

from __future__ import annotations

import datetime as _dt
import json
import os
from typing import Any, Dict, Optional

_LOG_DIR = os.path.join("meta", "output", "yoyo")
DEFAULT_MINT_LOG = os.path.join(_LOG_DIR, "mint.jsonl")
DEFAULT_ADMIN_LOG = os.path.join(_LOG_DIR, "admin.jsonl")
DEFAULT_CRITIC_LOG = os.path.join(_LOG_DIR, "critic.jsonl")


def utc_timestamp() -> str:
    return _dt.datetime.now(tz=_dt.timezone.utc).isoformat()


def log_jsonl(path: str, record: Dict[str, Any]) -> None:
    """Write one mint, admin or review event to the JSONL file at *path*.

    Parent directories are created on first use. Keys are sorted so two runs
    over the same inputs produce identical lines apart from timestamps.
    """

    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(path, "a", encoding="utf-8") as handle:
        handle.write(json.dumps(record, sort_keys=True))
        handle.write("\n")


def log_admin_change(record: Dict[str, Any], *, path: Optional[str] = None) -> None:
    """Append an administrative change *record* to the admin log stream."""

    payload = dict(record)
    payload.setdefault("timestamp", utc_timestamp())
    log_jsonl(path or DEFAULT_ADMIN_LOG, payload)


__all__ = [
    "DEFAULT_ADMIN_LOG",
    "DEFAULT_CRITIC_LOG",
    "DEFAULT_MINT_LOG",
    "log_admin_change",
    "log_jsonl",
    "utc_timestamp",
]
