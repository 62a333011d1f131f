"""Local JSON Schema validation helpers for metadata and name tables."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Mapping

from jsonschema import Draft202012Validator, ValidationError

METADATA_SCHEMA = "metadata"
NAME_TABLE_SCHEMA = "name-table"

_SCHEMA_SUFFIX = ".schema.json"
_SCHEMAS_ENV = "YOYO_SCHEMAS_DIR"


def _bundled_schema_root() -> Path:
    return Path(__file__).resolve().parent / "schemas"


def _iter_schema_roots() -> Iterator[Path]:
    """Yield schema directories in priority order."""

    env_value = os.getenv(_SCHEMAS_ENV, "").strip()
    if env_value:
        for chunk in env_value.split(os.pathsep):
            if not chunk:
                continue
            path = Path(chunk).expanduser()
            if path.is_dir():
                yield path
    yield _bundled_schema_root()


def load_schema(name: str) -> Dict[str, Any]:
    """Return the schema document called *name* from the first root that has it."""

    filename = f"{name}{_SCHEMA_SUFFIX}"
    for root in _iter_schema_roots():
        candidate = root / filename
        if candidate.is_file():
            with candidate.open("r", encoding="utf-8") as handle:
                return json.load(handle)
    raise FileNotFoundError(f"schema {filename} not found")


def validate_document(candidate: Mapping[str, Any], schema_name: str) -> Dict[str, Any]:
    """Validate *candidate* against the named schema and summarise the result."""

    if not isinstance(candidate, Mapping):
        return {
            "ok": False,
            "reason": "not_an_object",
            "errors": [{"message": "document must be a JSON object", "path": []}],
        }

    schema = load_schema(schema_name)
    validator = Draft202012Validator(schema)
    errors = list(_collect_errors(validator.iter_errors(dict(candidate))))
    if errors:
        return {"ok": False, "reason": "validation_failed", "errors": errors}
    return {"ok": True, "reason": "validation_passed", "errors": []}


def _collect_errors(raw_errors: Iterable[ValidationError]):
    for error in sorted(raw_errors, key=lambda item: [str(part) for part in item.absolute_path]):
        yield {
            "message": error.message,
            "path": list(error.absolute_path),
        }


__all__ = ["METADATA_SCHEMA", "NAME_TABLE_SCHEMA", "load_schema", "validate_document"]
