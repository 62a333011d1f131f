"""Critic agent that checks rendered metadata documents before publication."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional

from yoyo.core import TRAIT_CATEGORIES
from yoyo.exceptions import MalformedEncoding
from yoyo.generator.metadata import decode_metadata
from yoyo.logging import DEFAULT_CRITIC_LOG, log_jsonl, utc_timestamp
from yoyo.validate import METADATA_SCHEMA, validate_document

_EXPECTED_KEYS = ["name", "description", "external_url", "image", "attributes"]


class MetadataCritic:
    """Review token URIs the way a marketplace indexer would parse them."""

    def __init__(self, *, log_path: str = DEFAULT_CRITIC_LOG) -> None:
        self.log_path = log_path
        self._logger = logging.getLogger(self.__class__.__name__)

    def review(self, uri: str, *, identifier: Optional[int] = None) -> Dict[str, Any]:
        """Decode *uri*, validate the document and return a review payload.

        Decoding failures are reported in the review instead of raised.
        """

        issues: List[str] = []
        document: Optional[Dict[str, Any]] = None
        validation: Dict[str, Any] = {"ok": False, "reason": "not_attempted", "errors": []}

        try:
            document = decode_metadata(uri)
        except MalformedEncoding as exc:
            issues.append(f"undecodable metadata: {exc}")
            validation = {"ok": False, "reason": "decode_failed", "errors": []}

        if document is not None:
            validation = validate_document(document, METADATA_SCHEMA)
            for error in validation["errors"]:
                location = "/".join(str(part) for part in error["path"]) or "<root>"
                issues.append(f"{location}: {error['message']}")

            if isinstance(document, dict):
                if list(document.keys()) != _EXPECTED_KEYS:
                    issues.append(f"unexpected key order: {list(document.keys())}")
                issues.extend(self._check_attribute_order(document.get("attributes")))
                name = document.get("name")
                if identifier is not None and (
                    not isinstance(name, str) or name.rsplit("#", 1)[-1] != str(identifier)
                ):
                    issues.append(f"name does not reference identifier {identifier}")

        ok = not issues and bool(validation.get("ok"))
        review = {
            "ok": ok,
            "issues": issues,
            "document": document,
            "identifier": identifier,
            "reviewed_at": utc_timestamp(),
            "validation_status": "passed" if ok else "failed",
            "validation_reason": validation.get("reason"),
            "trace_id": str(uuid.uuid4()),
        }

        if ok:
            self._logger.info("Metadata review passed for identifier %s", identifier)
        else:
            self._logger.warning("Metadata review failed for identifier %s: %s", identifier, issues)
        log_jsonl(self.log_path, review)
        return review

    @staticmethod
    def _check_attribute_order(attributes: Any) -> List[str]:
        if not isinstance(attributes, list):
            return []
        observed = [entry.get("trait_type") for entry in attributes if isinstance(entry, dict)]
        expected = [category.value for category in TRAIT_CATEGORIES]
        if observed != expected:
            return [f"attribute order {observed} does not match {expected}"]
        return []


__all__ = ["MetadataCritic"]
