"""Global pytest configuration for the YOYO suite."""

from __future__ import annotations

import os
import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest


@pytest.fixture(autouse=True)
def _isolated_workspace(tmp_path, monkeypatch) -> None:
    """Keep relative log and store paths inside a per-test directory."""

    for key in list(os.environ):
        if key.startswith("YOYO_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
