"""Shared fixture helpers for tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

FIXTURES_ROOT = Path(__file__).resolve().parent / "fixtures"


def fixture_path(relative_path: str) -> Path:
    """Resolve a path under tests/fixtures."""
    return FIXTURES_ROOT / relative_path


def load_json_fixture(relative_path: str) -> Any:
    """Decode a JSON fixture, e.g. a recorded catalog page."""
    return json.loads(fixture_path(relative_path).read_text(encoding="utf-8"))
