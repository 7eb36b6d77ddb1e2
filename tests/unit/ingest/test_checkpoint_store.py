"""Unit tests for ingest checkpoint storage."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from core.errors import PersistenceError
from ingest.checkpoint_store import PageCheckpointStore


def test_load_returns_zero_when_never_written(tmp_path: Path) -> None:
    """A missing checkpoint means no prior run."""
    checkpoint = PageCheckpointStore(tmp_path / "lastPage.json")

    assert checkpoint.load() == 0


def test_save_then_load_roundtrips_page(tmp_path: Path) -> None:
    """Saved page should be returned by load."""
    checkpoint = PageCheckpointStore(tmp_path / "lastPage.json")
    checkpoint.save(7)

    assert checkpoint.load() == 7


def test_save_writes_single_object_record(tmp_path: Path) -> None:
    """Checkpoint file should hold exactly the lastPage object."""
    checkpoint_path = tmp_path / "state" / "lastPage.json"
    PageCheckpointStore(checkpoint_path).save(12)

    assert json.loads(checkpoint_path.read_text(encoding="utf-8")) == {"lastPage": 12}


def test_save_leaves_no_temporary_files(tmp_path: Path) -> None:
    """Atomic replace should not leave temp files behind."""
    checkpoint = PageCheckpointStore(tmp_path / "lastPage.json")
    checkpoint.save(3)
    checkpoint.save(4)

    assert [path.name for path in tmp_path.iterdir()] == ["lastPage.json"]


def test_save_rejects_negative_page(tmp_path: Path) -> None:
    """Negative pages are not valid checkpoints."""
    checkpoint = PageCheckpointStore(tmp_path / "lastPage.json")

    with pytest.raises(PersistenceError):
        checkpoint.save(-1)


def test_load_raises_for_malformed_payload(tmp_path: Path) -> None:
    """Corrupt checkpoint content should fail loudly."""
    checkpoint_path = tmp_path / "lastPage.json"
    checkpoint_path.write_text('{"lastPage": "seven"}', encoding="utf-8")

    with pytest.raises(PersistenceError):
        PageCheckpointStore(checkpoint_path).load()


def test_clear_resets_to_zero(tmp_path: Path) -> None:
    """Clearing should make the next load start from scratch."""
    checkpoint = PageCheckpointStore(tmp_path / "lastPage.json")
    checkpoint.save(9)
    checkpoint.clear()

    assert checkpoint.load() == 0
