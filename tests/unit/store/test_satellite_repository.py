"""Unit tests for the satellite repository."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from core.errors import PersistenceError, StoreNotFoundError
from core.types import Cartesian, SatelliteRecord
from store.record_payload import loads_satellite_records
from store.satellite_repository import SatelliteRepository, read_satellite_store
from tests.catalog_fakes import ISS_LINE1, ISS_LINE2


def _record(satellite_id: int, name: str | None = None) -> SatelliteRecord:
    return SatelliteRecord(
        name=name or f"SAT-{satellite_id}",
        line1=ISS_LINE1,
        line2=ISS_LINE2,
        satellite_id=satellite_id,
        epoch=datetime(2019, 12, 9, 16, 38, 29, tzinfo=timezone.utc),
        position=Cartesian(x=1.5, y=-2.25, z=3.0),
    )


def test_flush_then_read_returns_accumulated_records(tmp_path: Path) -> None:
    """Store content should match the accumulated records exactly."""
    repository = SatelliteRepository(tmp_path / "sat.json")
    repository.append(_record(1))
    repository.append(_record(2))

    assert repository.flush() is True
    stored = loads_satellite_records(read_satellite_store(tmp_path / "sat.json"))

    assert stored == [_record(1), _record(2)]


def test_flush_writes_indented_array_with_wire_field_names(tmp_path: Path) -> None:
    """Store should be a human-diffable JSON array keyed by id."""
    repository = SatelliteRepository(tmp_path / "data" / "sat.json")
    repository.append(_record(25544, name="ISS (ZARYA)"))
    repository.flush()

    text = (tmp_path / "data" / "sat.json").read_text(encoding="utf-8")
    payload = json.loads(text)

    assert text.startswith("[\n  {")
    assert payload[0]["id"] == 25544 and payload[0]["position"] == {"x": 1.5, "y": -2.25, "z": 3.0}


def test_flush_returns_false_when_write_fails(tmp_path: Path) -> None:
    """Write failures should be reported, not raised."""
    store_path = tmp_path / "sat.json"
    store_path.mkdir()
    repository = SatelliteRepository(store_path)
    repository.append(_record(1))

    assert repository.flush() is False


def test_append_policy_keeps_duplicates(tmp_path: Path) -> None:
    """Append merge policy should keep every record."""
    repository = SatelliteRepository(tmp_path / "sat.json", merge_policy="append")
    repository.append(_record(1))
    repository.append(_record(1, name="renamed"))

    assert len(repository) == 2


def test_upsert_policy_replaces_in_place(tmp_path: Path) -> None:
    """Upsert merge policy should keep the first position and the latest record."""
    repository = SatelliteRepository(tmp_path / "sat.json", merge_policy="upsert")
    repository.extend([_record(1), _record(2)])
    repository.append(_record(1, name="renamed"))

    assert [record.name for record in repository.records] == ["renamed", "SAT-2"]


def test_load_existing_seeds_from_store(tmp_path: Path) -> None:
    """Previously flushed records should be loaded back."""
    first = SatelliteRepository(tmp_path / "sat.json")
    first.extend([_record(1), _record(2)])
    first.flush()
    second = SatelliteRepository(tmp_path / "sat.json")

    loaded = second.load_existing()

    assert loaded == 2 and second.records == (_record(1), _record(2))


def test_load_existing_accepts_legacy_rows(tmp_path: Path) -> None:
    """Rows written with date/coords keys should still load."""
    legacy = [
        {
            "name": "ISS (ZARYA)",
            "line1": ISS_LINE1,
            "line2": ISS_LINE2,
            "id": 25544,
            "date": "2019-12-09T16:38:29+00:00",
            "coords": {"x": 1.0, "y": 2.0, "z": 3.0},
        },
        {"name": "NO COORDS", "line1": ISS_LINE1, "line2": ISS_LINE2, "id": 25545},
    ]
    (tmp_path / "sat.json").write_text(json.dumps(legacy), encoding="utf-8")
    repository = SatelliteRepository(tmp_path / "sat.json")

    repository.load_existing()

    assert repository.records[0].position == Cartesian(x=1.0, y=2.0, z=3.0)
    assert repository.records[1].position is None
    assert repository.records[1].epoch.year == 2019


def test_load_existing_raises_for_corrupt_store(tmp_path: Path) -> None:
    """A store that is not a JSON array should not be silently replaced."""
    (tmp_path / "sat.json").write_text("{not json", encoding="utf-8")
    repository = SatelliteRepository(tmp_path / "sat.json")

    with pytest.raises(PersistenceError):
        repository.load_existing()


def test_load_existing_returns_zero_without_store(tmp_path: Path) -> None:
    """A fresh data root has nothing to seed."""
    assert SatelliteRepository(tmp_path / "sat.json").load_existing() == 0


def test_read_satellite_store_raises_when_missing(tmp_path: Path) -> None:
    """Reading a never-written store should signal not-found."""
    with pytest.raises(StoreNotFoundError):
        read_satellite_store(tmp_path / "sat.json")
