"""Shared JSON serialization for SatelliteRecord payloads.

This module centralizes SatelliteRecord JSON serialization logic.
It is reused by the satellite repository and the read path of callers.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from core.errors import ConversionFailure
from core.types import Cartesian, CatalogEntry, SatelliteRecord
from transforms.coordinate_conversion import tle_epoch


def satellite_record_from_entry(entry: CatalogEntry, position: Cartesian) -> SatelliteRecord:
    """Merge a catalog entry with its converted position.

    The epoch comes from the catalog ``date`` when it parses, otherwise
    from the TLE line 1 epoch field.

    Raises:
        ConversionFailure: If neither source yields an epoch.
    """
    epoch = parse_timestamp(entry.date) if entry.date else None
    return SatelliteRecord(
        name=entry.name,
        line1=entry.line1,
        line2=entry.line2,
        satellite_id=entry.satellite_id,
        epoch=epoch or tle_epoch(entry.line1),
        position=position,
    )


def satellite_record_to_payload(record: SatelliteRecord) -> dict[str, object]:
    """Serialize SatelliteRecord into JSON-safe payload.

    Args:
        record: Satellite record instance.

    Returns:
        Dictionary payload for JSON encoding.
    """
    position = record.position
    return {
        "name": record.name,
        "line1": record.line1,
        "line2": record.line2,
        "id": record.satellite_id,
        "epoch": record.epoch.isoformat(),
        "position": (
            {"x": position.x, "y": position.y, "z": position.z} if position else None
        ),
    }


def satellite_record_from_payload(payload: dict[str, Any]) -> SatelliteRecord:
    """Deserialize JSON payload into SatelliteRecord.

    Legacy rows that carry ``date``/``coords`` instead of
    ``epoch``/``position`` are accepted.

    Args:
        payload: Serialized record payload.

    Returns:
        Parsed SatelliteRecord.

    Raises:
        ValueError: If identity or TLE fields are missing.
    """
    try:
        satellite_id = int(payload["id"])
        line1 = str(payload["line1"])
        line2 = str(payload["line2"])
    except (KeyError, TypeError, ValueError) as error:
        raise ValueError(f"missing or invalid satellite field {error}") from error
    epoch_value = payload.get("epoch") or payload.get("date")
    epoch = parse_timestamp(str(epoch_value)) if epoch_value else None
    if epoch is None:
        try:
            epoch = tle_epoch(line1)
        except ConversionFailure as error:
            raise ValueError(f"satellite {satellite_id} has no usable epoch") from error
    position_payload = payload.get("position") or payload.get("coords")
    return SatelliteRecord(
        name=str(payload.get("name", "")),
        line1=line1,
        line2=line2,
        satellite_id=satellite_id,
        epoch=epoch,
        position=_position_from_payload(position_payload),
    )


def dumps_satellite_records(records: list[SatelliteRecord]) -> str:
    """Render records as an indented, human-diffable JSON array."""
    payloads = [satellite_record_to_payload(record) for record in records]
    return json.dumps(payloads, indent=2, ensure_ascii=False) + "\n"


def loads_satellite_records(text: str) -> list[SatelliteRecord]:
    """Parse a serialized satellite store.

    Raises:
        ValueError: If the text is not a JSON array of record objects.
    """
    try:
        payloads = json.loads(text)
    except json.JSONDecodeError as error:
        raise ValueError(f"Invalid JSON at line {error.lineno}: {error.msg}") from error
    if not isinstance(payloads, list):
        raise ValueError("Invalid satellite store: expected a JSON array")
    records: list[SatelliteRecord] = []
    for index, payload in enumerate(payloads):
        if not isinstance(payload, dict):
            raise ValueError(f"Invalid satellite store row {index}: expected JSON object")
        records.append(satellite_record_from_payload(payload))
    return records


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO timestamp as UTC, None when it does not parse."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _position_from_payload(payload: Any) -> Cartesian | None:
    """Parse an optional position object."""
    if not isinstance(payload, dict):
        return None
    try:
        return Cartesian(x=float(payload["x"]), y=float(payload["y"]), z=float(payload["z"]))
    except (KeyError, TypeError, ValueError):
        return None
