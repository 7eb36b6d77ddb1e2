"""Typed YAML run specs for declarative ingest runs.

A run spec pins the data root and ingest options in a file so scheduled
jobs do not depend on CLI flags:

    version: 1
    data_root: ./.tlesync
    ingest:
      page_size: 100
      concurrency: 10
      unit_divisor: 1000
      merge_policy: upsert
      reset: false
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

import yaml

from core.config import validate_merge_policy
from core.constants import (
    DEFAULT_CONCURRENCY_LIMIT,
    DEFAULT_PAGE_SIZE,
    DEFAULT_UNIT_DIVISOR,
)
from core.errors import TleSyncConfigError, TleSyncRunSpecError
from core.types import IngestOptions

_ROOT_KEYS = {"version", "data_root", "ingest"}
_INGEST_KEYS = {"page_size", "concurrency", "unit_divisor", "merge_policy", "reset"}


@dataclass(frozen=True)
class IngestRunSpec:
    """Validated run spec root object."""

    version: int
    data_root: Path | None
    options: IngestOptions


def load_run_spec(spec_path: str) -> IngestRunSpec:
    """Load and validate a YAML run spec from disk.

    Args:
        spec_path: File path to the YAML run spec.

    Returns:
        Fully validated run spec. A relative ``data_root`` is resolved
        against the run spec file's directory.

    Raises:
        TleSyncRunSpecError: If the file is missing, unparseable, or
            fails schema checks.
    """
    spec_file = Path(spec_path).expanduser().resolve()
    payload = _load_yaml_payload(spec_file)
    root_mapping = _expect_mapping(payload, "run spec root")
    _reject_unknown_keys(root_mapping, _ROOT_KEYS, "run spec root")
    version = root_mapping.get("version")
    if isinstance(version, bool) or version != 1:
        raise TleSyncRunSpecError(
            f"Unsupported run spec version {version!r} in {spec_file}. Use version: 1."
        )
    return IngestRunSpec(
        version=1,
        data_root=_parse_data_root(root_mapping.get("data_root"), spec_file.parent),
        options=_parse_ingest_options(root_mapping.get("ingest")),
    )


def _load_yaml_payload(spec_file: Path) -> object:
    if not spec_file.exists():
        raise TleSyncRunSpecError(
            f"Run spec file does not exist at {spec_file}. Provide a valid YAML file path."
        )
    try:
        payload = yaml.safe_load(spec_file.read_text(encoding="utf-8"))
    except OSError as error:
        raise TleSyncRunSpecError(
            f"Failed to read run spec at {spec_file}: {error}. Check file permissions and retry."
        ) from error
    except yaml.YAMLError as error:
        raise TleSyncRunSpecError(
            f"Failed to parse YAML run spec at {spec_file}: {error}. Fix YAML syntax and retry."
        ) from error
    if payload is None:
        raise TleSyncRunSpecError(f"Run spec at {spec_file} is empty. Define 'version: 1'.")
    return payload


def _parse_data_root(raw_value: object, spec_dir: Path) -> Path | None:
    if raw_value is None:
        return None
    if not isinstance(raw_value, str) or not raw_value.strip():
        raise TleSyncRunSpecError("Run spec field 'data_root' must be a non-empty string.")
    data_root = Path(raw_value.strip()).expanduser()
    if not data_root.is_absolute():
        data_root = spec_dir / data_root
    return data_root.resolve()


def _parse_ingest_options(raw_value: object) -> IngestOptions:
    if raw_value is None:
        return IngestOptions()
    ingest_mapping = _expect_mapping(raw_value, "run spec ingest section")
    _reject_unknown_keys(ingest_mapping, _INGEST_KEYS, "run spec ingest section")
    merge_policy = ingest_mapping.get("merge_policy")
    if merge_policy is not None:
        if not isinstance(merge_policy, str):
            raise TleSyncRunSpecError("Run spec field 'merge_policy' must be a string.")
        try:
            merge_policy = validate_merge_policy(merge_policy)
        except TleSyncConfigError as error:
            raise TleSyncRunSpecError(str(error)) from error
    reset = ingest_mapping.get("reset", False)
    if not isinstance(reset, bool):
        raise TleSyncRunSpecError("Run spec field 'reset' must be true or false.")
    return IngestOptions(
        page_size=_positive_int(ingest_mapping, "page_size", DEFAULT_PAGE_SIZE),
        concurrency_limit=_positive_int(
            ingest_mapping, "concurrency", DEFAULT_CONCURRENCY_LIMIT
        ),
        unit_divisor=_positive_float(ingest_mapping, "unit_divisor", DEFAULT_UNIT_DIVISOR),
        merge_policy=merge_policy,
        reset=reset,
    )


def _positive_int(mapping: Mapping[str, object], field_name: str, default: int) -> int:
    raw_value = mapping.get(field_name, default)
    if isinstance(raw_value, bool) or not isinstance(raw_value, int) or raw_value < 1:
        raise TleSyncRunSpecError(
            f"Run spec field '{field_name}' must be a positive integer, got {raw_value!r}."
        )
    return raw_value


def _positive_float(mapping: Mapping[str, object], field_name: str, default: float) -> float:
    raw_value = mapping.get(field_name, default)
    if isinstance(raw_value, bool) or not isinstance(raw_value, (int, float)) or raw_value <= 0:
        raise TleSyncRunSpecError(
            f"Run spec field '{field_name}' must be a positive number, got {raw_value!r}."
        )
    return float(raw_value)


def _expect_mapping(value: object, context: str) -> Mapping[str, object]:
    if not isinstance(value, Mapping):
        raise TleSyncRunSpecError(
            f"Invalid {context}: expected object mapping, got {type(value).__name__}."
        )
    for key in value:
        if not isinstance(key, str):
            raise TleSyncRunSpecError(
                f"Invalid {context}: expected string keys, got {type(key).__name__}."
            )
    return value


def _reject_unknown_keys(
    mapping: Mapping[str, object],
    allowed_keys: set[str],
    context: str,
) -> None:
    unknown_keys = sorted(set(mapping) - allowed_keys)
    if unknown_keys:
        raise TleSyncRunSpecError(
            f"{context.capitalize()} contains unknown fields: {', '.join(unknown_keys)}."
        )
