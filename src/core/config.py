"""Runtime configuration model for tlesync.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    CHECKPOINT_FILE_NAME,
    DEFAULT_CATALOG_URL,
    DEFAULT_DATA_ROOT,
    DEFAULT_MERGE_POLICY,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    SATELLITE_STORE_FILE_NAME,
    SUPPORTED_MERGE_POLICIES,
)
from core.errors import TleSyncConfigError


@dataclass(frozen=True)
class TleSyncConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local directory holding the satellite store and checkpoint.
        catalog_url: Base URL of the paginated TLE catalog.
        request_timeout_seconds: Deadline for a single catalog page.
        merge_policy: Default duplicate handling for persisted records.
    """

    data_root: Path
    catalog_url: str
    request_timeout_seconds: float
    merge_policy: str

    @classmethod
    def from_env(cls) -> "TleSyncConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            TleSyncConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("TLESYNC_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        catalog_url = os.getenv("TLESYNC_CATALOG_URL", DEFAULT_CATALOG_URL).strip()
        if not catalog_url:
            raise TleSyncConfigError(
                "Invalid TLESYNC_CATALOG_URL value: empty string. "
                "Unset it or point it at a paginated TLE catalog."
            )
        timeout_value = os.getenv(
            "TLESYNC_REQUEST_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT_SECONDS)
        )
        merge_policy = os.getenv("TLESYNC_MERGE_POLICY", DEFAULT_MERGE_POLICY)
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            catalog_url=catalog_url,
            request_timeout_seconds=_parse_timeout(timeout_value),
            merge_policy=validate_merge_policy(merge_policy),
        )

    @property
    def satellite_store_path(self) -> Path:
        return self.data_root / SATELLITE_STORE_FILE_NAME

    @property
    def checkpoint_path(self) -> Path:
        return self.data_root / CHECKPOINT_FILE_NAME


def validate_merge_policy(merge_policy: str) -> str:
    """Validate a merge policy name.

    Args:
        merge_policy: Raw policy value.

    Returns:
        The normalized policy name.

    Raises:
        TleSyncConfigError: If the policy is not supported.
    """
    normalized = merge_policy.strip().lower()
    if normalized not in SUPPORTED_MERGE_POLICIES:
        raise TleSyncConfigError(
            f"Unsupported merge policy '{merge_policy}'. "
            f"Use one of: {', '.join(SUPPORTED_MERGE_POLICIES)}."
        )
    return normalized


def _parse_timeout(raw_value: str) -> float:
    """Parse the request timeout environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Timeout in seconds.

    Raises:
        TleSyncConfigError: If value is not a positive number.
    """
    try:
        timeout_seconds = float(raw_value)
    except ValueError as error:
        raise TleSyncConfigError(
            "Invalid TLESYNC_REQUEST_TIMEOUT value: "
            f"expected number of seconds, got '{raw_value}'. "
            "Set TLESYNC_REQUEST_TIMEOUT to a positive number."
        ) from error
    if timeout_seconds <= 0:
        raise TleSyncConfigError(
            f"Invalid TLESYNC_REQUEST_TIMEOUT value: {raw_value} is not positive. "
            "Set TLESYNC_REQUEST_TIMEOUT to a positive number."
        )
    return timeout_seconds
