"""Public SDK surface for tlesync.

This module provides a stable import path for library users.
It re-exports the primary client, pipeline entry, and typed models.
"""

from __future__ import annotations

from api.server import create_app
from core.config import TleSyncConfig
from core.types import Cartesian, IngestOptions, IngestSummary, SatelliteRecord
from ingest.pipeline import IngestPipelineRunner, ingest_satellites
from store.satellite_sdk import TleSyncClient
from transforms.coordinate_conversion import convert_tle_to_cartesian

__all__ = [
    "Cartesian",
    "IngestOptions",
    "IngestPipelineRunner",
    "IngestSummary",
    "SatelliteRecord",
    "TleSyncClient",
    "TleSyncConfig",
    "convert_tle_to_cartesian",
    "create_app",
    "ingest_satellites",
]
