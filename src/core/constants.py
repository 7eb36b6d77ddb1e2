"""Core constants used across tlesync modules.

Paths, catalog defaults, merge policy names, and the geodesy
constants used by the coordinate converter live here.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".tlesync")
DEFAULT_CATALOG_URL = "https://tle.ivanstanojevic.me/api/tle"
SATELLITE_STORE_FILE_NAME = "sat.json"
CHECKPOINT_FILE_NAME = "lastPage.json"
DEFAULT_PAGE_SIZE = 100
DEFAULT_CONCURRENCY_LIMIT = 10
DEFAULT_REQUEST_TIMEOUT_SECONDS = 40.0
DEFAULT_UNIT_DIVISOR = 1000.0
MERGE_POLICY_APPEND = "append"
MERGE_POLICY_UPSERT = "upsert"
SUPPORTED_MERGE_POLICIES = (MERGE_POLICY_APPEND, MERGE_POLICY_UPSERT)
DEFAULT_MERGE_POLICY = MERGE_POLICY_APPEND
PROJECTION_SPHERE_RADIUS_KM = 6371.0
WGS84_EQUATORIAL_RADIUS_KM = 6378.137
WGS84_POLAR_RADIUS_KM = 6356.7523142
GEODETIC_LATITUDE_ITERATIONS = 20
JULIAN_DATE_J2000 = 2451545.0
JULIAN_DAYS_PER_CENTURY = 36525.0
CATALOG_USER_AGENT = "tlesync/0.1"
DEFAULT_LOG_LEVEL = "INFO"
