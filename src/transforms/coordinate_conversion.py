"""TLE to Cartesian coordinate conversion.

This module propagates a two-line element set with SGP4 to a given instant,
rotates the inertial position into geodetic coordinates using Greenwich
mean sidereal time, and projects the result onto a sphere of radius
``height + 6371`` km scaled by a unit divisor.

Reference frames:
    ECI      - TEME position returned by SGP4, in km.
    Geodetic - Latitude/longitude/height on the WGS84 ellipsoid.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

from sgp4.api import Satrec, jday

from core.constants import (
    DEFAULT_UNIT_DIVISOR,
    GEODETIC_LATITUDE_ITERATIONS,
    JULIAN_DATE_J2000,
    JULIAN_DAYS_PER_CENTURY,
    PROJECTION_SPHERE_RADIUS_KM,
    WGS84_EQUATORIAL_RADIUS_KM,
    WGS84_POLAR_RADIUS_KM,
)
from core.errors import ConversionFailure
from core.types import Cartesian, Geodetic

_TWO_PI = 2.0 * math.pi


def convert_tle_to_cartesian(
    line1: str,
    line2: str,
    at_instant: datetime,
    unit_divisor: float = DEFAULT_UNIT_DIVISOR,
) -> Cartesian:
    """Convert a TLE into a scaled Cartesian position at an instant.

    Args:
        line1: First TLE line.
        line2: Second TLE line.
        at_instant: Propagation instant, naive values are treated as UTC.
        unit_divisor: Divisor applied to every axis.

    Returns:
        Scaled Cartesian position.

    Raises:
        ConversionFailure: If the TLE is unusable or SGP4 yields no position.
    """
    if unit_divisor <= 0:
        raise ConversionFailure(
            f"Invalid unit divisor {unit_divisor}: expected a positive number."
        )
    instant = _as_utc(at_instant)
    position_eci = propagate_eci_position(line1, line2, instant)
    gmst = gmst_rad(julian_date(instant))
    geodetic = eci_to_geodetic(position_eci, gmst)
    return project_to_sphere(geodetic, unit_divisor)


def propagate_eci_position(
    line1: str,
    line2: str,
    at_instant: datetime,
) -> tuple[float, float, float]:
    """Propagate a TLE to an instant and return its ECI position in km.

    Raises:
        ConversionFailure: If parsing fails or SGP4 reports an error code.
    """
    try:
        satrec = Satrec.twoline2rv(line1, line2)
    except (ValueError, IndexError) as error:
        raise ConversionFailure(f"Unparseable TLE lines: {error}") from error
    if satrec.error != 0:
        raise ConversionFailure(f"SGP4 initialization error {satrec.error}")
    instant = _as_utc(at_instant)
    jd, fr = jday(
        instant.year,
        instant.month,
        instant.day,
        instant.hour,
        instant.minute,
        instant.second + instant.microsecond / 1e6,
    )
    error_code, position_km, _velocity = satrec.sgp4(jd, fr)
    if error_code != 0 or not all(math.isfinite(value) for value in position_km):
        raise ConversionFailure(
            f"SGP4 propagation error {error_code}: no position for satellite "
            f"{satrec.satnum} at {instant.isoformat()}"
        )
    return (position_km[0], position_km[1], position_km[2])


def julian_date(instant: datetime) -> float:
    """Return the Julian date of a UTC instant."""
    instant = _as_utc(instant)
    jd, fr = jday(
        instant.year,
        instant.month,
        instant.day,
        instant.hour,
        instant.minute,
        instant.second + instant.microsecond / 1e6,
    )
    return jd + fr


def gmst_rad(jd_ut1: float) -> float:
    """Compute Greenwich mean sidereal time (IAU-82 polynomial).

    Args:
        jd_ut1: Julian date in UT1, approximated by UTC.

    Returns:
        GMST in radians, normalized to [0, 2pi).
    """
    t_centuries = (jd_ut1 - JULIAN_DATE_J2000) / JULIAN_DAYS_PER_CENTURY
    gmst_seconds = (
        -6.2e-6 * t_centuries**3
        + 0.093104 * t_centuries**2
        + (876600.0 * 3600.0 + 8640184.812866) * t_centuries
        + 67310.54841
    )
    # 240 sidereal seconds per degree
    gmst = math.fmod(math.radians(gmst_seconds) / 240.0, _TWO_PI)
    if gmst < 0.0:
        gmst += _TWO_PI
    return gmst


def eci_to_geodetic(
    position_eci: tuple[float, float, float],
    gmst: float,
) -> Geodetic:
    """Convert an ECI position to WGS84 geodetic coordinates.

    Latitude is refined iteratively from the spherical estimate.

    Args:
        position_eci: ECI position (x, y, z) in km.
        gmst: Greenwich mean sidereal time in radians.

    Returns:
        Geodetic latitude/longitude in radians and height in km.
    """
    a = WGS84_EQUATORIAL_RADIUS_KM
    b = WGS84_POLAR_RADIUS_KM
    flattening = (a - b) / a
    e2 = 2.0 * flattening - flattening * flattening

    x, y, z = position_eci
    r = math.sqrt(x * x + y * y)

    longitude = math.atan2(y, x) - gmst
    while longitude < -math.pi:
        longitude += _TWO_PI
    while longitude > math.pi:
        longitude -= _TWO_PI

    latitude = math.atan2(z, r)
    c = 1.0
    for _ in range(GEODETIC_LATITUDE_ITERATIONS):
        sin_lat = math.sin(latitude)
        c = 1.0 / math.sqrt(1.0 - e2 * sin_lat * sin_lat)
        latitude = math.atan2(z + a * c * e2 * sin_lat, r)

    height = r / math.cos(latitude) - a * c
    return Geodetic(latitude=latitude, longitude=longitude, height=height)


def project_to_sphere(geodetic: Geodetic, unit_divisor: float) -> Cartesian:
    """Project geodetic coordinates onto a sphere of radius height + 6371 km.

    Uses ``phi = 90 - lat`` and ``theta = 90 - lon`` (degrees) as the polar
    and azimuthal angles, then scales every axis by ``1 / unit_divisor``.
    """
    latitude_deg = math.degrees(geodetic.latitude)
    longitude_deg = math.degrees(geodetic.longitude)
    rho = geodetic.height + PROJECTION_SPHERE_RADIUS_KM
    phi = math.radians(90.0 - latitude_deg)
    theta = math.radians(90.0 - longitude_deg)
    return Cartesian(
        x=rho * math.sin(phi) * math.cos(theta) / unit_divisor,
        y=rho * math.sin(phi) * math.sin(theta) / unit_divisor,
        z=rho * math.cos(phi) / unit_divisor,
    )


def tle_epoch(line1: str) -> datetime:
    """Decode the element set epoch from TLE line 1 (columns 19-32).

    Raises:
        ConversionFailure: If the epoch field is malformed.
    """
    field = line1[18:32].strip()
    try:
        two_digit_year = int(field[:2])
        day_of_year = float(field[2:])
    except ValueError as error:
        raise ConversionFailure(f"Malformed TLE epoch field '{field}'") from error
    year = 2000 + two_digit_year if two_digit_year < 57 else 1900 + two_digit_year
    return datetime(year, 1, 1, tzinfo=timezone.utc) + timedelta(days=day_of_year - 1.0)


def _as_utc(instant: datetime) -> datetime:
    """Treat naive datetimes as UTC and normalize aware ones to UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)
