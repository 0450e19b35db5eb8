"""Julian date and sidereal time.

Instants are ``datetime.datetime`` values; naive values are taken as UTC.
The sidereal-time polynomial has no higher-order or nutation terms and is
good to about an arc-minute for calendar years 1900-2100.
"""

import datetime
import math

from skywatch.errors import InvalidInputError
from .angles import normalize_deg, require_finite

J2000_JD = 2451545.0
UNIX_EPOCH_JD = 2440587.5

_UNIX_EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)
_ONE_DAY = datetime.timedelta(days=1)


def as_utc(dt: datetime.datetime) -> datetime.datetime:
    if not isinstance(dt, datetime.datetime):
        raise InvalidInputError(f"Expected a datetime instant, got {type(dt).__name__}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=datetime.timezone.utc)
    return dt.astimezone(datetime.timezone.utc)


def to_julian_date(dt: datetime.datetime) -> float:
    return (as_utc(dt) - _UNIX_EPOCH) / _ONE_DAY + UNIX_EPOCH_JD


def from_julian_date(jd: float) -> datetime.datetime:
    jd = require_finite("jd", jd)
    try:
        return _UNIX_EPOCH + datetime.timedelta(days=jd - UNIX_EPOCH_JD)
    except OverflowError as e:
        raise InvalidInputError(f"Julian date {jd} is outside the datetime range") from e


def days_since_j2000(dt: datetime.datetime) -> float:
    return to_julian_date(dt) - J2000_JD


def greenwich_sidereal_time_from_jd(jd: float) -> float:
    d = require_finite("jd", jd) - J2000_JD
    return normalize_deg(280.46061837 + 360.98564736629 * d)


def greenwich_sidereal_time_deg(dt: datetime.datetime) -> float:
    return greenwich_sidereal_time_from_jd(to_julian_date(dt))


def local_sidereal_time_deg(dt: datetime.datetime, longitude_deg: float) -> float:
    longitude_deg = require_finite("longitude_deg", longitude_deg)
    return normalize_deg(greenwich_sidereal_time_deg(dt) + longitude_deg)


def local_sidereal_time_rad(dt: datetime.datetime, longitude_deg: float) -> float:
    return math.radians(local_sidereal_time_deg(dt, longitude_deg))
