from __future__ import annotations

import datetime
import functools
import logging
import math

from sgp4.api import SGP4_ERRORS, Satrec, jday

from skywatch.astro.angles import normalize_deg
from skywatch.astro.geodesy import enu_components, geodetic_to_ecef_km, rotate_z
from skywatch.astro.timescale import as_utc, greenwich_sidereal_time_deg
from skywatch.errors import BackendError
from skywatch.types import HorizontalCoordinate, Observer, SatellitePosition, TwoLineElement, Vec3
from .base import SatellitePropagator

logger = logging.getLogger(__name__)

_MINUTES_PER_DAY = 1440.0
DEFAULT_SATREC_CACHE_SIZE = 256


def _compile_tle(line1: str, line2: str) -> Satrec:
    return Satrec.twoline2rv(line1, line2)


class Sgp4Propagator(SatellitePropagator):
    """SGP4 via the ``sgp4`` package.

    TEME positions are rotated to Earth-fixed by Greenwich mean sidereal
    time (no polar motion), then expressed as east/north/up at the site.
    Compiled satellite records are kept in a least-recently-used cache of
    ``cache_size`` line pairs.
    """

    name = "sgp4"

    def __init__(self, cache_size: int = DEFAULT_SATREC_CACHE_SIZE):
        self._compile = functools.lru_cache(maxsize=cache_size)(_compile_tle)

    def _satrec(self, tle: TwoLineElement) -> Satrec:
        try:
            return self._compile(tle.line1, tle.line2)
        except (ValueError, IndexError) as e:
            raise BackendError(f"Malformed TLE for {tle.name}: {e}") from e

    def look_angles(
        self,
        tle: TwoLineElement,
        observer: Observer,
        instant: datetime.datetime,
    ) -> SatellitePosition:
        satrec = self._satrec(tle)
        t = as_utc(instant)
        jd, fr = jday(
            t.year, t.month, t.day,
            t.hour, t.minute,
            t.second + t.microsecond / 1e6,
        )
        error, r_teme, _ = satrec.sgp4(jd, fr)
        if error != 0:
            raise BackendError(
                f"SGP4 error {error} for {tle.name}: {SGP4_ERRORS.get(error, 'unknown')}"
            )

        gmst = math.radians(greenwich_sidereal_time_deg(t))
        r_ecef = rotate_z(Vec3(*r_teme), -gmst)
        site = geodetic_to_ecef_km(observer)
        enu = enu_components(r_ecef - site, observer)
        range_km = enu.norm()
        altitude = math.degrees(math.atan2(enu.z, math.hypot(enu.x, enu.y)))
        azimuth = normalize_deg(math.degrees(math.atan2(enu.x, enu.y)))

        mean_motion = None
        period = None
        if satrec.no_kozai > 0:
            mean_motion = satrec.no_kozai * _MINUTES_PER_DAY / (2.0 * math.pi)
            period = _MINUTES_PER_DAY / mean_motion
        return SatellitePosition(
            name=tle.name,
            horizontal=HorizontalCoordinate(altitude_deg=altitude, azimuth_deg=azimuth),
            range_km=range_km,
            satnum=_satnum(satrec, tle),
            inclination_deg=math.degrees(satrec.inclo),
            mean_motion_rev_per_day=mean_motion,
            period_min=period,
        )

    def is_available(self) -> dict:
        return {"ok": True, "detail": "sgp4 package"}


def _satnum(satrec: Satrec, tle: TwoLineElement) -> int | None:
    satnum = getattr(satrec, "satnum", None)
    if isinstance(satnum, int):
        return satnum
    try:
        return int(tle.line1[2:7].strip())
    except ValueError:
        logger.debug("No catalog number in TLE for %s", tle.name)
        return None
