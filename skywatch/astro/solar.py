"""Low-precision Sun and Moon positions for ambient sky conditions.

Good to a fraction of a degree, which is ample for twilight and moonlight
factors. Do not use these for pointing.
"""

import datetime
import math

from skywatch.types import EquatorialCoordinate, MoonPhase, Observer, SkyConditions
from .angles import clamp_unit, normalize_deg
from .coordinates import angular_separation_deg, equatorial_to_horizontal
from .timescale import days_since_j2000, as_utc

SYNODIC_MONTH_DAYS = 29.530588

# Upper phase bounds; anything at or past the last bound is new again.
_PHASE_NAMES = (
    (0.03, "New Moon"),
    (0.22, "Waxing Crescent"),
    (0.28, "First Quarter"),
    (0.47, "Waxing Gibbous"),
    (0.53, "Full Moon"),
    (0.72, "Waning Gibbous"),
    (0.78, "Last Quarter"),
    (0.97, "Waning Crescent"),
)


def _obliquity(n: float) -> float:
    return math.radians(23.439 - 0.0000004 * n)


def _sun_longitude(n: float) -> float:
    l = math.radians((280.460 + 0.9856474 * n) % 360.0)
    g = math.radians((357.528 + 0.9856003 * n) % 360.0)
    return l + math.radians(1.915) * math.sin(g) + math.radians(0.020) * math.sin(2 * g)


def _moon_ecliptic(n: float) -> tuple[float, float]:
    l = math.radians((218.316 + 13.176396 * n) % 360.0)
    m = math.radians((134.963 + 13.064993 * n) % 360.0)
    f = math.radians((93.272 + 13.229350 * n) % 360.0)
    return l + math.radians(6.289) * math.sin(m), math.radians(5.128) * math.sin(f)


def sun_equatorial(dt: datetime.datetime) -> EquatorialCoordinate:
    n = days_since_j2000(dt)
    lam = _sun_longitude(n)
    eps = _obliquity(n)
    ra = math.atan2(math.cos(eps) * math.sin(lam), math.cos(lam))
    dec = math.asin(clamp_unit(math.sin(eps) * math.sin(lam)))
    return EquatorialCoordinate(normalize_deg(math.degrees(ra)), math.degrees(dec))


def moon_equatorial(dt: datetime.datetime) -> EquatorialCoordinate:
    n = days_since_j2000(dt)
    lam, beta = _moon_ecliptic(n)
    eps = _obliquity(n)
    sin_dec = math.sin(beta) * math.cos(eps) + math.cos(beta) * math.sin(eps) * math.sin(lam)
    dec = math.asin(clamp_unit(sin_dec))
    y = math.sin(lam) * math.cos(eps) - math.tan(beta) * math.sin(eps)
    x = math.cos(lam)
    ra = math.atan2(y, x)
    return EquatorialCoordinate(normalize_deg(math.degrees(ra)), math.degrees(dec))


def moon_illumination_fraction(dt: datetime.datetime) -> float:
    elong = math.radians(angular_separation_deg(sun_equatorial(dt), moon_equatorial(dt)))
    return (1.0 - math.cos(elong)) / 2.0


def moon_phase_name(phase: float) -> str:
    for bound, name in _PHASE_NAMES:
        if phase < bound:
            return name
    return "New Moon"


def moon_phase(dt: datetime.datetime) -> MoonPhase:
    """Phase in [0, 1): 0 new, 0.25 first quarter, 0.5 full, 0.75 last quarter.

    The phase is the Moon's ecliptic longitude ahead of the Sun's, as a
    fraction of a turn, so it separates waxing from waning. The age assumes
    a mean synodic month.
    """
    n = days_since_j2000(dt)
    moon_lon, _ = _moon_ecliptic(n)
    phase = normalize_deg(math.degrees(moon_lon - _sun_longitude(n))) / 360.0
    return MoonPhase(
        phase=phase,
        name=moon_phase_name(phase),
        age_days=phase * SYNODIC_MONTH_DAYS,
        illumination_frac=moon_illumination_fraction(dt),
    )


def sky_conditions(
    observer: Observer,
    instant: datetime.datetime,
    bortle_scale: int,
) -> SkyConditions:
    instant = as_utc(instant)
    phase = moon_phase(instant)
    return SkyConditions(
        observer=observer,
        instant=instant,
        bortle_scale=bortle_scale,
        sun=equatorial_to_horizontal(sun_equatorial(instant), observer, instant),
        moon=equatorial_to_horizontal(moon_equatorial(instant), observer, instant),
        moon_illumination_frac=phase.illumination_frac,
        moon_phase=phase,
    )
