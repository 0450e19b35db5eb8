"""Bortle class estimates from a table of light-polluting sites.

The nearest listed site sets the sky class; the sky darkens with distance
from it. Far from every listed site a moderate sky is assumed.
"""

from dataclasses import dataclass
import logging
import math
from typing import Iterable

from skywatch.visibility import bortle_description, clamp_bortle

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0

DEFAULT_BORTLE = 6
REMOTE_BORTLE = 5
REMOTE_DISTANCE_KM = 350.0
URBAN_CORE_KM = 30.0
DARKENING_SPAN_KM = 170.0
MAX_DARKENING_CLASSES = 3.0

_VISIBLE_STAR_COUNTS = {
    1: 7500,
    2: 5000,
    3: 2500,
    4: 1000,
    5: 500,
    6: 250,
    7: 100,
    8: 50,
    9: 10,
}


@dataclass(frozen=True)
class LightPollutionSite:
    name: str
    latitude_deg: float
    longitude_deg: float
    bortle: int


@dataclass(frozen=True)
class BortleEstimate:
    bortle: int
    nearest_site: str | None = None
    distance_km: float | None = None

    @property
    def description(self) -> str:
        return bortle_description(self.bortle)


def haversine_distance_km(
    a: tuple[float, float], b: tuple[float, float]
) -> float:
    """Great-circle distance between two (lat, lon) pairs in degrees."""
    lat1, lon1 = map(math.radians, a)
    lat2, lon2 = map(math.radians, b)
    s1 = math.sin((lat2 - lat1) / 2.0)
    s2 = math.sin((lon2 - lon1) / 2.0)
    h = s1 * s1 + math.cos(lat1) * math.cos(lat2) * s2 * s2
    return 2.0 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def estimate_bortle_for_location(
    latitude_deg: float,
    longitude_deg: float,
    sites: Iterable[LightPollutionSite],
) -> BortleEstimate:
    if not (math.isfinite(latitude_deg) and math.isfinite(longitude_deg)):
        return BortleEstimate(bortle=DEFAULT_BORTLE)

    here = (latitude_deg, longitude_deg)
    best: LightPollutionSite | None = None
    best_km = math.inf
    for site in sites:
        d = haversine_distance_km(here, (site.latitude_deg, site.longitude_deg))
        if d < best_km:
            best, best_km = site, d

    if best is None:
        logger.debug("No light pollution sites; assuming Bortle %d", DEFAULT_BORTLE)
        return BortleEstimate(bortle=DEFAULT_BORTLE)

    if best_km > REMOTE_DISTANCE_KM:
        return BortleEstimate(bortle=REMOTE_BORTLE, nearest_site=best.name, distance_km=best_km)

    t = max(0.0, min(1.0, (best_km - URBAN_CORE_KM) / DARKENING_SPAN_KM))
    bortle = max(1, min(9, _round_half_up(best.bortle - MAX_DARKENING_CLASSES * t)))
    return BortleEstimate(bortle=bortle, nearest_site=best.name, distance_km=best_km)


def visible_star_count(bortle_scale: float) -> int:
    """Rough naked-eye star count for a Bortle class."""
    return _VISIBLE_STAR_COUNTS[clamp_bortle(bortle_scale)]


__all__ = [
    "BortleEstimate",
    "LightPollutionSite",
    "bortle_description",
    "estimate_bortle_for_location",
    "haversine_distance_km",
    "visible_star_count",
]
