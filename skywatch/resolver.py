"""Observer-relative directions for solar-system bodies.

Heliocentric vectors from the orbit propagator (comets) or an ephemeris
provider (planets) are shifted to the observer's site and handed to the
coordinate transforms for Alt/Az and view projection.
"""

import datetime
import logging
import math
from typing import Iterable

from skywatch.astro.angles import clamp01, require_finite
from skywatch.astro.coordinates import (
    equatorial_to_horizontal,
    project_fisheye,
    vector_to_equatorial,
)
from skywatch.astro.orbit import ecliptic_to_equatorial_j2000, heliocentric_ecliptic_position
from skywatch.ephemeris.base import EphemerisProvider
from skywatch.errors import InvalidElementsError, InvalidInputError, SkywatchError
from skywatch.types import (
    BodyPosition,
    CometPosition,
    CometResult,
    Observer,
    OrbitalElements,
    Vec3,
    ViewPort,
)

logger = logging.getLogger(__name__)

# Slope used when a record gives an absolute magnitude but no slope.
DEFAULT_COMET_SLOPE = 4.0


def topocentric_vector(
    helio_equatorial: Vec3,
    observer: Observer,
    instant: datetime.datetime,
    ephemeris: EphemerisProvider,
) -> tuple[Vec3, Vec3]:
    """Geocentric and topocentric vectors (AU) of a heliocentric equatorial one."""
    geo = helio_equatorial - ephemeris.heliocentric_position("earth", instant)
    topo = geo - ephemeris.observer_position(observer, instant)
    return geo, topo


def comet_apparent_magnitude(
    elements: OrbitalElements,
    helio_distance_au: float,
    geo_distance_au: float,
) -> float | None:
    """Total visual magnitude ``g + 5 log10(delta) + 2.5 k log10(r)``.

    ``None`` when the record carries no absolute magnitude.
    """
    if elements.magnitude_g is None:
        return None
    try:
        g = require_finite("magnitude_g", elements.magnitude_g)
        k = DEFAULT_COMET_SLOPE
        if elements.magnitude_k is not None:
            k = require_finite("magnitude_k", elements.magnitude_k)
    except InvalidInputError as e:
        raise InvalidElementsError(f"{elements.name or 'orbit'}: {e}") from e
    if helio_distance_au <= 0.0 or geo_distance_au <= 0.0:
        return None
    return g + 5.0 * math.log10(geo_distance_au) + 2.5 * k * math.log10(helio_distance_au)


def resolve_comet(
    elements: OrbitalElements,
    observer: Observer,
    instant: datetime.datetime,
    ephemeris: EphemerisProvider,
) -> CometPosition:
    state = heliocentric_ecliptic_position(elements, instant)
    geo, topo = topocentric_vector(
        ecliptic_to_equatorial_j2000(state.position), observer, instant, ephemeris
    )
    equatorial, _ = vector_to_equatorial(topo)
    geo_distance = geo.norm()
    return CometPosition(
        name=elements.name,
        designation=elements.designation,
        equatorial=equatorial,
        horizontal=equatorial_to_horizontal(equatorial, observer, instant),
        helio_distance_au=state.radius_au,
        geo_distance_au=geo_distance,
        converged=state.converged,
        apparent_magnitude=comet_apparent_magnitude(elements, state.radius_au, geo_distance),
    )


def _altitude_rank(result: CometResult) -> float:
    if result.position is None:
        return -1.0
    return clamp01((result.position.horizontal.altitude_deg + 5.0) / 95.0)


def resolve_comets(
    comets: Iterable[OrbitalElements],
    observer: Observer,
    instant: datetime.datetime,
    ephemeris: EphemerisProvider,
    view: ViewPort | None = None,
) -> list[CometResult]:
    """Resolve a batch of comets; one bad record never aborts the batch.

    Results are ordered with higher comets first (stable for ties), and
    failed records last.
    """
    results = []
    for elements in comets:
        try:
            position = resolve_comet(elements, observer, instant, ephemeris)
        except SkywatchError as e:
            logger.warning("Skipping comet %s: %s", elements.name or elements.designation, e)
            results.append(CometResult(elements=elements, error=str(e)))
            continue
        point = None
        if view is not None:
            point = project_fisheye(position.horizontal, view.center, view.fov_deg)
        results.append(CometResult(elements=elements, position=position, point=point))
    return sorted(results, key=_altitude_rank, reverse=True)


def resolve_body(
    body: str,
    observer: Observer,
    instant: datetime.datetime,
    ephemeris: EphemerisProvider,
) -> BodyPosition:
    helio = ephemeris.heliocentric_position(body, instant)
    _, topo = topocentric_vector(helio, observer, instant, ephemeris)
    equatorial, distance = vector_to_equatorial(topo)
    return BodyPosition(
        name=body.capitalize(),
        equatorial=equatorial,
        horizontal=equatorial_to_horizontal(equatorial, observer, instant),
        distance_au=distance,
    )


def estimate_comet_visual_weight(position: CometPosition) -> float:
    """Presentation weight in [0, 1]; favours comets near the Sun and high up."""
    r = max(0.2, min(10.0, position.helio_distance_au))
    elev = clamp01(position.horizontal.altitude_deg / 90.0)
    return clamp01(0.15 + 0.6 / (r * r) + 0.25 * elev)
