"""Elliptical two-body propagation for minor bodies.

Positions are heliocentric, ecliptic J2000, in AU. Only 0 <= e < 1 is
supported; parabolic and hyperbolic elements raise
:class:`UnsupportedEccentricityError`.
"""

import datetime
import logging
import math

from skywatch.errors import (
    InvalidElementsError,
    InvalidInputError,
    UnsupportedEccentricityError,
)
from skywatch.types import KeplerSolution, OrbitalElements, OrbitState, Vec3
from .angles import require_finite, wrap_pi
from .timescale import as_utc

logger = logging.getLogger(__name__)

GAUSSIAN_K = 0.01720209895  # AU^1.5 / day
OBLIQUITY_J2000_DEG = 23.439291111

_COS_EPS = math.cos(math.radians(OBLIQUITY_J2000_DEG))
_SIN_EPS = math.sin(math.radians(OBLIQUITY_J2000_DEG))
_ONE_DAY = datetime.timedelta(days=1)


def solve_kepler_equation(
    mean_anomaly: float,
    eccentricity: float,
    tolerance: float = 1e-12,
    max_iter: int = 12,
) -> KeplerSolution:
    """Newton-Raphson solution of ``M = E - e sin E`` (radians).

    The iteration is capped at ``max_iter``; a result that has not met
    ``tolerance`` by then comes back with ``converged=False``.
    """
    m = require_finite("mean_anomaly", mean_anomaly)
    e = require_finite("eccentricity", eccentricity)
    if e < 0:
        raise InvalidInputError(f"Eccentricity must be non-negative, got {e}")
    if e >= 1:
        raise UnsupportedEccentricityError(f"Eccentricity {e} is not elliptical")
    if max_iter < 1:
        raise InvalidInputError(f"max_iter must be at least 1, got {max_iter}")

    m_wrapped = wrap_pi(m)
    turns = m - m_wrapped

    ecc_anom = m_wrapped if e < 0.8 else math.copysign(math.pi, m_wrapped)
    converged = False
    iterations = 0
    for iterations in range(1, max_iter + 1):
        f = ecc_anom - e * math.sin(ecc_anom) - m_wrapped
        fp = 1.0 - e * math.cos(ecc_anom)
        delta = -f / fp
        ecc_anom += delta
        if abs(delta) < tolerance:
            converged = True
            break

    residual = ecc_anom - e * math.sin(ecc_anom) - m_wrapped
    if not converged:
        logger.debug(
            "Kepler solve did not converge: M=%s e=%s residual=%s", m, e, residual
        )
    return KeplerSolution(
        eccentric_anomaly=ecc_anom + turns,
        converged=converged,
        iterations=iterations,
        residual=residual,
    )


def _validated(elements: OrbitalElements) -> dict[str, float]:
    label = elements.name or "orbit"
    values = {}
    for name in (
        "perihelion_distance_au",
        "eccentricity",
        "arg_perihelion_deg",
        "asc_node_deg",
        "inclination_deg",
    ):
        try:
            values[name] = require_finite(name, getattr(elements, name))
        except InvalidInputError as e:
            raise InvalidElementsError(f"{label}: {e}") from e
    if values["eccentricity"] >= 1.0:
        raise UnsupportedEccentricityError(
            f"{label}: eccentricity {values['eccentricity']} is parabolic or hyperbolic"
        )
    if values["eccentricity"] < 0.0:
        raise InvalidElementsError(f"{label}: eccentricity must be non-negative")
    if values["perihelion_distance_au"] <= 0.0:
        raise InvalidElementsError(f"{label}: perihelion distance must be positive")
    return values


def _days_from_perihelion(elements: OrbitalElements, instant: datetime.datetime) -> float:
    try:
        tp = as_utc(elements.perihelion_time)
    except InvalidInputError as e:
        raise InvalidElementsError(f"{elements.name or 'orbit'}: {e}") from e
    return (as_utc(instant) - tp) / _ONE_DAY


def _mean_motion(elements: OrbitalElements, a: float) -> float:
    """Mean motion in rad/day; elements too extreme for float math are invalid."""
    label = elements.name or "orbit"
    if not math.isfinite(a) or a <= 0.0:
        raise InvalidElementsError(f"{label}: semi-major axis {a} is not usable")
    try:
        n = GAUSSIAN_K * a ** -1.5
    except ArithmeticError as e:
        raise InvalidElementsError(f"{label}: mean motion overflows for a={a}") from e
    if not math.isfinite(n) or n <= 0.0:
        raise InvalidElementsError(f"{label}: mean motion {n} is not usable")
    return n


def heliocentric_ecliptic_position(
    elements: OrbitalElements,
    instant: datetime.datetime,
) -> OrbitState:
    values = _validated(elements)
    q = values["perihelion_distance_au"]
    e = values["eccentricity"]

    a = q / (1.0 - e)
    n = _mean_motion(elements, a)
    m = n * _days_from_perihelion(elements, instant)
    if not math.isfinite(m):
        raise InvalidElementsError(
            f"{elements.name or 'orbit'}: mean anomaly is not finite (n={n})"
        )
    m = wrap_pi(m)

    solution = solve_kepler_equation(m, e)
    if not solution.converged:
        logger.warning(
            "Kepler solve for %s stopped after %d iterations (residual %.3g)",
            elements.name or "orbit",
            solution.iterations,
            solution.residual,
        )
    ecc_anom = solution.eccentric_anomaly
    cos_e = math.cos(ecc_anom)
    sin_e = math.sin(ecc_anom)
    nu = math.atan2(math.sqrt(1.0 - e * e) * sin_e, cos_e - e)
    r = a * (1.0 - e * cos_e)

    return OrbitState(
        position=_perifocal_to_ecliptic(
            r * math.cos(nu),
            r * math.sin(nu),
            math.radians(values["arg_perihelion_deg"]),
            math.radians(values["inclination_deg"]),
            math.radians(values["asc_node_deg"]),
        ),
        radius_au=r,
        true_anomaly_deg=math.degrees(nu),
        eccentric_anomaly_rad=ecc_anom,
        converged=solution.converged,
    )


def _perifocal_to_ecliptic(xp: float, yp: float, w: float, i: float, node: float) -> Vec3:
    # Rz(node) . Rx(i) . Rz(w) applied to (xp, yp, 0)
    x1 = xp * math.cos(w) - yp * math.sin(w)
    y1 = xp * math.sin(w) + yp * math.cos(w)

    y2 = y1 * math.cos(i)
    z2 = y1 * math.sin(i)

    x = x1 * math.cos(node) - y2 * math.sin(node)
    y = x1 * math.sin(node) + y2 * math.cos(node)
    return Vec3(x, y, z2)


def ecliptic_to_equatorial_j2000(vec: Vec3) -> Vec3:
    """Rotate about +X by the J2000 mean obliquity."""
    return Vec3(
        vec[0],
        vec[1] * _COS_EPS - vec[2] * _SIN_EPS,
        vec[1] * _SIN_EPS + vec[2] * _COS_EPS,
    )
