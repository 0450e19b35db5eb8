"""Mean-element planetary ephemeris.

Planet positions come from slowly varying mean orbital elements referred to
the ecliptic of date, precessed back to J2000. Accuracy is around an
arc-minute for the inner planets and a few arc-minutes for the outer ones
(no perturbations), well within what a naked-eye sky view needs.

The element table and its day-number epoch follow Paul Schlyter,
"How to compute planetary positions"
(https://stjarnhimlen.se/comp/ppcomp.html).
"""

import datetime
import math

from skywatch.astro.geodesy import AU_KM, geodetic_to_ecef_km, rotate_z
from skywatch.astro.orbit import ecliptic_to_equatorial_j2000, solve_kepler_equation
from skywatch.astro.timescale import greenwich_sidereal_time_deg, to_julian_date
from skywatch.errors import InvalidInputError
from skywatch.types import Observer, Vec3
from .base import EphemerisProvider

# Element epoch is 2000 Jan 0.0 UT, i.e. 1.5 days before J2000.0.
_ELEMENT_EPOCH_JD = 2451543.5
# Precession in ecliptic longitude, degrees per day.
_PRECESSION_DEG_PER_DAY = 3.82394e-5

PLANETS = ("mercury", "venus", "earth", "mars", "jupiter", "saturn", "uranus", "neptune")


def _elements(body: str, d: float) -> dict:
    if body == "mercury":
        return {"N": 48.3313 + 3.24587e-5 * d, "i": 7.0047 + 5.00e-8 * d, "w": 29.1241 + 1.01444e-5 * d, "a": 0.387098, "e": 0.205635 + 5.59e-10 * d, "M": 168.6562 + 4.0923344368 * d}
    if body == "venus":
        return {"N": 76.6799 + 2.46590e-5 * d, "i": 3.3946 + 2.75e-8 * d, "w": 54.8910 + 1.38374e-5 * d, "a": 0.723330, "e": 0.006773 - 1.302e-9 * d, "M": 48.0052 + 1.6021302244 * d}
    if body == "sun":
        # Apparent geocentric orbit of the Sun.
        return {"N": 0.0, "i": 0.0, "w": 282.9404 + 4.70935e-5 * d, "a": 1.0, "e": 0.016709 - 1.151e-9 * d, "M": 356.0470 + 0.9856002585 * d}
    if body == "mars":
        return {"N": 49.5574 + 2.11081e-5 * d, "i": 1.8497 - 1.78e-8 * d, "w": 286.5016 + 2.92961e-5 * d, "a": 1.523688, "e": 0.093405 + 2.516e-9 * d, "M": 18.6021 + 0.5240207766 * d}
    if body == "jupiter":
        return {"N": 100.4542 + 2.76854e-5 * d, "i": 1.3030 - 1.557e-7 * d, "w": 273.8777 + 1.64505e-5 * d, "a": 5.20256, "e": 0.048498 + 4.469e-9 * d, "M": 19.8950 + 0.0830853001 * d}
    if body == "saturn":
        return {"N": 113.6634 + 2.38980e-5 * d, "i": 2.4886 - 1.081e-7 * d, "w": 339.3939 + 2.97661e-5 * d, "a": 9.55475, "e": 0.055546 - 9.499e-9 * d, "M": 316.9670 + 0.0334442282 * d}
    if body == "uranus":
        return {"N": 74.0005 + 1.3978e-5 * d, "i": 0.7733 + 1.9e-8 * d, "w": 96.6612 + 3.0565e-5 * d, "a": 19.18171 - 1.55e-8 * d, "e": 0.047318 + 7.45e-9 * d, "M": 142.5905 + 0.011725806 * d}
    if body == "neptune":
        return {"N": 131.7806 + 3.0173e-5 * d, "i": 1.7700 - 2.55e-7 * d, "w": 272.8461 - 6.027e-6 * d, "a": 30.05826 + 3.313e-8 * d, "e": 0.008606 + 2.15e-9 * d, "M": 260.2471 + 0.005995147 * d}
    raise InvalidInputError(f"Unknown body: {body}")


def _ecliptic_of_date(body: str, d: float) -> Vec3:
    elems = _elements(body, d)
    n = math.radians(elems["N"])
    i = math.radians(elems["i"])
    w = math.radians(elems["w"])
    a = elems["a"]
    e = elems["e"]
    m = math.radians(elems["M"] % 360.0)

    e_anom = solve_kepler_equation(m, e).eccentric_anomaly
    xv = a * (math.cos(e_anom) - e)
    yv = a * (math.sqrt(1.0 - e * e) * math.sin(e_anom))
    v = math.atan2(yv, xv)
    r = math.sqrt(xv * xv + yv * yv)

    xh = r * (math.cos(n) * math.cos(v + w) - math.sin(n) * math.sin(v + w) * math.cos(i))
    yh = r * (math.sin(n) * math.cos(v + w) + math.cos(n) * math.sin(v + w) * math.cos(i))
    zh = r * (math.sin(v + w) * math.sin(i))
    return Vec3(xh, yh, zh)


def _precess_to_j2000(vec: Vec3, d: float) -> Vec3:
    return rotate_z(vec, math.radians(-_PRECESSION_DEG_PER_DAY * d))


class LowPrecisionEphemeris(EphemerisProvider):
    name = "low_precision"

    def heliocentric_position(self, body: str, instant: datetime.datetime) -> Vec3:
        body = body.lower()
        if body == "sun":
            return Vec3(0.0, 0.0, 0.0)
        d = to_julian_date(instant) - _ELEMENT_EPOCH_JD
        if body == "earth":
            ecl = -_ecliptic_of_date("sun", d)
        else:
            ecl = _ecliptic_of_date(body, d)
        return ecliptic_to_equatorial_j2000(_precess_to_j2000(ecl, d))

    def observer_position(self, observer: Observer, instant: datetime.datetime) -> Vec3:
        # Earth-fixed to inertial: rotate by Greenwich sidereal time.
        theta = math.radians(greenwich_sidereal_time_deg(instant))
        inertial = rotate_z(geodetic_to_ecef_km(observer), theta)
        return Vec3(inertial.x / AU_KM, inertial.y / AU_KM, inertial.z / AU_KM)

    def is_available(self) -> dict:
        return {"ok": True, "detail": "built-in mean elements"}
