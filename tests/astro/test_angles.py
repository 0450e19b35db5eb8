import math

import pytest

from skywatch.astro.angles import (
    clamp_unit,
    normalize_deg,
    normalize_rad,
    require_finite,
    wrap_pi,
)
from skywatch.astro.geodesy import WGS84_A_KM, enu_components, geodetic_to_ecef_km, rotate_z
from skywatch.errors import InvalidInputError
from skywatch.types import Observer, Vec3


def test_clamp_unit():
    assert clamp_unit(1.0000000000000002) == 1.0
    assert clamp_unit(-1.5) == -1.0
    assert clamp_unit(0.25) == 0.25
    with pytest.raises(InvalidInputError):
        clamp_unit(float("nan"))


@pytest.mark.parametrize(
    "angle, expected",
    [(0.0, 0.0), (360.0, 0.0), (-90.0, 270.0), (725.0, 5.0), (-1e-17, 0.0)],
)
def test_normalize_deg(angle, expected):
    result = normalize_deg(angle)
    assert 0.0 <= result < 360.0
    assert result == pytest.approx(expected)


def test_normalize_rad_and_wrap_pi():
    assert 0.0 <= normalize_rad(-1e-17) < 2.0 * math.pi
    assert wrap_pi(math.pi) == pytest.approx(-math.pi)
    assert wrap_pi(3.0 * math.pi / 2.0) == pytest.approx(-math.pi / 2.0)
    assert wrap_pi(0.5) == pytest.approx(0.5)


def test_require_finite():
    assert require_finite("x", 3) == 3.0
    for bad in (float("inf"), float("nan"), "abc", None):
        with pytest.raises(InvalidInputError):
            require_finite("x", bad)


def test_ecef_equator_and_pole():
    equator = geodetic_to_ecef_km(Observer(latitude_deg=0.0, longitude_deg=90.0))
    assert equator.y == pytest.approx(WGS84_A_KM)
    assert equator.x == pytest.approx(0.0, abs=1e-9)
    pole = geodetic_to_ecef_km(Observer(latitude_deg=90.0, longitude_deg=0.0))
    assert pole.z == pytest.approx(6356.752, abs=1e-3)


def test_rotate_z_quarter_turn():
    v = rotate_z(Vec3(1.0, 0.0, 2.0), math.pi / 2.0)
    assert v.x == pytest.approx(0.0, abs=1e-12)
    assert v.y == pytest.approx(1.0)
    assert v.z == 2.0


def test_enu_components_up():
    site = Observer(latitude_deg=-34.93, longitude_deg=138.60)
    up = geodetic_to_ecef_km(Observer(latitude_deg=-34.93, longitude_deg=138.60, elevation_m=1000.0))
    enu = enu_components(up - geodetic_to_ecef_km(site), site)
    assert enu.z == pytest.approx(1.0, abs=1e-9)
    assert enu.x == pytest.approx(0.0, abs=1e-9)
    assert enu.y == pytest.approx(0.0, abs=1e-9)
