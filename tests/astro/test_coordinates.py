import datetime
import math

import pytest

from skywatch.astro.coordinates import (
    angular_separation_deg,
    equatorial_to_galactic,
    equatorial_to_horizontal,
    horizontal_to_cartesian,
    horizontal_to_equatorial,
    project_fisheye,
    unproject_fisheye,
    vector_to_equatorial,
)
from skywatch.astro.timescale import local_sidereal_time_deg
from skywatch.errors import InvalidInputError
from skywatch.types import (
    EquatorialCoordinate,
    HorizontalCoordinate,
    NormalizedPoint,
    Observer,
    Vec3,
)

UTC = datetime.timezone.utc
INSTANT = datetime.datetime(2024, 7, 1, 14, 0, tzinfo=UTC)
MID_NORTH = Observer(latitude_deg=45.0, longitude_deg=-75.0)


def _angle_diff(a, b):
    return abs((a - b + 180.0) % 360.0 - 180.0)


def test_meridian_transit_due_south():
    ra = local_sidereal_time_deg(INSTANT, MID_NORTH.longitude_deg)
    hor = equatorial_to_horizontal(EquatorialCoordinate(ra, 0.0), MID_NORTH, INSTANT)
    assert hor.altitude_deg == pytest.approx(45.0, abs=1e-9)
    assert hor.azimuth_deg == pytest.approx(180.0, abs=1e-6)


def test_celestial_pole_altitude_equals_latitude():
    for lat in (-60.0, -10.0, 20.0, 51.5):
        observer = Observer(latitude_deg=lat, longitude_deg=10.0)
        pole = EquatorialCoordinate(123.0, 90.0 if lat >= 0 else -90.0)
        hor = equatorial_to_horizontal(pole, observer, INSTANT)
        assert hor.altitude_deg == pytest.approx(abs(lat), abs=1e-9)


@pytest.mark.parametrize("ra", [0.0, 47.5, 133.0, 201.25, 359.0])
@pytest.mark.parametrize("dec", [-80.0, -33.0, 0.0, 12.5, 64.0])
def test_equatorial_round_trip(observer, ra, dec):
    eq = EquatorialCoordinate(ra, dec)
    hor = equatorial_to_horizontal(eq, observer, INSTANT)
    back = horizontal_to_equatorial(hor, observer, INSTANT)
    assert _angle_diff(eq.ra_deg, back.ra_deg) < 1e-6
    assert abs(eq.dec_deg - back.dec_deg) < 1e-6


@pytest.mark.parametrize("alt", [-30.0, 0.0, 15.0, 60.0, 85.0])
@pytest.mark.parametrize("az", [0.0, 90.0, 181.0, 300.0])
def test_horizontal_round_trip(observer, alt, az):
    hor = HorizontalCoordinate(alt, az)
    back = equatorial_to_horizontal(
        horizontal_to_equatorial(hor, observer, INSTANT), observer, INSTANT
    )
    assert abs(hor.altitude_deg - back.altitude_deg) < 1e-6
    assert _angle_diff(hor.azimuth_deg, back.azimuth_deg) < 1e-6


def test_outputs_in_range(observer):
    for ra in range(0, 360, 30):
        for dec in range(-90, 91, 15):
            hor = equatorial_to_horizontal(EquatorialCoordinate(ra, dec), observer, INSTANT)
            assert -90.0 <= hor.altitude_deg <= 90.0
            assert 0.0 <= hor.azimuth_deg < 360.0


def test_separation_identical_is_zero():
    a = EquatorialCoordinate(101.287, -16.716)
    assert angular_separation_deg(a, EquatorialCoordinate(101.287, -16.716)) == 0.0


def test_separation_symmetric_and_bounded():
    a = EquatorialCoordinate(10.0, 20.0)
    b = EquatorialCoordinate(250.0, -40.0)
    ab = angular_separation_deg(a, b)
    assert ab == angular_separation_deg(b, a)
    assert 0.0 <= ab <= 180.0


def test_separation_known_values():
    pole = EquatorialCoordinate(0.0, 90.0)
    assert angular_separation_deg(pole, EquatorialCoordinate(77.0, 0.0)) == pytest.approx(90.0)
    assert angular_separation_deg(
        EquatorialCoordinate(0.0, 0.0), EquatorialCoordinate(180.0, 0.0)
    ) == pytest.approx(180.0)
    assert angular_separation_deg(
        HorizontalCoordinate(10.0, 350.0), HorizontalCoordinate(10.0, 10.0)
    ) == pytest.approx(19.6931, abs=1e-3)


def test_separation_rejects_mixed_frames():
    with pytest.raises(InvalidInputError):
        angular_separation_deg(EquatorialCoordinate(0.0, 0.0), HorizontalCoordinate(0.0, 0.0))


VIEW = HorizontalCoordinate(45.0, 180.0)


def test_project_center():
    point = project_fisheye(VIEW, VIEW, 120.0)
    assert point == NormalizedPoint(0.0, 0.0)


def test_project_up_is_negative_y():
    point = project_fisheye(HorizontalCoordinate(75.0, 180.0), VIEW, 120.0)
    assert point.x == pytest.approx(0.0, abs=1e-9)
    assert point.y == pytest.approx(-0.5, abs=1e-9)


def test_project_increasing_azimuth_is_positive_x():
    center = HorizontalCoordinate(0.0, 180.0)
    point = project_fisheye(HorizontalCoordinate(0.0, 210.0), center, 120.0)
    assert point.x == pytest.approx(0.5, abs=1e-9)
    assert point.y == pytest.approx(0.0, abs=1e-9)


def test_project_rim_is_inside():
    point = project_fisheye(HorizontalCoordinate(-15.0, 180.0), VIEW, 120.0)
    assert point is not None
    assert point.radius == pytest.approx(1.0, abs=1e-9)


def test_project_outside_is_none():
    assert project_fisheye(HorizontalCoordinate(-16.0, 180.0), VIEW, 120.0) is None
    assert project_fisheye(HorizontalCoordinate(45.0, 0.0), VIEW, 120.0) is None


@pytest.mark.parametrize("fov", [0.0, -10.0, 361.0, float("nan")])
def test_project_rejects_bad_fov(fov):
    with pytest.raises(InvalidInputError):
        project_fisheye(VIEW, VIEW, fov)


def test_project_radius_within_unit_disc():
    for alt in range(-10, 91, 10):
        for az in range(0, 360, 20):
            point = project_fisheye(HorizontalCoordinate(alt, az), VIEW, 150.0)
            if point is not None:
                assert point.radius <= 1.0 + 1e-12


@pytest.mark.parametrize(
    "target",
    [
        HorizontalCoordinate(60.0, 200.0),
        HorizontalCoordinate(10.0, 150.0),
        HorizontalCoordinate(80.0, 100.0),
        HorizontalCoordinate(30.0, 230.0),
    ],
)
def test_unproject_inverts_project(target):
    point = project_fisheye(target, VIEW, 140.0)
    assert point is not None
    back = unproject_fisheye(point, VIEW, 140.0)
    assert abs(target.altitude_deg - back.altitude_deg) < 1e-6
    assert _angle_diff(target.azimuth_deg, back.azimuth_deg) < 1e-6


def test_unproject_outside_unit_disc():
    assert unproject_fisheye(NormalizedPoint(0.9, 0.9), VIEW, 120.0) is None


def test_horizontal_to_cartesian_axes():
    east = horizontal_to_cartesian(HorizontalCoordinate(0.0, 90.0))
    assert east.x == pytest.approx(1.0)
    assert east.y == pytest.approx(0.0, abs=1e-12)
    assert east.z == pytest.approx(0.0, abs=1e-12)
    zenith = horizontal_to_cartesian(HorizontalCoordinate(90.0, 0.0), radius=2.0)
    assert zenith.y == pytest.approx(2.0)


def test_vector_to_equatorial():
    eq, dist = vector_to_equatorial(Vec3(0.0, 2.0, 0.0))
    assert eq.ra_deg == pytest.approx(90.0)
    assert eq.dec_deg == pytest.approx(0.0)
    assert dist == pytest.approx(2.0)
    eq, _ = vector_to_equatorial(Vec3(0.0, 0.0, -1.0))
    assert eq.dec_deg == pytest.approx(-90.0)


def test_vector_to_equatorial_rejects_zero():
    with pytest.raises(InvalidInputError):
        vector_to_equatorial(Vec3(0.0, 0.0, 0.0))


def test_galactic_pole_and_center():
    _, b = equatorial_to_galactic(EquatorialCoordinate(192.85948, 27.12825))
    assert b == pytest.approx(90.0, abs=1e-3)
    l, b = equatorial_to_galactic(EquatorialCoordinate(266.40500, -28.93617))
    assert min(l, 360.0 - l) < 0.05
    assert b == pytest.approx(0.0, abs=0.05)


def test_coordinate_records_validate():
    with pytest.raises(InvalidInputError):
        EquatorialCoordinate(10.0, 91.0)
    with pytest.raises(InvalidInputError):
        HorizontalCoordinate(float("nan"), 0.0)
    assert EquatorialCoordinate(-30.0, 0.0).ra_deg == pytest.approx(330.0)
    assert HorizontalCoordinate(10.0, 370.0).azimuth_deg == pytest.approx(10.0)
