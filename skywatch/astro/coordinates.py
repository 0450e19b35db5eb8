import datetime
import math

from skywatch.errors import InvalidInputError
from skywatch.types import (
    EquatorialCoordinate,
    HorizontalCoordinate,
    NormalizedPoint,
    Observer,
    Vec3,
)
from .angles import clamp_unit, normalize_deg, normalize_rad, require_finite
from .timescale import local_sidereal_time_rad

# Inclusive field-of-view rim, absorbs acos round-off at exactly fov/2.
FOV_EDGE_TOLERANCE_DEG = 1e-9

# J2000 equatorial -> galactic rotation
_EQ_TO_GAL = (
    (-0.0548755604, -0.8734370902, -0.4838350155),
    (0.4941094279, -0.4448296300, 0.7469822445),
    (-0.8676661490, -0.1980763734, 0.4559837762),
)


def equatorial_to_horizontal(
    eq: EquatorialCoordinate,
    observer: Observer,
    instant: datetime.datetime,
) -> HorizontalCoordinate:
    ra = math.radians(eq.ra_deg)
    dec = math.radians(eq.dec_deg)
    lat = math.radians(observer.latitude_deg)
    ha = normalize_rad(local_sidereal_time_rad(instant, observer.longitude_deg) - ra)

    sin_alt = math.sin(dec) * math.sin(lat) + math.cos(dec) * math.cos(lat) * math.cos(ha)
    alt = math.asin(clamp_unit(sin_alt))
    az = math.atan2(
        -math.cos(dec) * math.sin(ha),
        math.sin(dec) * math.cos(lat) - math.cos(dec) * math.sin(lat) * math.cos(ha),
    )
    return HorizontalCoordinate(
        altitude_deg=math.degrees(alt),
        azimuth_deg=normalize_deg(math.degrees(az)),
    )


def horizontal_to_equatorial(
    hor: HorizontalCoordinate,
    observer: Observer,
    instant: datetime.datetime,
) -> EquatorialCoordinate:
    alt = math.radians(hor.altitude_deg)
    az = math.radians(hor.azimuth_deg)
    lat = math.radians(observer.latitude_deg)

    sin_dec = math.sin(alt) * math.sin(lat) + math.cos(alt) * math.cos(lat) * math.cos(az)
    dec = math.asin(clamp_unit(sin_dec))
    # Both terms carry a factor cos(dec), which atan2 cancels.
    ha = math.atan2(
        -math.sin(az) * math.cos(alt),
        math.sin(alt) * math.cos(lat) - math.cos(alt) * math.sin(lat) * math.cos(az),
    )
    ra = local_sidereal_time_rad(instant, observer.longitude_deg) - ha
    return EquatorialCoordinate(
        ra_deg=normalize_deg(math.degrees(ra)),
        dec_deg=math.degrees(dec),
    )


def _spherical_pair(coord) -> tuple[float, float]:
    if isinstance(coord, EquatorialCoordinate):
        return coord.ra_deg, coord.dec_deg
    if isinstance(coord, HorizontalCoordinate):
        return coord.azimuth_deg, coord.altitude_deg
    raise InvalidInputError(f"Unsupported coordinate type: {type(coord).__name__}")


def angular_separation_deg(a, b) -> float:
    """Great-circle distance between two coordinates of the same frame."""
    if type(a) is not type(b):
        raise InvalidInputError(
            f"Cannot separate {type(a).__name__} from {type(b).__name__}"
        )
    lon1, lat1 = _spherical_pair(a)
    lon2, lat2 = _spherical_pair(b)
    if lon1 == lon2 and lat1 == lat2:
        return 0.0
    return _separation_deg(lon1, lat1, lon2, lat2)


def _separation_deg(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    lat1 = math.radians(lat1)
    lat2 = math.radians(lat2)
    dlon = math.radians(lon1 - lon2)
    cos_sep = math.sin(lat1) * math.sin(lat2) + math.cos(lat1) * math.cos(lat2) * math.cos(dlon)
    return math.degrees(math.acos(clamp_unit(cos_sep)))


def _check_fov(fov_deg: float) -> float:
    fov_deg = require_finite("fov_deg", fov_deg)
    if fov_deg <= 0 or fov_deg > 360.0:
        raise InvalidInputError(f"Field of view must be in (0, 360], got {fov_deg}")
    return fov_deg


def project_fisheye(
    target: HorizontalCoordinate,
    view_center: HorizontalCoordinate,
    fov_deg: float,
) -> NormalizedPoint | None:
    """Linear-angle (equidistant) projection about the view centre.

    Returns ``None`` when the target lies outside the field of view. The rim
    (distance == fov/2) is inside and maps to radius 1. Bearing is measured
    from screen-up, clockwise.
    """
    half_fov = _check_fov(fov_deg) / 2.0
    distance = angular_separation_deg(target, view_center)
    if distance > half_fov + FOV_EDGE_TOLERANCE_DEG:
        return None
    if distance == 0.0:
        return NormalizedPoint(0.0, 0.0)
    r = min(1.0, distance / half_fov)

    alt = math.radians(target.altitude_deg)
    alt_view = math.radians(view_center.altitude_deg)
    d_az = math.radians(target.azimuth_deg - view_center.azimuth_deg)
    y = math.sin(d_az) * math.cos(alt)
    x = math.cos(alt_view) * math.sin(alt) - math.sin(alt_view) * math.cos(alt) * math.cos(d_az)
    bearing = math.atan2(y, x)
    return NormalizedPoint(math.sin(bearing) * r, -math.cos(bearing) * r)


def unproject_fisheye(
    point: NormalizedPoint,
    view_center: HorizontalCoordinate,
    fov_deg: float,
) -> HorizontalCoordinate | None:
    """Inverse of :func:`project_fisheye`; ``None`` outside the unit disc."""
    half_fov = math.radians(_check_fov(fov_deg) / 2.0)
    r = point.radius
    if r > 1.0:
        return None
    d = r * half_fov
    bearing = math.atan2(point.x, -point.y)
    alt0 = math.radians(view_center.altitude_deg)
    az0 = math.radians(view_center.azimuth_deg)

    sin_alt = math.sin(alt0) * math.cos(d) + math.cos(alt0) * math.sin(d) * math.cos(bearing)
    alt = math.asin(clamp_unit(sin_alt))
    y = math.sin(bearing) * math.sin(d) * math.cos(alt0)
    x = math.cos(d) - math.sin(alt0) * math.sin(alt)
    az = az0 + math.atan2(y, x)
    return HorizontalCoordinate(
        altitude_deg=math.degrees(alt),
        azimuth_deg=normalize_deg(math.degrees(az)),
    )


def horizontal_to_cartesian(hor: HorizontalCoordinate, radius: float = 1.0) -> Vec3:
    """East, up, north components; azimuth from North towards East."""
    alt = math.radians(hor.altitude_deg)
    az = math.radians(hor.azimuth_deg)
    return Vec3(
        radius * math.cos(alt) * math.sin(az),
        radius * math.sin(alt),
        radius * math.cos(alt) * math.cos(az),
    )


def vector_to_equatorial(vec: Vec3) -> tuple[EquatorialCoordinate, float]:
    """Direction and length of an equatorial cartesian vector."""
    dist = vec.norm()
    if dist == 0.0 or not math.isfinite(dist):
        raise InvalidInputError(f"Cannot take the direction of vector {tuple(vec)}")
    ra = math.atan2(vec.y, vec.x)
    dec = math.asin(clamp_unit(vec.z / dist))
    return (
        EquatorialCoordinate(
            ra_deg=normalize_deg(math.degrees(ra)),
            dec_deg=math.degrees(dec),
        ),
        dist,
    )


def equatorial_to_galactic(eq: EquatorialCoordinate) -> tuple[float, float]:
    """Galactic longitude and latitude (degrees) of a J2000 direction."""
    ra = math.radians(eq.ra_deg)
    dec = math.radians(eq.dec_deg)
    v = (math.cos(dec) * math.cos(ra), math.cos(dec) * math.sin(ra), math.sin(dec))
    gx, gy, gz = (sum(m * c for m, c in zip(row, v)) for row in _EQ_TO_GAL)
    l = math.atan2(gy, gx)
    b = math.asin(clamp_unit(gz))
    return normalize_deg(math.degrees(l)), math.degrees(b)
