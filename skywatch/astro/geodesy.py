import math

from skywatch.types import Observer, Vec3

AU_KM = 149_597_870.7

# WGS84 ellipsoid
WGS84_A_KM = 6378.137
WGS84_F = 1.0 / 298.257223563
WGS84_E2 = 2 * WGS84_F - WGS84_F * WGS84_F


def geodetic_to_ecef_km(observer: Observer) -> Vec3:
    lat = math.radians(observer.latitude_deg)
    lon = math.radians(observer.longitude_deg)
    h_km = observer.elevation_m / 1000.0
    n = WGS84_A_KM / math.sqrt(1.0 - WGS84_E2 * math.sin(lat) ** 2)
    return Vec3(
        (n + h_km) * math.cos(lat) * math.cos(lon),
        (n + h_km) * math.cos(lat) * math.sin(lon),
        (n * (1.0 - WGS84_E2) + h_km) * math.sin(lat),
    )


def rotate_z(vec: Vec3, angle_rad: float) -> Vec3:
    """Rotate a vector about +Z by ``angle_rad`` (counter-clockwise)."""
    c = math.cos(angle_rad)
    s = math.sin(angle_rad)
    return Vec3(vec.x * c - vec.y * s, vec.x * s + vec.y * c, vec.z)


def enu_components(delta_ecef: Vec3, observer: Observer) -> Vec3:
    """East, north, up components of an Earth-fixed offset at the site."""
    lat = math.radians(observer.latitude_deg)
    lon = math.radians(observer.longitude_deg)
    sinp, cosp = math.sin(lat), math.cos(lat)
    sinl, cosl = math.sin(lon), math.cos(lon)
    dx, dy, dz = delta_ecef
    e = -sinl * dx + cosl * dy
    n = -sinp * cosl * dx - sinp * sinl * dy + cosp * dz
    u = cosp * cosl * dx + cosp * sinl * dy + sinp * dz
    return Vec3(e, n, u)
