from dataclasses import dataclass, field
import datetime
import math
from typing import NamedTuple, Sequence

from skywatch.astro.angles import normalize_deg, require_finite
from skywatch.errors import InvalidInputError
from skywatch.util.format import bv_color_hex, format_angle


def _normalize_longitude(lon: float) -> float:
    lon = normalize_deg(lon)
    return lon - 360.0 if lon > 180.0 else lon


@dataclass(frozen=True)
class Observer:
    """Geographic site. Longitude is stored in (-180, 180], east positive."""

    latitude_deg: float
    longitude_deg: float
    elevation_m: float = 0.0
    name: str | None = None

    def __post_init__(self):
        lat = require_finite("latitude_deg", self.latitude_deg)
        lon = require_finite("longitude_deg", self.longitude_deg)
        elev = require_finite("elevation_m", self.elevation_m)
        if not -90.0 <= lat <= 90.0:
            raise InvalidInputError(f"Latitude must be in [-90, 90], got {lat}")
        if not -180.0 <= lon < 360.0:
            raise InvalidInputError(f"Longitude must be in [-180, 360), got {lon}")
        object.__setattr__(self, "latitude_deg", lat)
        object.__setattr__(self, "longitude_deg", _normalize_longitude(lon))
        object.__setattr__(self, "elevation_m", elev)


@dataclass(frozen=True)
class EquatorialCoordinate:
    ra_deg: float
    dec_deg: float

    def __post_init__(self):
        ra = require_finite("ra_deg", self.ra_deg)
        dec = require_finite("dec_deg", self.dec_deg)
        if not -90.0 <= dec <= 90.0:
            raise InvalidInputError(f"Declination must be in [-90, 90], got {dec}")
        object.__setattr__(self, "ra_deg", normalize_deg(ra))
        object.__setattr__(self, "dec_deg", dec)

    def __str__(self) -> str:
        return f"RA {format_angle(self.ra_deg, 'hms')} Dec {format_angle(self.dec_deg, 'dms')}"


@dataclass(frozen=True)
class HorizontalCoordinate:
    """Altitude above the horizon and azimuth from North through East."""

    altitude_deg: float
    azimuth_deg: float

    def __post_init__(self):
        alt = require_finite("altitude_deg", self.altitude_deg)
        az = require_finite("azimuth_deg", self.azimuth_deg)
        if not -90.0 <= alt <= 90.0:
            raise InvalidInputError(f"Altitude must be in [-90, 90], got {alt}")
        object.__setattr__(self, "altitude_deg", alt)
        object.__setattr__(self, "azimuth_deg", normalize_deg(az))

    @property
    def above_horizon(self) -> bool:
        return self.altitude_deg > 0.0

    def __str__(self) -> str:
        return f"Alt {format_angle(self.altitude_deg)} Az {format_angle(self.azimuth_deg)}"


@dataclass(frozen=True)
class NormalizedPoint:
    """Point in the unit square centred on the view; +y is down, rim radius is 1."""

    x: float
    y: float

    @property
    def radius(self) -> float:
        return math.hypot(self.x, self.y)


class Vec3(NamedTuple):
    x: float
    y: float
    z: float

    def __add__(self, other):
        return Vec3(self.x + other[0], self.y + other[1], self.z + other[2])

    def __sub__(self, other):
        return Vec3(self.x - other[0], self.y - other[1], self.z - other[2])

    def __neg__(self):
        return Vec3(-self.x, -self.y, -self.z)

    def norm(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)


@dataclass(frozen=True)
class OrbitalElements:
    """Classical elements of a minor body. Validated at propagation time."""

    perihelion_distance_au: float
    eccentricity: float
    arg_perihelion_deg: float
    asc_node_deg: float
    inclination_deg: float
    perihelion_time: datetime.datetime
    name: str = ""
    designation: str | None = None
    magnitude_g: float | None = None
    magnitude_k: float | None = None


@dataclass(frozen=True)
class KeplerSolution:
    eccentric_anomaly: float
    converged: bool
    iterations: int
    residual: float


@dataclass(frozen=True)
class OrbitState:
    """Heliocentric ecliptic J2000 position (AU) of a body at one instant."""

    position: Vec3
    radius_au: float
    true_anomaly_deg: float
    eccentric_anomaly_rad: float
    converged: bool


@dataclass(frozen=True)
class VisibilityParams:
    extinction_k: float = 0.20
    margin_mag: float = 0.20
    dso_threshold: float = 0.12
    twilight_limiting_mag: float = 2.5
    moon_max_penalty_mag: float = 2.0


@dataclass(frozen=True)
class VisibilityInputs:
    bortle_scale: int
    sun_altitude_deg: float
    moon_altitude_deg: float | None = None
    moon_illumination_frac: float | None = None
    target_altitude_deg: float = 90.0

    def __post_init__(self):
        require_finite("bortle_scale", self.bortle_scale)
        require_finite("sun_altitude_deg", self.sun_altitude_deg)
        require_finite("target_altitude_deg", self.target_altitude_deg)
        if self.moon_altitude_deg is not None:
            require_finite("moon_altitude_deg", self.moon_altitude_deg)
        if self.moon_illumination_frac is not None:
            illum = require_finite("moon_illumination_frac", self.moon_illumination_frac)
            if not 0.0 <= illum <= 1.0:
                raise InvalidInputError(
                    f"Moon illumination must be in [0, 1], got {illum}"
                )

    def at_altitude(self, target_altitude_deg: float) -> "VisibilityInputs":
        return VisibilityInputs(
            bortle_scale=self.bortle_scale,
            sun_altitude_deg=self.sun_altitude_deg,
            moon_altitude_deg=self.moon_altitude_deg,
            moon_illumination_frac=self.moon_illumination_frac,
            target_altitude_deg=target_altitude_deg,
        )


@dataclass(frozen=True)
class VisibilityResult:
    visible: bool
    effective_magnitude: float
    limiting_magnitude: float
    alpha_scale: float


@dataclass(frozen=True)
class DsoDetectability:
    visible: bool
    alpha: float
    surface_brightness_mag_arcsec2: float
    sky_background_mag_arcsec2: float


@dataclass(frozen=True)
class Star:
    id: str
    name: str
    ra_deg: float
    dec_deg: float
    magnitude: float
    bv: float | None = None

    @property
    def color_hex(self) -> str:
        return bv_color_hex(self.bv)


@dataclass(frozen=True)
class DeepSkyObject:
    id: str
    name: str
    ra_deg: float
    dec_deg: float
    magnitude: float
    size_arcmin: float
    type: str = "galaxy"


@dataclass(frozen=True)
class TwoLineElement:
    name: str
    line1: str
    line2: str


@dataclass(frozen=True)
class ViewPort:
    center: HorizontalCoordinate
    fov_deg: float = 120.0

    def __post_init__(self):
        fov = require_finite("fov_deg", self.fov_deg)
        if fov <= 0:
            raise InvalidInputError(f"Field of view must be positive, got {fov}")


@dataclass(frozen=True)
class BodyPosition:
    name: str
    equatorial: EquatorialCoordinate
    horizontal: HorizontalCoordinate
    distance_au: float


@dataclass(frozen=True)
class CometPosition:
    name: str
    designation: str | None
    equatorial: EquatorialCoordinate
    horizontal: HorizontalCoordinate
    helio_distance_au: float
    geo_distance_au: float
    converged: bool
    apparent_magnitude: float | None = None


@dataclass(frozen=True)
class CometResult:
    elements: OrbitalElements
    position: CometPosition | None = None
    point: NormalizedPoint | None = None
    visibility: VisibilityResult | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.position is not None


@dataclass(frozen=True)
class SatellitePosition:
    name: str
    horizontal: HorizontalCoordinate
    range_km: float
    satnum: int | None = None
    inclination_deg: float | None = None
    mean_motion_rev_per_day: float | None = None
    period_min: float | None = None


@dataclass(frozen=True)
class MoonPhase:
    phase: float
    name: str
    age_days: float
    illumination_frac: float

    @property
    def waxing(self) -> bool:
        return self.phase < 0.5


@dataclass(frozen=True)
class SkyConditions:
    observer: Observer
    instant: datetime.datetime
    bortle_scale: int
    sun: HorizontalCoordinate
    moon: HorizontalCoordinate
    moon_illumination_frac: float
    moon_phase: MoonPhase

    def inputs(self, target_altitude_deg: float = 90.0) -> VisibilityInputs:
        return VisibilityInputs(
            bortle_scale=self.bortle_scale,
            sun_altitude_deg=self.sun.altitude_deg,
            moon_altitude_deg=self.moon.altitude_deg,
            moon_illumination_frac=self.moon_illumination_frac,
            target_altitude_deg=target_altitude_deg,
        )


@dataclass(frozen=True)
class StarView:
    star: Star
    horizontal: HorizontalCoordinate | None
    visibility: VisibilityResult | None
    point: NormalizedPoint | None = None
    error: str | None = None


@dataclass(frozen=True)
class DeepSkyView:
    object: DeepSkyObject
    horizontal: HorizontalCoordinate | None
    detectability: DsoDetectability | None
    point: NormalizedPoint | None = None
    error: str | None = None


@dataclass
class SkySnapshot:
    conditions: SkyConditions
    stars: Sequence[StarView] = field(default_factory=list)
    deep_sky: Sequence[DeepSkyView] = field(default_factory=list)
    comets: Sequence[CometResult] = field(default_factory=list)
    satellites: Sequence[SatellitePosition] = field(default_factory=list)
    planets: Sequence[BodyPosition] = field(default_factory=list)
