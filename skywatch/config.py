from pathlib import Path
from typing import TYPE_CHECKING

from skywatch.astro.angles import require_finite
from skywatch.errors import InvalidInputError
from skywatch.types import HorizontalCoordinate, Observer, ViewPort, VisibilityParams

if TYPE_CHECKING:
    import tomli as tomllib
else:
    try:
        import tomllib
    except ModuleNotFoundError:  # Python < 3.11
        import tomli as tomllib

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "skywatch" / "config.toml"

_VISIBILITY_KEYS = (
    "extinction_k",
    "margin_mag",
    "dso_threshold",
    "twilight_limiting_mag",
    "moon_max_penalty_mag",
)


class Config:
    def __init__(self, data: dict):
        self._data = data

    def _section(self, name: str) -> dict:
        section = self._data.get(name, {})
        if not isinstance(section, dict):
            raise InvalidInputError(f"Config section [{name}] must be a table")
        return section

    @property
    def site_latitude_deg(self):
        return self._section("site").get("latitude_deg", None)

    @property
    def site_longitude_deg(self):
        return self._section("site").get("longitude_deg", None)

    @property
    def site_elevation_m(self):
        return self._section("site").get("elevation_m", 0.0)

    @property
    def site_name(self):
        return self._section("site").get("name", None)

    @property
    def site_bortle(self):
        return self._section("site").get("bortle", None)

    @property
    def view_fov_deg(self):
        return self._section("view").get("fov_deg", 120.0)

    @property
    def view_center_altitude_deg(self):
        return self._section("view").get("center_altitude_deg", 45.0)

    @property
    def view_center_azimuth_deg(self):
        return self._section("view").get("center_azimuth_deg", 180.0)

    @property
    def ephemeris_backend(self):
        return self._section("ephemeris").get("backend", "low_precision")

    @property
    def satellites_backend(self):
        return self._section("satellites").get("backend", "sgp4")

    def observer(self) -> Observer | None:
        lat = self.site_latitude_deg
        lon = self.site_longitude_deg
        if lat is None or lon is None:
            return None
        return Observer(
            latitude_deg=lat,
            longitude_deg=lon,
            elevation_m=self.site_elevation_m,
            name=self.site_name,
        )

    def visibility_params(self) -> VisibilityParams:
        section = self._section("visibility")
        unknown = sorted(set(section) - set(_VISIBILITY_KEYS))
        if unknown:
            raise InvalidInputError(f"Unknown [visibility] keys: {', '.join(unknown)}")
        return VisibilityParams(**{key: require_finite(key, section[key]) for key in section})

    def view_port(self) -> ViewPort:
        return ViewPort(
            center=HorizontalCoordinate(
                altitude_deg=self.view_center_altitude_deg,
                azimuth_deg=self.view_center_azimuth_deg,
            ),
            fov_deg=self.view_fov_deg,
        )


def load_config(path: Path | None = None) -> Config:
    explicit_path = path
    path = path or DEFAULT_CONFIG_PATH

    if not path.exists():
        if explicit_path is not None:
            raise FileNotFoundError(f"Config file not found: {path}")
        # Return default config if default file missing
        return Config({})

    with open(path, "rb") as f:
        data = tomllib.load(f)

    return Config(data)
