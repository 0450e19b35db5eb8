from pathlib import Path

import pytest

from skywatch.config import Config, load_config
from skywatch.errors import InvalidInputError
from skywatch.types import Observer, VisibilityParams


def test_defaults():
    config = Config({})
    assert config.observer() is None
    assert config.site_bortle is None
    assert config.ephemeris_backend == "low_precision"
    assert config.satellites_backend == "sgp4"
    assert config.visibility_params() == VisibilityParams()
    view = config.view_port()
    assert view.fov_deg == 120.0
    assert view.center.altitude_deg == 45.0
    assert view.center.azimuth_deg == 180.0


def test_site_observer():
    config = Config(
        {
            "site": {
                "latitude_deg": -34.93,
                "longitude_deg": 138.60,
                "elevation_m": 50,
                "name": "Adelaide",
                "bortle": 6,
            }
        }
    )
    assert config.observer() == Observer(-34.93, 138.60, 50.0, "Adelaide")
    assert config.site_bortle == 6


def test_site_longitude_normalized():
    config = Config({"site": {"latitude_deg": 10.0, "longitude_deg": 270.0}})
    assert config.observer().longitude_deg == pytest.approx(-90.0)


def test_invalid_site_raises():
    config = Config({"site": {"latitude_deg": 95.0, "longitude_deg": 0.0}})
    with pytest.raises(InvalidInputError):
        config.observer()


def test_visibility_overrides():
    config = Config({"visibility": {"extinction_k": 0.3, "dso_threshold": 0.2}})
    params = config.visibility_params()
    assert params.extinction_k == 0.3
    assert params.dso_threshold == 0.2
    assert params.margin_mag == 0.2


def test_visibility_rejects_unknown_and_bad_values():
    with pytest.raises(InvalidInputError):
        Config({"visibility": {"extinction": 0.3}}).visibility_params()
    with pytest.raises(InvalidInputError):
        Config({"visibility": {"margin_mag": "lots"}}).visibility_params()


def test_section_must_be_table():
    with pytest.raises(InvalidInputError):
        Config({"view": 3}).view_port()


def test_load_config(tmp_path: Path):
    path = tmp_path / "config.toml"
    path.write_text(
        "[site]\nlatitude_deg = 51.48\nlongitude_deg = 0.0\nbortle = 7\n\n"
        "[view]\nfov_deg = 90\ncenter_azimuth_deg = 90\n"
    )
    config = load_config(path)
    assert config.observer().latitude_deg == 51.48
    assert config.site_bortle == 7
    view = config.view_port()
    assert view.fov_deg == 90
    assert view.center.azimuth_deg == 90.0


def test_load_config_missing_explicit_path(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.toml")


def test_load_config_missing_default(tmp_path: Path, monkeypatch):
    monkeypatch.setattr("skywatch.config.DEFAULT_CONFIG_PATH", tmp_path / "nope.toml")
    config = load_config()
    assert config.observer() is None
