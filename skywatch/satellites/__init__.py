import datetime
import logging
from typing import Iterable

from skywatch.errors import BackendError, SkywatchError
from skywatch.types import Observer, SatellitePosition, TwoLineElement
from .base import SatellitePropagator
from .sgp4 import Sgp4Propagator

logger = logging.getLogger(__name__)


def get_satellite_propagator(config) -> SatellitePropagator:
    backend = getattr(config, "satellites_backend", None) or "sgp4"
    logger.debug("Using satellite backend %s", backend)
    if backend == "sgp4":
        return Sgp4Propagator()
    raise BackendError(f"Unsupported satellite backend: {backend}")


def satellite_positions(
    tles: Iterable[TwoLineElement],
    observer: Observer,
    instant: datetime.datetime,
    propagator: SatellitePropagator,
    above_horizon_only: bool = False,
) -> list[SatellitePosition]:
    """Look angles for every TLE that propagates; bad records are skipped."""
    positions = []
    for tle in tles:
        try:
            position = propagator.look_angles(tle, observer, instant)
        except SkywatchError as e:
            logger.warning("Skipping satellite %s: %s", tle.name, e)
            continue
        if above_horizon_only and not position.horizontal.above_horizon:
            continue
        positions.append(position)
    return positions


__all__ = [
    "SatellitePropagator",
    "Sgp4Propagator",
    "get_satellite_propagator",
    "satellite_positions",
]
