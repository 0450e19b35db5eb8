import logging

from skywatch.errors import BackendError
from .base import EphemerisProvider
from .low_precision import LowPrecisionEphemeris

logger = logging.getLogger(__name__)


def get_ephemeris_provider(config) -> EphemerisProvider:
    backend = getattr(config, "ephemeris_backend", None) or "low_precision"
    logger.debug("Using ephemeris backend %s", backend)
    if backend == "low_precision":
        return LowPrecisionEphemeris()
    raise BackendError(f"Unsupported ephemeris backend: {backend}")


__all__ = ["EphemerisProvider", "LowPrecisionEphemeris", "get_ephemeris_provider"]
