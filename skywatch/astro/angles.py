"""Angle helpers shared by every transform.

All inverse-trig call sites go through :func:`clamp_unit` so that
floating-point overshoot (e.g. ``1.0000000000000002``) never reaches
``math.asin``/``math.acos``.
"""

import math

from skywatch.errors import InvalidInputError

TWO_PI = 2.0 * math.pi


def clamp_unit(value: float) -> float:
    if math.isnan(value):
        raise InvalidInputError("Cannot clamp NaN to [-1, 1]")
    return max(-1.0, min(1.0, value))


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def normalize_deg(angle: float) -> float:
    """Reduce an angle in degrees to [0, 360)."""
    normalized = angle % 360.0
    # -1e-17 % 360.0 rounds to 360.0
    if normalized >= 360.0:
        normalized -= 360.0
    return normalized


def normalize_rad(angle: float) -> float:
    normalized = angle % TWO_PI
    if normalized >= TWO_PI:
        normalized -= TWO_PI
    return normalized


def wrap_pi(angle: float) -> float:
    """Reduce an angle in radians to [-pi, pi)."""
    return normalize_rad(angle + math.pi) - math.pi


def require_finite(name: str, value: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"{name} must be a number, got {value!r}") from e
    if not math.isfinite(value):
        raise InvalidInputError(f"{name} must be finite, got {value}")
    return value
