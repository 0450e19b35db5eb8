"""Naked-eye visibility model.

Blends twilight, moonlight, light pollution (Bortle class) and airmass
extinction into a limiting magnitude, a boolean gate and a continuous fade
weight. The constants in :class:`VisibilityParams` are perceptual tuning
values, not photometric standards; override them through config.
"""

import math

from skywatch.astro.angles import clamp01, require_finite
from skywatch.types import (
    DeepSkyObject,
    DsoDetectability,
    VisibilityInputs,
    VisibilityParams,
    VisibilityResult,
)

DEFAULT_PARAMS = VisibilityParams()

# Naked-eye limiting magnitude per Bortle class 1..9.
BORTLE_LIMITING_MAG = (8.0, 7.6, 7.1, 6.6, 6.1, 5.6, 5.1, 4.6, 4.1)

BORTLE_DESCRIPTIONS = {
    1: "Excellent dark-sky site",
    2: "Typical dark site",
    3: "Rural sky",
    4: "Rural/suburban transition",
    5: "Suburban sky",
    6: "Bright suburban sky",
    7: "Suburban/urban transition",
    8: "City sky",
    9: "Inner-city sky",
}

EXTINCTION_BELOW_HORIZON_MAG = 10.0
MIN_LIMITING_MAG = -1.5
MAX_LIMITING_MAG = 9.0
ARCMIN2_TO_ARCSEC2_MAG = 2.5 * math.log10(3600.0)


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def clamp_bortle(bortle_scale: float) -> int:
    return max(1, min(9, int(round(require_finite("bortle_scale", bortle_scale)))))


def bortle_description(bortle_scale: float) -> str:
    return BORTLE_DESCRIPTIONS[clamp_bortle(bortle_scale)]


def twilight_factor(sun_altitude_deg: float) -> float:
    """0 at civil twilight (-6 deg) or brighter, 1 at astronomical night (-18 deg)."""
    return clamp01((-require_finite("sun_altitude_deg", sun_altitude_deg) - 6.0) / 12.0)


def moon_wash_factor(
    moon_altitude_deg: float | None,
    moon_illumination_frac: float | None,
) -> float:
    if moon_altitude_deg is None or moon_illumination_frac is None:
        return 0.0
    alt = require_finite("moon_altitude_deg", moon_altitude_deg)
    illum = clamp01(require_finite("moon_illumination_frac", moon_illumination_frac))
    if alt < -2.0 or illum == 0.0:
        return 0.0
    above = clamp01((alt + 2.0) / 22.0)
    return clamp01(illum * (0.35 + 0.65 * above))


def bortle_limiting_magnitude(bortle_scale: float) -> float:
    return BORTLE_LIMITING_MAG[clamp_bortle(bortle_scale) - 1]


def effective_limiting_magnitude(
    inputs: VisibilityInputs,
    params: VisibilityParams = DEFAULT_PARAMS,
) -> float:
    base = bortle_limiting_magnitude(inputs.bortle_scale)
    tw = twilight_factor(inputs.sun_altitude_deg)
    mw = moon_wash_factor(inputs.moon_altitude_deg, inputs.moon_illumination_frac)
    lim = _lerp(params.twilight_limiting_mag, base, tw)
    lim -= params.moon_max_penalty_mag * mw
    return max(MIN_LIMITING_MAG, min(MAX_LIMITING_MAG, lim))


def airmass(altitude_deg: float) -> float:
    """Kasten & Young (1989) relative airmass; infinite at or below -5 deg."""
    altitude_deg = require_finite("altitude_deg", altitude_deg)
    if altitude_deg <= -5.0:
        return math.inf
    alt = min(90.0, altitude_deg)
    denom = math.sin(math.radians(alt)) + 0.50572 * (alt + 6.07995) ** -1.6364
    return 1.0 / max(1e-6, denom)


def extinction_delta_magnitude(altitude_deg: float, k_mag_per_airmass: float = 0.20) -> float:
    if require_finite("altitude_deg", altitude_deg) <= 0.0:
        return EXTINCTION_BELOW_HORIZON_MAG
    return k_mag_per_airmass * max(0.0, airmass(altitude_deg) - 1.0)


def evaluate_star_visibility(
    star_magnitude: float,
    inputs: VisibilityInputs,
    params: VisibilityParams = DEFAULT_PARAMS,
) -> VisibilityResult:
    star_magnitude = require_finite("star_magnitude", star_magnitude)
    limiting = effective_limiting_magnitude(inputs, params)
    effective = star_magnitude + extinction_delta_magnitude(
        inputs.target_altitude_deg, params.extinction_k
    )
    tw = twilight_factor(inputs.sun_altitude_deg)
    mw = moon_wash_factor(inputs.moon_altitude_deg, inputs.moon_illumination_frac)
    return VisibilityResult(
        visible=effective <= limiting + params.margin_mag,
        effective_magnitude=effective,
        limiting_magnitude=limiting,
        alpha_scale=clamp01(tw * (1.0 - 0.70 * mw)),
    )


def estimate_sky_background(limiting_magnitude: float) -> float:
    """Sky surface brightness (mag/arcsec^2) implied by a limiting magnitude.

    LM 4 maps to about 19, LM 6 to 20.6, LM 8 to 22.2.
    """
    lm = max(0.0, min(9.0, require_finite("limiting_magnitude", limiting_magnitude)))
    return 19.0 + (lm - 4.0) * 0.80


def surface_brightness(magnitude: float, size_arcmin: float) -> float:
    """Mean surface brightness (mag/arcsec^2) of a uniform disc."""
    size = max(0.2, size_arcmin)
    area_arcmin2 = math.pi * (size / 2.0) ** 2
    return magnitude + 2.5 * math.log10(max(1e-6, area_arcmin2)) + ARCMIN2_TO_ARCSEC2_MAG


def evaluate_dso_detectability(
    dso: DeepSkyObject,
    inputs: VisibilityInputs,
    params: VisibilityParams = DEFAULT_PARAMS,
) -> DsoDetectability:
    """Contrast-based detectability of an extended object.

    Spreading the light over the object's area makes it fainter per unit
    area than a star of the same total magnitude, and the result is scaled
    down further by low altitude, twilight and moonlight.
    """
    magnitude = require_finite("magnitude", dso.magnitude)
    size = require_finite("size_arcmin", dso.size_arcmin)
    limiting = effective_limiting_magnitude(inputs, params)
    tw = twilight_factor(inputs.sun_altitude_deg)
    mw = moon_wash_factor(inputs.moon_altitude_deg, inputs.moon_illumination_frac)
    ext = extinction_delta_magnitude(inputs.target_altitude_deg, params.extinction_k)

    sb = surface_brightness(magnitude + ext, size)
    sky = estimate_sky_background(limiting)
    contrast = (sky + 1.2) - sb

    alt_boost = clamp01((inputs.target_altitude_deg + 2.0) / 25.0)
    raw = clamp01((contrast + 1.0) / 3.0)
    alpha = clamp01(raw * alt_boost * tw * (1.0 - 0.85 * mw))
    return DsoDetectability(
        visible=alpha > params.dso_threshold,
        alpha=alpha,
        surface_brightness_mag_arcsec2=sb,
        sky_background_mag_arcsec2=sky,
    )
