"""Display helpers: sexagesimal angles and star colours."""

_SECONDS_PER_DAY = 24 * 3600

# (upper B-V bound, colour) from hot O/B stars to cool M stars.
_BV_COLORS = (
    (-0.3, "#9bb0ff"),
    (-0.02, "#aabfff"),
    (0.3, "#cad7ff"),
    (0.6, "#fbf8ff"),
    (0.82, "#fff4e8"),
    (1.4, "#ffd2a1"),
)
_COOLEST_COLOR = "#ffcc6f"


def _sexagesimal(total_seconds: float) -> tuple[int, int, float]:
    whole, rem = divmod(total_seconds, 3600.0)
    minutes, seconds = divmod(rem, 60.0)
    return int(whole), int(minutes), seconds


def _seconds_field(seconds: float, precision: int) -> str:
    width = 2 if precision <= 0 else 3 + precision
    return f"{seconds:0{width}.{precision}f}"


def deg_to_hms(deg: float, precision: int = 2) -> str:
    # Round before splitting so 59.996s carries into the minute; wrap after.
    total = round((deg / 15.0) % 24.0 * 3600.0, precision) % _SECONDS_PER_DAY
    h, m, s = _sexagesimal(total)
    return f"{h:02d}:{m:02d}:{_seconds_field(s, precision)}"


def deg_to_dms(deg: float, precision: int = 2) -> str:
    sign = "-" if deg < 0 else "+"
    d, m, s = _sexagesimal(round(abs(deg) * 3600.0, precision))
    return f"{sign}{d:02d}:{m:02d}:{_seconds_field(s, precision)}"


def format_angle(deg: float, style: str = "deg", precision: int = 2) -> str:
    if style == "deg":
        return f"{deg:.{precision}f}°"
    if style == "arcmin":
        return f"{deg * 60.0:.{precision}f}'"
    if style == "hms":
        return deg_to_hms(deg, precision=precision)
    if style == "dms":
        return deg_to_dms(deg, precision=precision)
    raise ValueError(f"Unknown angle style: {style}")


def bv_color_hex(bv: float | None) -> str:
    """Approximate display colour for a B-V colour index; unknown is taken as 0."""
    bv = 0.0 if bv is None else bv
    for bound, color in _BV_COLORS:
        if bv < bound:
            return color
    return _COOLEST_COLOR
