from .format import (
    deg_to_dms,
    deg_to_hms,
    format_angle,
)

__all__ = [
    "deg_to_dms",
    "deg_to_hms",
    "format_angle",
]
