from abc import ABC, abstractmethod
import datetime

from skywatch.types import Observer, SatellitePosition, TwoLineElement


class SatellitePropagator(ABC):
    """Look angles of an artificial satellite from a two-line element set."""

    name: str

    @abstractmethod
    def look_angles(
        self,
        tle: TwoLineElement,
        observer: Observer,
        instant: datetime.datetime,
    ) -> SatellitePosition:
        pass

    def is_available(self) -> dict:
        """Return a dict with 'ok' (bool) and 'detail' (str)."""
        return {"ok": False, "detail": "not implemented"}
