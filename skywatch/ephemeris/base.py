from abc import ABC, abstractmethod
import datetime

from skywatch.types import Observer, Vec3


class EphemerisProvider(ABC):
    """Source of solar-system and observer-site vectors.

    Vectors are equatorial J2000 in AU: heliocentric for bodies, geocentric
    for the observer's site.
    """

    name: str

    @abstractmethod
    def heliocentric_position(self, body: str, instant: datetime.datetime) -> Vec3:
        pass

    @abstractmethod
    def observer_position(self, observer: Observer, instant: datetime.datetime) -> Vec3:
        pass

    def is_available(self) -> dict:
        """Return a dict with 'ok' (bool) and 'detail' (str)."""
        return {"ok": False, "detail": "not implemented"}
