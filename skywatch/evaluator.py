import dataclasses
import datetime
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Sequence, TypeVar

from skywatch.astro.coordinates import equatorial_to_horizontal, project_fisheye
from skywatch.astro.solar import sky_conditions
from skywatch.astro.timescale import as_utc
from skywatch.ephemeris import EphemerisProvider, get_ephemeris_provider
from skywatch.errors import InvalidInputError, SkywatchError
from skywatch.lightpollution import LightPollutionSite, estimate_bortle_for_location
from skywatch.resolver import resolve_body, resolve_comets
from skywatch.satellites import SatellitePropagator, get_satellite_propagator, satellite_positions
from skywatch.types import (
    BodyPosition,
    CometResult,
    DeepSkyObject,
    DeepSkyView,
    EquatorialCoordinate,
    Observer,
    OrbitalElements,
    SatellitePosition,
    SkyConditions,
    SkySnapshot,
    Star,
    StarView,
    TwoLineElement,
    ViewPort,
)
from skywatch.visibility import clamp_bortle, evaluate_dso_detectability, evaluate_star_visibility

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_PLANETS = ("mercury", "venus", "mars", "jupiter", "saturn", "uranus", "neptune")


def _map_ordered(fn: Callable[[T], R], items: Sequence[T], workers: int | None) -> list[R]:
    if not workers or workers <= 1 or len(items) <= 1:
        return [fn(item) for item in items]
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(fn, items))


class SkyEvaluator:
    """Evaluates catalogs against one observer and instant.

    Every per-object failure is recorded on that object's result and logged;
    a batch is never aborted by a single bad record.
    """

    def __init__(
        self,
        config,
        ephemeris: EphemerisProvider | None = None,
        propagator: SatellitePropagator | None = None,
        light_pollution_sites: Iterable[LightPollutionSite] = (),
    ):
        self._config = config
        self._ephemeris = ephemeris or get_ephemeris_provider(config)
        self._propagator = propagator or get_satellite_propagator(config)
        self._sites = tuple(light_pollution_sites)
        self._params = config.visibility_params()

    def _observer(self, observer: Observer | None) -> Observer:
        observer = observer or self._config.observer()
        if observer is None:
            raise InvalidInputError("Observer location is required (lat/lon)")
        return observer

    def _bortle(self, observer: Observer, bortle: int | None) -> int:
        if bortle is None:
            bortle = self._config.site_bortle
        if bortle is None:
            estimate = estimate_bortle_for_location(
                observer.latitude_deg, observer.longitude_deg, self._sites
            )
            logger.debug(
                "Estimated Bortle %d (nearest site %s)", estimate.bortle, estimate.nearest_site
            )
            bortle = estimate.bortle
        return clamp_bortle(bortle)

    def conditions(
        self,
        observer: Observer | None,
        instant: datetime.datetime,
        bortle: int | None = None,
    ) -> SkyConditions:
        observer = self._observer(observer)
        return sky_conditions(observer, as_utc(instant), self._bortle(observer, bortle))

    def stars(
        self,
        stars: Sequence[Star],
        observer: Observer | None,
        instant: datetime.datetime,
        view: ViewPort | None = None,
        bortle: int | None = None,
        workers: int | None = None,
    ) -> list[StarView]:
        cond = self.conditions(observer, instant, bortle)

        def evaluate(star: Star) -> StarView:
            try:
                hor = equatorial_to_horizontal(
                    EquatorialCoordinate(star.ra_deg, star.dec_deg), cond.observer, cond.instant
                )
                visibility = evaluate_star_visibility(
                    star.magnitude, cond.inputs(hor.altitude_deg), self._params
                )
                point = None
                if view is not None:
                    point = project_fisheye(hor, view.center, view.fov_deg)
            except SkywatchError as e:
                logger.warning("Skipping star %s: %s", star.id, e)
                return StarView(star=star, horizontal=None, visibility=None, error=str(e))
            return StarView(star=star, horizontal=hor, visibility=visibility, point=point)

        return _map_ordered(evaluate, list(stars), workers)

    def deep_sky(
        self,
        objects: Sequence[DeepSkyObject],
        observer: Observer | None,
        instant: datetime.datetime,
        view: ViewPort | None = None,
        bortle: int | None = None,
        workers: int | None = None,
    ) -> list[DeepSkyView]:
        cond = self.conditions(observer, instant, bortle)

        def evaluate(dso: DeepSkyObject) -> DeepSkyView:
            try:
                hor = equatorial_to_horizontal(
                    EquatorialCoordinate(dso.ra_deg, dso.dec_deg), cond.observer, cond.instant
                )
                detectability = evaluate_dso_detectability(
                    dso, cond.inputs(hor.altitude_deg), self._params
                )
                point = None
                if view is not None:
                    point = project_fisheye(hor, view.center, view.fov_deg)
            except SkywatchError as e:
                logger.warning("Skipping deep-sky object %s: %s", dso.id, e)
                return DeepSkyView(object=dso, horizontal=None, detectability=None, error=str(e))
            return DeepSkyView(object=dso, horizontal=hor, detectability=detectability, point=point)

        return _map_ordered(evaluate, list(objects), workers)

    def _comet_visibility(self, result: CometResult, cond: SkyConditions) -> CometResult:
        position = result.position
        if position is None or position.apparent_magnitude is None:
            return result
        try:
            visibility = evaluate_star_visibility(
                position.apparent_magnitude,
                cond.inputs(position.horizontal.altitude_deg),
                self._params,
            )
        except SkywatchError as e:
            logger.warning("No visibility for comet %s: %s", position.name, e)
            return result
        return dataclasses.replace(result, visibility=visibility)

    def comets(
        self,
        elements: Iterable[OrbitalElements],
        observer: Observer | None,
        instant: datetime.datetime,
        view: ViewPort | None = None,
        bortle: int | None = None,
    ) -> list[CometResult]:
        """Resolved comets, highest first.

        Records that carry an absolute magnitude also get a naked-eye verdict.
        """
        cond = self.conditions(observer, instant, bortle)
        results = resolve_comets(elements, cond.observer, cond.instant, self._ephemeris, view=view)
        return [self._comet_visibility(result, cond) for result in results]

    def planets(
        self,
        observer: Observer | None,
        instant: datetime.datetime,
        bodies: Iterable[str] = DEFAULT_PLANETS,
    ) -> list[BodyPosition]:
        observer = self._observer(observer)
        instant = as_utc(instant)
        positions = []
        for body in bodies:
            try:
                positions.append(resolve_body(body, observer, instant, self._ephemeris))
            except SkywatchError as e:
                logger.warning("Skipping body %s: %s", body, e)
        return positions

    def satellites(
        self,
        tles: Iterable[TwoLineElement],
        observer: Observer | None,
        instant: datetime.datetime,
        above_horizon_only: bool = False,
    ) -> list[SatellitePosition]:
        return satellite_positions(
            tles,
            self._observer(observer),
            as_utc(instant),
            self._propagator,
            above_horizon_only=above_horizon_only,
        )

    def snapshot(
        self,
        observer: Observer | None,
        instant: datetime.datetime,
        stars: Sequence[Star] = (),
        deep_sky: Sequence[DeepSkyObject] = (),
        comets: Iterable[OrbitalElements] = (),
        tles: Iterable[TwoLineElement] = (),
        view: ViewPort | None = None,
        bortle: int | None = None,
        workers: int | None = None,
    ) -> SkySnapshot:
        observer = self._observer(observer)
        instant = as_utc(instant)
        view = view or self._config.view_port()
        return SkySnapshot(
            conditions=self.conditions(observer, instant, bortle),
            stars=self.stars(stars, observer, instant, view, bortle, workers),
            deep_sky=self.deep_sky(deep_sky, observer, instant, view, bortle, workers),
            comets=self.comets(comets, observer, instant, view, bortle),
            satellites=self.satellites(tles, observer, instant),
            planets=self.planets(observer, instant),
        )
