"""
Main route generation service
Runs the distance-matching search once per arc span variant and joins the results
"""
import asyncio
import logging
import math
from typing import List, Optional, Sequence

from looproute.config import settings
from looproute.errors import InvalidRouteRequestError, RouteGenerationError
from looproute.models.geo import GeoPoint, Route
from looproute.models.request import RouteRequest
from looproute.models.response import RouteResponse
from looproute.services.map.map_service import MapService
from looproute.services.map.ors_map_service import OpenRouteService
from looproute.services.route.distance_matcher import DistanceMatcher
from looproute.services.route.response_builder import ResponseBuilderService
from looproute.services.route.route_builder import RouteBuilder

logger = logging.getLogger(__name__)

BEST_EFFORT = "best_effort"
ALL_OR_NOTHING = "all_or_nothing"


class RouteVariants:
    """Generated routes in variant order plus the currently selected one"""

    def __init__(self, routes: Sequence[Route], arc_spans: Sequence[float]):
        if len(routes) != len(arc_spans):
            raise ValueError("Every route needs the arc span it was generated with")
        self.routes: List[Route] = list(routes)
        self.arc_spans: List[float] = list(arc_spans)
        self.selected_index = 0

    def __len__(self) -> int:
        return len(self.routes)

    @property
    def current(self) -> Optional[Route]:
        if not self.routes:
            return None
        return self.routes[self.selected_index]

    def switch_to(self, index: int) -> bool:
        """Select another variant, out-of-range indices leave the selection unchanged"""
        if 0 <= index < len(self.routes):
            self.selected_index = index
            return True
        logger.debug("Ignoring switch to route %d of %d", index, len(self.routes))
        return False


class RouteService:
    """
    Main route generation service

    Architecture: per arc span (in parallel) distance-matching search → join → response building
    """

    def __init__(
        self,
        map_service: Optional[MapService] = None,
        arc_spans: Optional[Sequence[float]] = None,
        variant_policy: Optional[str] = None,
    ):
        self.map_service = map_service or OpenRouteService()
        self.route_builder = RouteBuilder(self.map_service)
        self.distance_matcher = DistanceMatcher(self.route_builder)
        self.response_builder = ResponseBuilderService()
        self.arc_spans = list(arc_spans if arc_spans is not None else settings.arc_spans)
        self.variant_policy = variant_policy or settings.variant_policy

        if self.variant_policy not in (BEST_EFFORT, ALL_OR_NOTHING):
            raise ValueError(f"Unknown variant policy: {self.variant_policy}")
        self._validate_arc_spans(self.arc_spans)

    @staticmethod
    def _validate_arc_spans(arc_spans: Sequence[float]) -> None:
        if not arc_spans:
            raise InvalidRouteRequestError("At least one arc span is required")
        for arc in arc_spans:
            if not 0 < arc <= 360:
                raise InvalidRouteRequestError(f"Arc span {arc} outside (0, 360]")

    async def generate_variants(
        self,
        center: GeoPoint,
        target_km: float,
        arc_spans: Optional[Sequence[float]] = None,
    ) -> RouteVariants:
        """
        Generate one loop per arc span for the same center and target distance

        Searches run concurrently; the result is only returned once all of them
        have finished. Cancelling this call cancels every search.
        """
        if not (target_km > 0 and math.isfinite(target_km)):
            raise InvalidRouteRequestError(
                f"Target distance must be positive and finite, got {target_km}"
            )
        arcs = list(arc_spans) if arc_spans is not None else self.arc_spans
        self._validate_arc_spans(arcs)

        logger.info(
            "Generating %d route variants for %.2fkm from %.5f, %.5f",
            len(arcs),
            target_km,
            center.lat,
            center.lng,
        )

        if self.variant_policy == ALL_OR_NOTHING:
            variants = await self._run_all_or_nothing(center, target_km, arcs)
        else:
            variants = await self._run_best_effort(center, target_km, arcs)

        logger.info("Route generated successfully! %d variants", len(variants))
        return variants

    async def _run_all_or_nothing(
        self, center: GeoPoint, target_km: float, arcs: List[float]
    ) -> RouteVariants:
        try:
            async with asyncio.TaskGroup() as tg:
                tasks = [
                    tg.create_task(self.distance_matcher.match(center, target_km, arc))
                    for arc in arcs
                ]
        except ExceptionGroup as eg:
            # TaskGroup already cancelled the remaining searches
            first = eg.exceptions[0]
            logger.warning("Route generation failed: %s", first)
            raise first from None
        return RouteVariants([task.result() for task in tasks], arcs)

    async def _run_best_effort(
        self, center: GeoPoint, target_km: float, arcs: List[float]
    ) -> RouteVariants:
        results = await asyncio.gather(
            *(self.distance_matcher.match(center, target_km, arc) for arc in arcs),
            return_exceptions=True,
        )

        routes: List[Route] = []
        kept_arcs: List[float] = []
        failures: List[RouteGenerationError] = []
        for arc, result in zip(arcs, results):
            if isinstance(result, InvalidRouteRequestError):
                # the request itself is unusable, not just this variant
                raise result
            elif isinstance(result, RouteGenerationError):
                logger.warning("Route variant %.0f° failed: %s", arc, result)
                failures.append(result)
            elif isinstance(result, BaseException):
                raise result
            else:
                routes.append(result)
                kept_arcs.append(arc)

        if not routes:
            raise RouteGenerationError(
                f"All {len(arcs)} route variants failed: {failures[0]}"
            ) from failures[0]
        return RouteVariants(routes, kept_arcs)

    async def generate_routes(self, center: GeoPoint, target_km: float) -> List[Route]:
        """Generate one route per configured arc span, in arc span order"""
        variants = await self.generate_variants(center, target_km)
        return variants.routes

    async def generate_response(self, request: RouteRequest) -> RouteResponse:
        """Generate route variants for an API request and build the response"""
        variants = await self.generate_variants(
            request.center, request.distance_km, request.arc_spans
        )
        return self.response_builder.build_response(
            variants.routes,
            variants.arc_spans,
            selected_index=variants.selected_index,
            criteria=request.model_dump(),
        )
