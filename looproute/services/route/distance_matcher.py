"""
Distance-matching search over the ring radius.

Routed distance grows with the ring radius but not linearly: road networks do
not follow the circle. The search bisects the radius bounds, keeps the best
route seen so far and stops on one of two tolerance bands or when the attempt
budget runs out, so the number of network round trips stays bounded.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from looproute.config import settings
from looproute.models.geo import GeoPoint, Route
from looproute.services.route.route_builder import RouteBuilder

logger = logging.getLogger(__name__)

PRIMARY_TOLERANCE_KM = 0.5


def secondary_tolerance(target_km: float) -> float:
    """Fallback acceptance band, 5% of the target for routes of 20 km and longer"""
    if target_km >= 20.0:
        return max(1.0, target_km * 0.05)
    return 1.0


def attempt_budget(target_km: float) -> int:
    """Number of pipeline calls allowed before the budget is extended"""
    if target_km < 5.0:
        return 5
    if target_km < 15.0:
        return 7
    return 10


@dataclass
class SearchState:
    min_radius: float
    max_radius: float
    max_attempts: int
    attempt: int = 0
    attempts_doubled: bool = False
    best_route: Optional[Route] = None
    best_abs_diff: float = math.inf

    @property
    def mid_radius(self) -> float:
        return (self.min_radius + self.max_radius) / 2

    def offer(self, route: Route, abs_diff: float) -> None:
        if abs_diff < self.best_abs_diff:
            self.best_route = route
            self.best_abs_diff = abs_diff


class DistanceMatcher:
    """Find a ring radius whose routed loop distance matches a target distance"""

    def __init__(
        self,
        route_builder: RouteBuilder,
        min_radius_km: Optional[float] = None,
        max_radius_km: Optional[float] = None,
    ):
        self.route_builder = route_builder
        self.min_radius_km = min_radius_km if min_radius_km is not None else settings.min_radius_km
        self.max_radius_km = max_radius_km if max_radius_km is not None else settings.max_radius_km

        if not 0 < self.min_radius_km < self.max_radius_km:
            raise ValueError(
                f"Invalid radius bounds [{self.min_radius_km}, {self.max_radius_km}]"
            )

    async def match(
        self, center: GeoPoint, target_km: float, arc_degrees: float = 360.0
    ) -> Route:
        """
        Search for the route closest to target_km.

        Args:
            center: Start and end of the loop
            target_km: Requested routed distance, > 0
            arc_degrees: Arc span of the waypoint ring

        Returns:
            The first route within tolerance, otherwise the best route seen
            once the (possibly doubled) attempt budget is used up

        Raises:
            Any pipeline failure, immediately and without retry
        """
        state = SearchState(
            min_radius=self.min_radius_km,
            max_radius=self.max_radius_km,
            max_attempts=attempt_budget(target_km),
        )
        fallback_tolerance = secondary_tolerance(target_km)

        while state.attempt < state.max_attempts:
            mid_radius = state.mid_radius
            route = await self.route_builder.build_route(center, mid_radius, arc_degrees)

            diff = route.distance_km - target_km
            abs_diff = abs(diff)
            state.offer(route, abs_diff)
            logger.info(
                "Arc %.0f° attempt %d/%d, radius = %.4fkm got = %.3fkm target = %.3fkm",
                arc_degrees,
                state.attempt + 1,
                state.max_attempts,
                mid_radius,
                route.distance_km,
                target_km,
            )

            if abs_diff <= PRIMARY_TOLERANCE_KM:
                logger.info("Distance ok, returning route")
                return route

            if abs_diff <= fallback_tolerance and not state.attempts_doubled:
                logger.info("Distance within %.2fkm, returning route", fallback_tolerance)
                return route

            if state.attempt == state.max_attempts - 1 and not state.attempts_doubled:
                state.max_attempts *= 2
                state.attempts_doubled = True
                logger.info("No match within tolerance, extending to %d attempts", state.max_attempts)

            if route.distance_km < target_km:
                logger.debug("Route too short, increasing radius")
                state.min_radius = mid_radius
            else:
                logger.debug("Route too long, decreasing radius")
                state.max_radius = mid_radius

            state.attempt += 1

        if state.best_route is not None:
            logger.info(
                "Max attempts reached! Best route: %.3fkm (off by %.3fkm)",
                state.best_route.distance_km,
                state.best_abs_diff,
            )
            return state.best_route

        logger.info("Max attempts reached without a route, building one at %.4fkm", state.mid_radius)
        return await self.route_builder.build_route(center, state.mid_radius, arc_degrees)
