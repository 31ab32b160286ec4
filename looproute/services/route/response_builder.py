"""
Response builder service - converts generated route variants to API response format
Includes re-encoded route geometry and snapped waypoints
"""
import logging
from typing import Any, Dict, List, Optional

from looproute.models.geo import GeoPoint, Route
from looproute.models.response import LoopRoute, RouteGeometry, RouteResponse, Viewport
from looproute.utils import polyline

logger = logging.getLogger(__name__)


def _viewport(points: List[GeoPoint]) -> Optional[Viewport]:
    if not points:
        return None
    lats = [p.lat for p in points]
    lngs = [p.lng for p in points]
    return Viewport(
        low=GeoPoint(lat=min(lats), lng=min(lngs)),
        high=GeoPoint(lat=max(lats), lng=max(lngs)),
    )


def _route_name(arc_degrees: float) -> str:
    if arc_degrees >= 360.0:
        return "Full loop"
    return f"{arc_degrees:g}° arc loop"


class ResponseBuilderService:
    """Response builder service - converts internal data to API response format"""

    def build_route(self, index: int, route: Route, arc_degrees: float) -> LoopRoute:
        geometry = RouteGeometry(
            encoded_polyline=polyline.encode(route.polyline),
            point_count=len(route.polyline),
            viewport=_viewport(route.polyline),
        )
        return LoopRoute(
            id=f"route_{index + 1}",
            name=_route_name(arc_degrees),
            arc_degrees=arc_degrees,
            distance_km=round(route.distance_km, 3),
            distance_m=int(round(route.distance_km * 1000)),
            waypoints=route.waypoints,
            geometry=geometry,
        )

    def build_response(
        self,
        routes: List[Route],
        arc_spans: List[float],
        selected_index: int = 0,
        criteria: Optional[Dict[str, Any]] = None,
    ) -> RouteResponse:
        """
        Build API response from generated route variants

        Args:
            routes: Generated routes, in variant order
            arc_spans: Arc span each route was generated with
            selected_index: Variant shown first by the client
            criteria: Request echoed back to the client

        Returns:
            RouteResponse with complete route information
        """
        loop_routes = [
            self.build_route(i, route, arc)
            for i, (route, arc) in enumerate(zip(routes, arc_spans))
        ]
        logger.debug("Built response with %d routes", len(loop_routes))

        return RouteResponse(
            success=True,
            message=f"Successfully generated {len(loop_routes)} routes",
            routes=loop_routes,
            total_count=len(loop_routes),
            selected_index=selected_index,
            criteria=criteria or {},
        )
