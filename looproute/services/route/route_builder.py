import logging
import math
from typing import Optional

from looproute.config import settings
from looproute.errors import InsufficientWaypointsError, NoRouteFoundError
from looproute.models.geo import GeoPoint, Route
from looproute.services.map.map_service import MapService
from looproute.services.route.ring_generator import generate_circular_waypoints
from looproute.utils import polyline

logger = logging.getLogger(__name__)


class RouteBuilder:
    """
    Route pipeline - turns one (center, radius, arc) triple into one Route

    Ring generation → start/end at center → road snapping → directions → decode
    """

    def __init__(self, map_service: MapService, snap_radius_m: Optional[int] = None):
        self.map_service = map_service
        self.snap_radius_m = snap_radius_m if snap_radius_m is not None else settings.snap_radius_m

    async def build_route(
        self, center: GeoPoint, radius_km: float, arc_degrees: float = 360.0
    ) -> Route:
        """
        Build a loop route through a waypoint ring of radius_km around center.

        Points that fail to snap are dropped. Raises InsufficientWaypointsError
        when fewer than two points remain, NoRouteFoundError when directions
        returns nothing usable, and lets MapServiceError/PolylineDecodeError
        from the collaborators propagate.
        """
        # Step 1: Generate circular waypoints, circumference chosen so the ring radius is radius_km
        ring = generate_circular_waypoints(
            center, distance_km=2 * math.pi * radius_km, arc_degrees=arc_degrees
        )

        # Step 2: Add center as first and last waypoint
        waypoints = [center] + ring + [center]
        logger.debug(
            "Generated %d waypoints with radius %.3fkm, arc %.0f°",
            len(waypoints),
            radius_km,
            arc_degrees,
        )

        # Step 3: Snap waypoints to roads, dropping misses
        snapped = await self.map_service.snap_coordinates(waypoints, radius_m=self.snap_radius_m)
        snapped_waypoints = [loc.to_geo_point() for loc in snapped if loc is not None]
        logger.debug("Snapped %d/%d waypoints to roads", len(snapped_waypoints), len(waypoints))

        if len(snapped_waypoints) < 2:
            raise InsufficientWaypointsError(
                f"Only {len(snapped_waypoints)} of {len(waypoints)} waypoints could be snapped to a road"
            )

        # Step 4: Get directions between snapped waypoints, first route wins
        routes = await self.map_service.get_directions(snapped_waypoints)
        if not routes:
            raise NoRouteFoundError("No routes returned from API")
        first_route = routes[0]

        path = polyline.decode(first_route.geometry)
        if not path:
            raise NoRouteFoundError("Directions API returned a route without geometry")

        distance_km = first_route.distance_m / 1000.0
        logger.debug("Got route with %d points, distance: %.3fkm", len(path), distance_km)

        return Route(waypoints=snapped_waypoints, distance_km=distance_km, polyline=path)
