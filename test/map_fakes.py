"""In-memory stand-ins for the map service and the route pipeline."""

import asyncio
from typing import Callable, List, Optional, Sequence

from looproute.errors import MapServiceError
from looproute.models.geo import GeoPoint, Route
from looproute.models.map import DirectionsRoute, SnappedLocation
from looproute.services.map.map_service import MapService
from looproute.utils import polyline

# Stockholm city center
CENTER = GeoPoint(lat=59.3293, lng=18.0686)


def make_route(distance_km: float, center: GeoPoint = CENTER) -> Route:
    return Route(waypoints=[center, center], distance_km=distance_km, polyline=[center, center])


class ScriptedRouteBuilder:
    """build_route stand-in returning distances from a function of the radius or a script"""

    def __init__(
        self,
        distance_fn: Optional[Callable[[float], float]] = None,
        distances: Optional[Sequence[float]] = None,
        fail_on_call: Optional[int] = None,
    ):
        self.distance_fn = distance_fn
        self.distances = list(distances) if distances is not None else None
        self.fail_on_call = fail_on_call
        self.radii: List[float] = []
        self.arcs: List[float] = []

    @property
    def calls(self) -> int:
        return len(self.radii)

    async def build_route(self, center: GeoPoint, radius_km: float, arc_degrees: float = 360.0) -> Route:
        self.radii.append(radius_km)
        self.arcs.append(arc_degrees)
        if self.fail_on_call == self.calls:
            raise MapServiceError("Directions API error: 500", status_code=500)
        if self.distances is not None:
            distance = self.distances[self.calls - 1]
        else:
            distance = self.distance_fn(radius_km)
        return make_route(distance, center)


class FakeMapService(MapService):
    """
    Snaps every point onto itself and returns one straight-line route.

    snap_misses: indices answered with None
    fail_directions_for / block_directions_for: predicates on the waypoint list
    """

    def __init__(
        self,
        distance_km: float = 5.0,
        snap_misses: Sequence[int] = (),
        routes: Optional[List[DirectionsRoute]] = None,
        fail_directions_for: Optional[Callable[[List[GeoPoint]], bool]] = None,
        block_directions_for: Optional[Callable[[List[GeoPoint]], bool]] = None,
    ):
        self.distance_km = distance_km
        self.snap_misses = set(snap_misses)
        self.routes = routes
        self.fail_directions_for = fail_directions_for
        self.block_directions_for = block_directions_for
        self.snap_calls: List[List[GeoPoint]] = []
        self.snap_radii: List[int] = []
        self.directions_calls: List[List[GeoPoint]] = []
        self.cancelled = 0

    async def snap_coordinates(self, points, radius_m=300):
        self.snap_calls.append(list(points))
        self.snap_radii.append(radius_m)
        return [
            None
            if i in self.snap_misses
            else SnappedLocation(location=[p.lng, p.lat], name="Main Street", snapped_distance=4.2)
            for i, p in enumerate(points)
        ]

    async def get_directions(self, waypoints):
        self.directions_calls.append(list(waypoints))
        if self.fail_directions_for and self.fail_directions_for(waypoints):
            raise MapServiceError("Directions API error: 500", status_code=500)
        if self.block_directions_for and self.block_directions_for(waypoints):
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                self.cancelled += 1
                raise
        if self.routes is not None:
            return self.routes
        return [
            DirectionsRoute(
                distance_m=self.distance_km * 1000,
                duration_s=600.0,
                geometry=polyline.encode(waypoints),
            )
        ]
