"""
Result types of the map service collaborators (road snapping and directions)
"""
from typing import List

from pydantic import BaseModel

from looproute.models.geo import GeoPoint


class SnappedLocation(BaseModel):
    """A single snapped waypoint, location is [lon, lat] as sent by the API"""

    location: List[float]
    name: str = ""
    snapped_distance: float = 0.0

    def to_geo_point(self) -> GeoPoint:
        return GeoPoint.from_lng_lat(self.location)


class DirectionsRoute(BaseModel):
    """A single candidate route returned by the directions service"""

    distance_m: float
    duration_s: float = 0.0
    geometry: str  # encoded polyline
