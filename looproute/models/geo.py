"""
Core value types shared by the ring generator, the route pipeline and the search
"""
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class GeoPoint(BaseModel):
    """Latitude/longitude pair in degrees"""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)

    def to_lng_lat(self) -> List[float]:
        """Coordinate order used on the OpenRouteService wire"""
        return [self.lng, self.lat]

    @classmethod
    def from_lng_lat(cls, coordinate: List[float]) -> "GeoPoint":
        return cls(lat=coordinate[1], lng=coordinate[0])


class Route(BaseModel):
    """
    Result of one full pipeline run

    waypoints: routing nodes, first and last are the (snapped) start position
    distance_km: routed distance reported by the directions service
    polyline: decoded detailed path to draw on a map
    """

    model_config = ConfigDict(frozen=True)

    waypoints: List[GeoPoint] = Field(min_length=2)
    distance_km: float = Field(ge=0.0)
    polyline: List[GeoPoint] = []
