"""
Response models for route generation API
Includes route geometry and waypoint information
"""
from typing import List, Optional, Dict, Any
from pydantic import BaseModel

from looproute.models.geo import GeoPoint


class Viewport(BaseModel):
    """Bounding box of a route path for map display"""
    low: GeoPoint
    high: GeoPoint


class RouteGeometry(BaseModel):
    """Route geometry information"""
    encoded_polyline: str  # re-encoded with precision 5
    point_count: int
    viewport: Optional[Viewport] = None


class LoopRoute(BaseModel):
    """Loop route model with complete information"""
    id: str
    name: str
    arc_degrees: float
    distance_km: float
    distance_m: int
    waypoints: List[GeoPoint]
    geometry: RouteGeometry


class RouteResponse(BaseModel):
    """Route response model"""
    success: bool = True
    message: str = "success"
    routes: List[LoopRoute] = []
    total_count: int = 0
    selected_index: int = 0
    criteria: Dict[str, Any] = {}  # Echo of the request
