"""
Waypoint ring generator - circular waypoint pattern around a center point.

The generated points are only routing nodes: they are snapped to the road
network and passed to the directions service, the ring itself is never drawn.
"""
import logging
import math
from typing import List

from looproute.errors import InvalidRouteRequestError
from looproute.models.geo import GeoPoint

logger = logging.getLogger(__name__)

KM_PER_DEGREE_LAT = 111.0
MIN_WAYPOINTS = 3


def waypoint_count(radius_km: float, arc_degrees: float = 360.0) -> int:
    """
    Number of ring waypoints for a ring radius and arc span.

    Larger rings get denser sampling, partial arcs are scaled down by
    arc_degrees / 360. Never returns fewer than 3 points.
    """
    if radius_km < 2.0:
        count = 4
    elif radius_km < 3.0:
        count = 6
    elif radius_km < 8.0:
        count = 8
    elif radius_km < 15.0:
        count = 10
    else:
        count = int(radius_km / 2) + 3

    adjusted = max(MIN_WAYPOINTS, int(count * (arc_degrees / 360.0)))
    logger.debug("waypoints = %d adjusted to = %d", count, adjusted)
    return adjusted


def offset_location(center: GeoPoint, offset_east_km: float, offset_north_km: float) -> GeoPoint:
    """
    Move center by a kilometer offset using the flat-earth approximation:
    1 degree latitude = 111 km, 1 degree longitude = 111 * cos(latitude) km.

    Longitude wraps across the 180° meridian. A ring that would cross a pole
    is rejected, the approximation does not hold there.
    """
    lat = center.lat + offset_north_km / KM_PER_DEGREE_LAT
    if not -90.0 <= lat <= 90.0:
        raise InvalidRouteRequestError(
            f"Ring around {center.lat:.5f}, {center.lng:.5f} would cross a pole"
        )
    lng = center.lng + offset_east_km / (KM_PER_DEGREE_LAT * math.cos(math.radians(center.lat)))
    lng = ((lng + 180.0) % 360.0) - 180.0
    return GeoPoint(lat=lat, lng=lng)


def generate_circular_waypoints(
    center: GeoPoint,
    distance_km: float,
    arc_degrees: float = 360.0,
    rotation_offset: float = 0.0,
) -> List[GeoPoint]:
    """
    Generate waypoints on a circle of circumference distance_km around center.

    Args:
        center: Center of the ring (the start/end of the loop)
        distance_km: Ring circumference in km, must be > 0
        arc_degrees: Angular span of the ring, in (0, 360]. 360 is a full circle
        rotation_offset: Degrees to rotate the pattern counter-clockwise from east

    Returns:
        Ordered list of waypoints, at least 3
    """
    radius = distance_km / (2 * math.pi)
    count = waypoint_count(radius, arc_degrees)
    angle_step = math.radians(arc_degrees) / count
    rotation = math.radians(rotation_offset)

    waypoints = []
    for i in range(count):
        angle = i * angle_step + rotation
        x = radius * math.cos(angle)
        y = radius * math.sin(angle)
        waypoints.append(offset_location(center, x, y))

    return waypoints
