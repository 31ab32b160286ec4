"""
Exception taxonomy for loop route generation.

Nothing in the core retries: every error below propagates from where it is
raised up to the caller of RouteService.
"""
from typing import Optional


class RouteGenerationError(Exception):
    """Base class for every failure surfaced by route generation"""


class InvalidRouteRequestError(RouteGenerationError, ValueError):
    """Target distance or arc span rejected before any network activity"""


class MapServiceError(RouteGenerationError):
    """The snapping or directions collaborator failed"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class APILimitExceededError(MapServiceError):
    """Local call budget for the map service is exhausted"""


class NoRouteFoundError(MapServiceError):
    """Directions call succeeded but returned nothing usable"""


class InsufficientWaypointsError(RouteGenerationError):
    """Fewer than two waypoints survived road snapping"""


class PolylineDecodeError(RouteGenerationError, ValueError):
    """Encoded polyline is truncated or contains invalid characters"""
