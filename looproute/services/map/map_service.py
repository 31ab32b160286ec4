from abc import ABC, abstractmethod
from typing import List, Optional

from looproute.models.geo import GeoPoint
from looproute.models.map import DirectionsRoute, SnappedLocation


class MapService(ABC):
    """Map service abstract interface"""

    @abstractmethod
    async def snap_coordinates(
        self, points: List[GeoPoint], radius_m: int = 300
    ) -> List[Optional[SnappedLocation]]:
        """Snap points to the nearest road

        Args:
            points: Coordinates to snap, in order
            radius_m: Search radius around each point in meters

        Returns:
            One entry per input point, None where no road was found within radius_m
        """
        pass

    @abstractmethod
    async def get_directions(self, waypoints: List[GeoPoint]) -> List[DirectionsRoute]:
        """Get candidate routes visiting waypoints in order

        Args:
            waypoints: At least two points, first is origin and last is destination
        """
        pass
