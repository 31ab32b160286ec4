import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from looproute.config import settings
from looproute.errors import APILimitExceededError, MapServiceError
from looproute.models.geo import GeoPoint
from looproute.models.map import DirectionsRoute, SnappedLocation
from looproute.services.map.api_counter import APICounter, api_counter
from looproute.services.map.map_service import MapService

logger = logging.getLogger(__name__)


class OpenRouteService(MapService):
    """OpenRouteService API implementation (snap + directions endpoints)"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        profile: Optional[str] = None,
        timeout: Optional[float] = None,
        counter: Optional[APICounter] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.ors_api_key
        self.base_url = (base_url or settings.ors_base_url).rstrip("/")
        self.profile = profile or settings.ors_profile
        self.timeout = timeout if timeout is not None else settings.request_timeout_s
        self.counter = counter or api_counter
        self._transport = transport

        self.snap_url = f"{self.base_url}/v2/snap/{self.profile}"
        self.directions_url = f"{self.base_url}/v2/directions/{self.profile}"

        if not self.api_key:
            raise ValueError("OpenRouteService API Key is required")

    async def snap_coordinates(
        self, points: List[GeoPoint], radius_m: int = 300
    ) -> List[Optional[SnappedLocation]]:
        """Snap points to the nearest road using the Snap API"""
        body = {
            "locations": [point.to_lng_lat() for point in points],
            "radius": radius_m,
        }
        data = await self._post(self.snap_url, body, "Snap")

        try:
            locations = [
                SnappedLocation.model_validate(item) if item is not None else None
                for item in data.get("locations") or []
            ]
        except ValidationError as e:
            raise MapServiceError(f"Malformed Snap API response: {e}") from e

        if len(locations) != len(points):
            raise MapServiceError(
                f"Snap API returned {len(locations)} locations for {len(points)} points"
            )
        return locations

    async def get_directions(self, waypoints: List[GeoPoint]) -> List[DirectionsRoute]:
        """Get routes through waypoints using the Directions API"""
        body = {"coordinates": [point.to_lng_lat() for point in waypoints]}
        data = await self._post(self.directions_url, body, "Directions")
        return self._convert_routes_response(data)

    def _convert_routes_response(self, data: Dict[str, Any]) -> List[DirectionsRoute]:
        """Convert Directions API response to DirectionsRoute list"""
        routes = []
        try:
            for route in data.get("routes") or []:
                summary = route.get("summary") or {}
                routes.append(
                    DirectionsRoute(
                        # ORS omits distance/duration for zero-length routes
                        distance_m=summary.get("distance", 0.0),
                        duration_s=summary.get("duration", 0.0),
                        geometry=route.get("geometry", ""),
                    )
                )
        except (AttributeError, ValidationError) as e:
            raise MapServiceError(f"Malformed Directions API response: {e}") from e
        return routes

    async def _post(self, url: str, body: Dict[str, Any], api_name: str) -> Dict[str, Any]:
        # Claim the call slot before awaiting so concurrent callers see it
        self.counter.reserve()

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    url,
                    headers={
                        "Content-Type": "application/json",
                        "Authorization": self.api_key,
                    },
                    json=body,
                    timeout=self.timeout,
                )
                response.raise_for_status()
                data = response.json()
                if not isinstance(data, dict):
                    raise MapServiceError(f"{api_name} API returned an unexpected payload")
                return data

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            error_detail = self._error_detail(e.response)
            logger.warning("%s API error %s%s", api_name, status, error_detail)

            if status == 429:
                raise APILimitExceededError("API quota exceeded", status_code=status) from e
            elif status in (401, 403):
                raise MapServiceError(
                    f"API key invalid or {api_name} API not enabled", status_code=status
                ) from e
            elif status == 400:
                raise MapServiceError(
                    f"Bad request (400): Invalid request parameters{error_detail}",
                    status_code=status,
                ) from e
            else:
                raise MapServiceError(
                    f"{api_name} API error: {status}{error_detail}", status_code=status
                ) from e
        except httpx.TimeoutException as e:
            logger.warning("%s API timed out after %.1fs", api_name, self.timeout)
            raise MapServiceError(f"{api_name} API timed out") from e
        except httpx.HTTPError as e:
            logger.warning("%s API request failed: %s", api_name, e)
            raise MapServiceError(f"Failed to call {api_name} API: {e}") from e
        except ValueError as e:
            raise MapServiceError(f"{api_name} API returned invalid JSON") from e

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            error = response.json().get("error", "")
        except (ValueError, AttributeError):
            return ""
        if isinstance(error, dict):
            error = error.get("message", "")
        return f" - {error}" if error else ""
