"""Route provider backed by an OSRM ``route`` endpoint."""

from __future__ import annotations

import logging

import httpx

from ...errors import GeocodingError, ProviderError
from ...models.geo import Coordinate, RouteInfo, TextValue
from ..formatting import format_distance, format_duration
from ..geocoding.provider import request_json
from ..retry import RetryPolicy
from .base import RouteProvider

logger = logging.getLogger(__name__)

# Two points in Mountain View used to probe connectivity
_HEALTH_COORDS = "-122.0842499,37.4224764;-122.0838511,37.3860517"


class OSRMRouteProvider(RouteProvider):
    def __init__(
        self,
        base_url: str,
        profile: str = "driving",
        timeout: float = 10.0,
        retry_policy: RetryPolicy | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.base_url = base_url.rstrip("/")
        self.profile = profile
        self.timeout = timeout
        self.retry_policy = retry_policy or RetryPolicy()
        self._http_client = http_client

    async def calculate_route(self, origin: Coordinate, destination: Coordinate) -> RouteInfo:
        """Get the driving route between two points.

        OSRM returns raw metres/seconds only, so the ``text`` fields are rendered
        locally with the same formatting the UI uses.
        """
        # OSRM route endpoint expects coordinates as "lon,lat;lon,lat"
        coordinate_str = f"{origin.lng},{origin.lat};{destination.lng},{destination.lat}"
        url = f"{self.base_url}/route/v1/{self.profile}/{coordinate_str}"
        params = {
            "overview": "full",
            "geometries": "polyline",
            "steps": "false",
        }

        async def _once() -> dict:
            return await request_json(self._http_client, url, params, self.timeout, "OSRM")

        data = await self.retry_policy.call(_once, description="OSRM route")
        if data.get("code") != "Ok" or not data.get("routes"):
            error_msg = data.get("message", "Route not found")
            raise ProviderError(f"OSRM route request failed: {error_msg}", provider_status=data.get("code"))

        route = data["routes"][0]
        distance_m = int(round(route["distance"]))
        duration_s = int(round(route["duration"]))
        return RouteInfo(
            distance=TextValue(text=format_distance(distance_m), value=distance_m),
            duration=TextValue(text=format_duration(duration_s), value=duration_s),
            polyline=route.get("geometry", ""),
        )

    async def check_health(self) -> bool:
        """Probe OSRM with a minimal two-point route request."""
        url = f"{self.base_url}/route/v1/{self.profile}/{_HEALTH_COORDS}"
        try:
            data = await request_json(self._http_client, url, {"overview": "false"}, min(self.timeout, 5.0), "OSRM")
        except GeocodingError as exc:
            logger.warning(f"OSRM health check failed: {exc}")
            return False
        return data.get("code") == "Ok"
