"""Google Directions API route provider."""

from __future__ import annotations

import logging

import httpx

from ...errors import ConfigurationError, ProviderError
from ...models.geo import Coordinate, RouteInfo, TextValue
from ..geocoding.provider import request_json
from ..retry import RetryPolicy
from .base import RouteProvider

logger = logging.getLogger(__name__)


class GoogleDirectionsProvider(RouteProvider):
    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://maps.googleapis.com/maps/api/directions/json",
        timeout: float = 10.0,
        retry_policy: RetryPolicy | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.retry_policy = retry_policy or RetryPolicy()
        self._http_client = http_client

    async def calculate_route(self, origin: Coordinate, destination: Coordinate) -> RouteInfo:
        if not self.api_key:
            raise ConfigurationError("Routing API key is required for route calculation")
        params = {
            "origin": f"{origin.lat},{origin.lng}",
            "destination": f"{destination.lat},{destination.lng}",
            "mode": "driving",
            "key": self.api_key,
        }

        async def _once() -> dict:
            return await request_json(self._http_client, self.base_url, params, self.timeout, "Directions API")

        data = await self.retry_policy.call(_once, description="directions")
        status = data.get("status")
        routes = data.get("routes") or []
        if status not in (None, "OK") or not routes:
            message = data.get("error_message") or "Route not found"
            logger.warning(f"Directions request returned {status}: {message}")
            raise ProviderError(message, provider_status=status)

        try:
            leg = routes[0]["legs"][0]
            return RouteInfo(
                distance=TextValue(text=leg["distance"]["text"], value=int(leg["distance"]["value"])),
                duration=TextValue(text=leg["duration"]["text"], value=int(leg["duration"]["value"])),
                polyline=routes[0]["overview_polyline"]["points"],
            )
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise ProviderError(f"Unexpected directions response shape: {exc}") from exc

    async def check_health(self) -> bool:
        return bool(self.api_key)
