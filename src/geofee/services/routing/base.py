"""Provider-agnostic routing interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

import httpx

from ...config import Settings, settings as default_settings
from ...errors import ConfigurationError
from ...models.geo import Coordinate, RouteInfo


class RouteProvider(ABC):
    @abstractmethod
    async def calculate_route(self, origin: Coordinate, destination: Coordinate) -> RouteInfo:
        """Return driving distance, duration and an encoded polyline between two points."""

    @abstractmethod
    async def check_health(self) -> bool:
        ...


def build_route_provider(
    config: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> RouteProvider:
    """Construct the routing backend selected by ``routing_provider``."""
    from ..retry import RetryPolicy

    config = config or default_settings
    retry_policy = RetryPolicy.from_settings(config)
    if config.routing_provider == "osrm":
        from .osrm_client import OSRMRouteProvider

        if not config.osrm_base_url:
            raise ConfigurationError("OSRM base URL is not configured.")
        return OSRMRouteProvider(
            base_url=config.osrm_base_url,
            profile=config.osrm_profile,
            timeout=config.request_timeout_seconds,
            retry_policy=retry_policy,
            http_client=http_client,
        )

    from .google_directions import GoogleDirectionsProvider

    return GoogleDirectionsProvider(
        api_key=config.effective_routing_api_key,
        base_url=config.google_directions_url,
        timeout=config.request_timeout_seconds,
        retry_policy=retry_policy,
        http_client=http_client,
    )
