"""HTTP client for the Google Geocoding API."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ...config import settings
from ...errors import ConfigurationError, NetworkError, ProviderError
from ..retry import RetryPolicy

logger = logging.getLogger(__name__)

# Statuses that mean "the request worked, there is just nothing to return"
_EMPTY_STATUSES = {"ZERO_RESULTS"}


def build_http_client(timeout: float) -> httpx.AsyncClient:
    """Pooled client shared by every provider for the life of the app."""
    return httpx.AsyncClient(timeout=httpx.Timeout(timeout, connect=min(timeout, 10.0)))


async def request_json(
    http_client: Optional[httpx.AsyncClient],
    url: str,
    params: dict[str, Any],
    timeout: float,
    provider_name: str,
) -> dict:
    """GET ``url`` and decode the JSON body, translating transport failures."""
    owns_client = http_client is None
    client = http_client or build_http_client(timeout)
    try:
        response = await client.get(url, params=params, timeout=timeout)
        response.raise_for_status()
        return response.json()
    except httpx.HTTPStatusError as exc:
        raise ProviderError(
            f"{provider_name} returned HTTP {exc.response.status_code}",
            status_code=exc.response.status_code,
        ) from exc
    except httpx.TimeoutException as exc:
        raise NetworkError("Request timeout") from exc
    except httpx.TransportError as exc:
        raise NetworkError(f"Failed to reach {provider_name}: {exc}") from exc
    except ValueError as exc:
        raise ProviderError(f"{provider_name} returned an invalid JSON body") from exc
    finally:
        if owns_client:
            await client.aclose()


class GoogleGeocodingClient:
    """Raw forward/reverse geocoding calls. Returns the provider's result list."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        retry_policy: RetryPolicy | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.google_maps_api_key
        self.base_url = base_url or settings.google_geocode_url
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds
        self.retry_policy = retry_policy or RetryPolicy.from_settings()
        self._http_client = http_client

    async def geocode(self, params: dict[str, Any]) -> list[dict]:
        return await self._call(params, description="geocode")

    async def reverse_geocode(self, params: dict[str, Any]) -> list[dict]:
        return await self._call(params, description="reverse geocode")

    async def _call(self, params: dict[str, Any], description: str) -> list[dict]:
        if not self.api_key:
            raise ConfigurationError("Google Maps API key is required for geocoding")
        query = {**params, "key": self.api_key}

        async def _once() -> list[dict]:
            data = await request_json(self._http_client, self.base_url, query, self.timeout, "Geocoding API")
            return _results_or_raise(data)

        return await self.retry_policy.call(_once, description=description)


def _results_or_raise(data: dict) -> list[dict]:
    status = data.get("status", "UNKNOWN_ERROR")
    if status == "OK":
        return list(data.get("results") or [])
    if status in _EMPTY_STATUSES:
        return []
    message = data.get("error_message") or f"Geocoding API returned status {status}"
    logger.warning(f"Geocoding provider error: {status} {message}")
    raise ProviderError(message, provider_status=status)
