"""Async consumer of the geocoding HTTP API.

Mirrors what browser-side callers do: a per-request timeout, ``Retry-After``
handling on 429 and exponential backoff on transport failures, all through the
same ``RetryPolicy`` the server uses toward its providers.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import httpx

from ..errors import GeocodingError, NetworkError, ProviderError, RateLimitError
from ..models.geo import GeocodeResult
from ..services.retry import DEFAULT_RETRY_AFTER_SECONDS, RetryPolicy

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class GeocodingApiClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        retry_policy: RetryPolicy | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_policy = retry_policy or RetryPolicy(retries=3, retry_delay=1.0, retry_on_rate_limit=True)
        self._http_client = http_client

    async def geocode(self, address: str) -> Optional[GeocodeResult]:
        data = await self._request("POST", "/geocode", {"address": address})
        return _parse_result(data)

    async def reverse_geocode(self, lat: float, lng: float) -> Optional[GeocodeResult]:
        data = await self._request("POST", "/reverse-geocode", {"lat": lat, "lng": lng})
        return _parse_result(data)

    async def validate_address(self, address: str, **options: Any) -> dict:
        data = await self._request("POST", "/validate", {"address": address, **options})
        return data["result"]

    async def batch_geocode(self, addresses: Sequence[str], validate_delivery: bool = False) -> dict:
        payload = {"addresses": list(addresses), "options": {"validateDelivery": validate_delivery}}
        return await self._request("POST", "/batch-geocode", payload)

    async def health(self) -> dict:
        return await self._request("GET", "/health")

    async def stats(self) -> dict:
        return await self._request("GET", "/stats")

    async def clear_cache(self) -> None:
        await self._request("POST", "/clear-cache")

    async def _request(self, method: str, path: str, payload: Optional[dict] = None) -> Any:
        url = f"{self.base_url}{path}"

        async def _once() -> Any:
            return await self._send(method, url, payload)

        return await self.retry_policy.call(_once, description=f"{method} {path}")

    async def _send(self, method: str, url: str, payload: Optional[dict]) -> Any:
        owns_client = self._http_client is None
        client = self._http_client or httpx.AsyncClient()
        try:
            response = await client.request(method, url, json=payload, timeout=self.timeout)
        except httpx.TimeoutException as exc:
            raise NetworkError("Request timeout") from exc
        except httpx.TransportError as exc:
            raise NetworkError(str(exc) or "Network error") from exc
        finally:
            if owns_client:
                await client.aclose()

        if response.status_code == 429:
            raise RateLimitError(
                "Rate limit exceeded",
                status_code=429,
                retry_after=_retry_after(response),
            )
        if response.is_error:
            raise ProviderError(_error_message(response), status_code=response.status_code)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise GeocodingError("Invalid JSON in API response", status_code=response.status_code) from exc


def _parse_result(data: Optional[dict]) -> Optional[GeocodeResult]:
    if not data or not data.get("result"):
        return None
    return GeocodeResult.from_provider(data["result"])


def _retry_after(response: httpx.Response) -> float:
    try:
        return float(response.headers.get("Retry-After", DEFAULT_RETRY_AFTER_SECONDS))
    except ValueError:
        return DEFAULT_RETRY_AFTER_SECONDS


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = {}
    message = body.get("error") if isinstance(body, dict) else None
    if isinstance(message, str):
        return message
    return f"HTTP {response.status_code}"
