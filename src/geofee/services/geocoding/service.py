"""Geocoding orchestration: caching, rate limiting, validation and batching."""

from __future__ import annotations

import asyncio
import json
import logging
import re
import time
from dataclasses import asdict, dataclass
from typing import Awaitable, Callable, Optional, Sequence

import httpx

from ...config import Settings, settings as default_settings
from ...errors import ConfigurationError, GeocodingError, ProviderError, RateLimitError, ValidationError
from ...models.geo import (
    AddressValidationResult,
    BatchGeocodingResult,
    BatchItem,
    BatchSummary,
    Confidence,
    GeocodeResult,
    HealthStatus,
    LocationType,
    ServiceStats,
    Viewport,
)
from ..geospatial import is_valid_coordinates
from ..retry import RetryPolicy
from .cache import CacheBackend, InMemoryCache
from .provider import GoogleGeocodingClient
from .rate_limiter import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)

HEALTH_CHECK_ADDRESS = "1600 Amphitheatre Parkway, Mountain View, CA"
ADDRESS_NOT_FOUND = "Address not found"


@dataclass(frozen=True)
class ComponentRestrictions:
    country: Optional[str] = None
    postal_code: Optional[str] = None
    locality: Optional[str] = None

    def to_param(self) -> Optional[str]:
        parts = []
        if self.country:
            parts.append(f"country:{self.country}")
        if self.postal_code:
            parts.append(f"postal_code:{self.postal_code}")
        if self.locality:
            parts.append(f"locality:{self.locality}")
        return "|".join(parts) or None


@dataclass(frozen=True)
class GeocodeOptions:
    language: Optional[str] = None
    region: Optional[str] = None
    bounds: Optional[Viewport] = None
    component_restrictions: Optional[ComponentRestrictions] = None


@dataclass(frozen=True)
class ReverseGeocodeOptions:
    language: Optional[str] = None
    result_types: tuple[str, ...] = ()
    location_types: tuple[str, ...] = ()


@dataclass(frozen=True)
class AddressValidationOptions:
    strict_validation: bool = False
    check_deliverability: bool = False
    allow_po_boxes: bool = False
    allow_approximate_matches: bool = False
    required_components: tuple[str, ...] = ()


@dataclass(frozen=True)
class BatchGeocodeOptions:
    validate_delivery: bool = False
    language: Optional[str] = None
    region: Optional[str] = None


def _options_signature(options: object) -> str:
    return json.dumps(asdict(options), sort_keys=True, default=str)


def normalize_address(address: str) -> str:
    """Collapse whitespace and case so trivially different inputs share a cache entry."""
    return re.sub(r"\s+", " ", address.strip()).lower()


def assess_geocode_result(
    result: GeocodeResult,
    options: AddressValidationOptions | None = None,
) -> AddressValidationResult:
    """Apply the deliverability heuristics to a geocoded address.

    Confidence only ever moves downwards (high -> medium -> low) while issues
    are collected.
    """
    options = options or AddressValidationOptions()
    issues: list[str] = []
    is_deliverable = True
    confidence = Confidence.HIGH

    if result.partial_match:
        issues.append("Address is a partial match - please verify")
        confidence = confidence.lower_to(Confidence.MEDIUM)
        if options.strict_validation:
            is_deliverable = False

    if result.geometry.location_type == LocationType.APPROXIMATE:
        issues.append("Address is approximate - please provide more specific details")
        confidence = confidence.lower_to(Confidence.LOW)
        if not options.allow_approximate_matches:
            is_deliverable = False

    if options.required_components:
        present = result.component_types()
        missing = [required for required in options.required_components if required not in present]
        if missing:
            issues.append(f"Missing required address components: {', '.join(missing)}")
            is_deliverable = False

    if options.check_deliverability and not result.has_component("street_number"):
        issues.append("No street number found - please provide a complete address")
        is_deliverable = False

    if not options.allow_po_boxes and "po box" in result.formatted_address.lower():
        issues.append("PO Box addresses are not supported")
        is_deliverable = False

    return AddressValidationResult(
        is_valid=True,
        is_deliverable=is_deliverable,
        confidence=confidence,
        issues=issues,
        geocode_result=result,
    )


class GeocodingService:
    """Wraps a geocoding provider with caching, rate limiting and normalization."""

    def __init__(
        self,
        provider: GoogleGeocodingClient | None = None,
        cache: CacheBackend | None = None,
        rate_limiter: SlidingWindowRateLimiter | None = None,
        *,
        enable_caching: bool | None = None,
        cache_ttl: float | None = None,
        rate_limit_per_minute: int | None = None,
        default_language: str | None = None,
        default_region: str | None = None,
        batch_delay: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.provider = provider or GoogleGeocodingClient()
        self.enable_caching = enable_caching if enable_caching is not None else default_settings.cache_enabled
        self.cache_ttl = cache_ttl if cache_ttl is not None else default_settings.cache_ttl_seconds
        self.cache = cache or InMemoryCache(default_ttl=self.cache_ttl)
        if rate_limiter is None:
            rate_limiter = SlidingWindowRateLimiter(
                rate_limit_per_minute if rate_limit_per_minute is not None else default_settings.rate_limit_per_minute
            )
        self.rate_limiter = rate_limiter
        self.default_language = default_language or default_settings.default_language
        self.default_region = default_region or default_settings.default_region
        self.batch_delay = batch_delay if batch_delay is not None else default_settings.batch_delay_seconds
        self._sleep = sleep

        if not self.api_key_configured:
            logger.warning("Google Maps API key not provided to GeocodingService")

    @classmethod
    def from_settings(
        cls,
        config: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> "GeocodingService":
        config = config or default_settings
        provider = GoogleGeocodingClient(
            api_key=config.google_maps_api_key,
            base_url=config.google_geocode_url,
            timeout=config.request_timeout_seconds,
            retry_policy=RetryPolicy.from_settings(config),
            http_client=http_client,
        )
        return cls(
            provider=provider,
            cache=InMemoryCache(default_ttl=config.cache_ttl_seconds, max_entries=config.cache_max_entries),
            rate_limiter=SlidingWindowRateLimiter(config.rate_limit_per_minute),
            enable_caching=config.cache_enabled,
            cache_ttl=config.cache_ttl_seconds,
            default_language=config.default_language,
            default_region=config.default_region,
            batch_delay=config.batch_delay_seconds,
        )

    @property
    def api_key_configured(self) -> bool:
        return bool(self.provider.api_key)

    # ------------------------------------------------------------------ #
    # Forward / reverse geocoding
    # ------------------------------------------------------------------ #
    async def geocode(self, address: str, options: GeocodeOptions | None = None) -> GeocodeResult | None:
        self._require_api_key("geocoding")
        if not address or not address.strip():
            raise ValidationError("Address is required")
        options = options or GeocodeOptions()

        cache_key = f"geocode:{normalize_address(address)}:{_options_signature(options)}"
        cached = self._cache_get(cache_key)
        if cached is not None:
            return cached

        self._acquire_slot()

        params: dict[str, str] = {
            "address": address.strip(),
            "language": options.language or self.default_language,
            "region": options.region or self.default_region,
        }
        if options.bounds:
            sw, ne = options.bounds.southwest, options.bounds.northeast
            params["bounds"] = f"{sw.lat},{sw.lng}|{ne.lat},{ne.lng}"
        if options.component_restrictions:
            components = options.component_restrictions.to_param()
            if components:
                params["components"] = components

        logger.info(f"Geocoding address '{address}'")
        results = await self.provider.geocode(params)
        if not results:
            logger.info(f"No geocoding results for '{address}'")
            return None

        result = _normalize(results[0], include_viewport=True)
        self._cache_set(cache_key, result)
        return result

    async def reverse_geocode(
        self,
        lat: float,
        lng: float,
        options: ReverseGeocodeOptions | None = None,
    ) -> GeocodeResult | None:
        self._require_api_key("reverse geocoding")
        if not is_valid_coordinates(lat, lng):
            raise ValidationError(f"Invalid coordinates: {lat}, {lng}")
        options = options or ReverseGeocodeOptions()

        cache_key = f"reverse:{lat:.6f}:{lng:.6f}:{_options_signature(options)}"
        cached = self._cache_get(cache_key)
        if cached is not None:
            return cached

        self._acquire_slot()

        params: dict[str, str] = {
            "latlng": f"{lat},{lng}",
            "language": options.language or self.default_language,
        }
        if options.result_types:
            params["result_type"] = "|".join(options.result_types)
        if options.location_types:
            params["location_type"] = "|".join(options.location_types)

        logger.info(f"Reverse geocoding {lat:.6f},{lng:.6f}")
        results = await self.provider.reverse_geocode(params)
        if not results:
            return None

        result = _normalize(results[0], include_viewport=False)
        self._cache_set(cache_key, result)
        return result

    # ------------------------------------------------------------------ #
    # Validation and batching
    # ------------------------------------------------------------------ #
    async def validate_address(
        self,
        address: str,
        options: AddressValidationOptions | None = None,
    ) -> AddressValidationResult:
        result = await self.geocode(address)
        if result is None:
            return AddressValidationResult(
                is_valid=False,
                is_deliverable=False,
                confidence=Confidence.LOW,
                issues=[ADDRESS_NOT_FOUND],
            )
        return assess_geocode_result(result, options)

    async def batch_geocode(
        self,
        addresses: Sequence[str],
        options: BatchGeocodeOptions | None = None,
    ) -> BatchGeocodingResult:
        """Geocode addresses one at a time with a fixed pause between requests."""
        options = options or BatchGeocodeOptions()
        start_time = time.perf_counter()
        items: list[BatchItem] = []
        successful = 0
        failed = 0
        geocode_options = GeocodeOptions(language=options.language, region=options.region)

        for index, address in enumerate(addresses):
            try:
                result = await self.geocode(address, geocode_options)
                if result is None:
                    items.append(BatchItem(address=address, success=False, error=ADDRESS_NOT_FOUND))
                    failed += 1
                else:
                    validation = None
                    if options.validate_delivery:
                        validation = assess_geocode_result(
                            result, AddressValidationOptions(check_deliverability=True)
                        )
                    items.append(BatchItem(address=address, success=True, result=result, validation=validation))
                    successful += 1
            except GeocodingError as exc:
                logger.warning(f"Batch geocoding failed for '{address}': {exc}")
                items.append(BatchItem(address=address, success=False, error=str(exc)))
                failed += 1
            except Exception as exc:
                logger.error(f"Unexpected error geocoding '{address}' in batch: {exc}")
                items.append(BatchItem(address=address, success=False, error=str(exc) or "Unknown error"))
                failed += 1

            if index < len(addresses) - 1 and self.batch_delay > 0:
                await self._sleep(self.batch_delay)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"Batch geocoded {len(addresses)} addresses in {elapsed_ms:.0f}ms "
            f"({successful} succeeded, {failed} failed)"
        )
        return BatchGeocodingResult(
            results=items,
            summary=BatchSummary(
                total=len(addresses),
                successful=successful,
                failed=failed,
                processing_time_ms=round(elapsed_ms, 2),
            ),
        )

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #
    async def health_check(self) -> HealthStatus:
        if not self.api_key_configured:
            return HealthStatus(
                status="unhealthy",
                api_key_configured=False,
                cache_enabled=self.enable_caching,
                rate_limit_remaining=self.rate_limiter.remaining(),
                last_error="Google Maps API key is not configured",
            )
        last_error = None
        try:
            result = await self.geocode(HEALTH_CHECK_ADDRESS)
            if result is None:
                last_error = "Health check address returned no results"
        except GeocodingError as exc:
            last_error = str(exc)
        return HealthStatus(
            status="degraded" if last_error else "healthy",
            api_key_configured=True,
            cache_enabled=self.enable_caching,
            rate_limit_remaining=self.rate_limiter.remaining(),
            last_error=last_error,
        )

    def get_stats(self) -> ServiceStats:
        return ServiceStats(
            cache_size=self.cache.size(),
            remaining_requests=self.rate_limiter.remaining(),
            rate_limit_per_minute=self.rate_limiter.limit,
        )

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("Geocoding cache cleared")

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #
    def _require_api_key(self, operation: str) -> None:
        if not self.api_key_configured:
            raise ConfigurationError(f"Google Maps API key is required for {operation}")

    def _acquire_slot(self) -> None:
        if not self.rate_limiter.check_limit():
            raise RateLimitError(
                "Rate limit exceeded. Please try again later.",
                retry_after=self.rate_limiter.retry_after(),
            )

    def _cache_get(self, key: str) -> GeocodeResult | None:
        if not self.enable_caching:
            return None
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {key}")
        return cached

    def _cache_set(self, key: str, result: GeocodeResult) -> None:
        if self.enable_caching:
            self.cache.set(key, result, self.cache_ttl)


def _normalize(payload: dict, include_viewport: bool) -> GeocodeResult:
    try:
        return GeocodeResult.from_provider(payload, include_viewport=include_viewport)
    except (KeyError, TypeError, ValueError, ValidationError) as exc:
        raise ProviderError(f"Unexpected geocoding response shape: {exc}") from exc
