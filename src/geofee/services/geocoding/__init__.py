"""Geocoding service package."""

from .cache import CacheBackend, InMemoryCache
from .rate_limiter import SlidingWindowRateLimiter
from .service import AddressValidationOptions, GeocodingService

__all__ = [
    "AddressValidationOptions",
    "CacheBackend",
    "GeocodingService",
    "InMemoryCache",
    "SlidingWindowRateLimiter",
]
