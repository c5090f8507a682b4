"""Typed errors raised by the geocoding and fee services."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class GeocodingErrorType(str, Enum):
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    API_ERROR = "API_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    ADDRESS_RESOLUTION_ERROR = "ADDRESS_RESOLUTION_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class GeocodingError(Exception):
    """Base class for every failure surfaced by the geocoding core."""

    kind = GeocodingErrorType.UNKNOWN_ERROR

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        retry_after: Optional[float] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.retry_after = retry_after

    def __str__(self) -> str:
        return self.message


class ConfigurationError(GeocodingError):
    """A required provider credential or endpoint is missing."""

    kind = GeocodingErrorType.CONFIGURATION_ERROR


class RateLimitError(GeocodingError):
    """The request budget is exhausted; retry after ``retry_after`` seconds."""

    kind = GeocodingErrorType.RATE_LIMIT_ERROR


class NetworkError(GeocodingError):
    """Timeout or transport failure talking to an upstream service."""

    kind = GeocodingErrorType.NETWORK_ERROR


class ProviderError(GeocodingError):
    """Upstream answered with a non-success status."""

    kind = GeocodingErrorType.API_ERROR

    def __init__(self, message: str, *, provider_status: Optional[str] = None, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.provider_status = provider_status


class ValidationError(GeocodingError):
    """Malformed input such as an empty address or out-of-range coordinates."""

    kind = GeocodingErrorType.VALIDATION_ERROR


class AddressResolutionError(GeocodingError):
    """One or both endpoints of a fee request could not be geocoded."""

    kind = GeocodingErrorType.ADDRESS_RESOLUTION_ERROR
