"""Accessors for the services constructed in ``create_app``."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from ..errors import (
    AddressResolutionError,
    ConfigurationError,
    GeocodingError,
    NetworkError,
    ProviderError,
    RateLimitError,
    ValidationError,
)
from ..services.fees.calculator import FeeCalculator
from ..services.geocoding.service import GeocodingService
from ..services.routing.base import RouteProvider

_STATUS_BY_ERROR = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (AddressResolutionError, 422),
    (RateLimitError, status.HTTP_429_TOO_MANY_REQUESTS),
    (ProviderError, status.HTTP_502_BAD_GATEWAY),
    (ConfigurationError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (NetworkError, status.HTTP_504_GATEWAY_TIMEOUT),
)


def get_geocoding_service(request: Request) -> GeocodingService:
    return request.app.state.geocoding_service


def get_fee_calculator(request: Request) -> FeeCalculator:
    return request.app.state.fee_calculator


def get_route_provider(request: Request) -> RouteProvider:
    return request.app.state.route_provider


def to_http_exception(exc: GeocodingError) -> HTTPException:
    """Translate a typed service error into the matching HTTP response."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            status_code = code
            break
    headers = None
    if isinstance(exc, RateLimitError):
        retry_after = exc.retry_after if exc.retry_after is not None else 60
        headers = {"Retry-After": str(max(1, int(round(retry_after))))}
    return HTTPException(status_code=status_code, detail=exc.message, headers=headers)
