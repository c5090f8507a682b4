"""Health endpoints."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, status

from ...schemas.geocoding import HealthResponse
from ...services.geocoding.service import GeocodingService
from ...services.routing.base import RouteProvider
from ..dependencies import get_geocoding_service, get_route_provider

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health_root(service: GeocodingService = Depends(get_geocoding_service)) -> dict:
    """Geocoding health: unhealthy without a key, degraded when the live probe fails."""
    health = await service.health_check()
    return asdict(health)


@router.get("/health/routing", status_code=status.HTTP_200_OK)
async def health_routing(provider: RouteProvider = Depends(get_route_provider)) -> dict:
    """Check routing provider reachability."""
    healthy = await provider.check_health()
    return {"service": "routing", "provider": type(provider).__name__, "healthy": healthy}
