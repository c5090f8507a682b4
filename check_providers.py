#!/usr/bin/env python3
"""Live connectivity check against the configured geocoding and routing providers."""

import asyncio
import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from geofee.config import settings
from geofee.errors import GeocodingError
from geofee.services.fees.calculator import FeeCalculator, FeeOptions
from geofee.services.geocoding.service import HEALTH_CHECK_ADDRESS, GeocodingService
from geofee.services.routing.base import build_route_provider

DESTINATION = "1 Hacker Way, Menlo Park, CA"


async def main() -> int:
    print("=" * 60)
    print("Provider Connection Test")
    print("=" * 60)
    print()

    service = GeocodingService.from_settings(settings)
    health = await service.health_check()
    print(f"1. Geocoding: {health.status}")
    if health.last_error:
        print(f"   [ERROR] {health.last_error}")
        return 1

    try:
        route_provider = build_route_provider(settings)
    except GeocodingError as exc:
        print(f"2. Routing: [ERROR] {exc}")
        return 1
    print(f"2. Routing provider: {type(route_provider).__name__}, reachable={await route_provider.check_health()}")

    calculator = FeeCalculator(service, route_provider, FeeOptions.from_settings(settings))
    try:
        estimate = await calculator.calculate_delivery_fee(HEALTH_CHECK_ADDRESS, DESTINATION)
    except GeocodingError as exc:
        print(f"3. Fee estimate: [ERROR] {exc}")
        return 1
    print(f"3. Fee estimate: {estimate.distance.text}, {estimate.duration.text}, total ${estimate.total_fee:.2f}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
