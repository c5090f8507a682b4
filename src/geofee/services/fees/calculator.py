"""Delivery fee estimation from geocoded endpoints and a driving route."""

from __future__ import annotations

import asyncio
import copy
import logging
import math
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Optional

from ...config import Settings, settings as default_settings
from ...errors import AddressResolutionError, ValidationError
from ...models.geo import DeliveryEstimate, RouteInfo
from ..formatting import format_minutes, round_currency
from ..geocoding.service import GeocodingService
from ..geospatial import meters_to_miles
from ..routing.base import RouteProvider

logger = logging.getLogger(__name__)


class Priority(str, Enum):
    STANDARD = "standard"
    EXPRESS = "express"
    RUSH = "rush"


PREPARATION_MINUTES = {
    Priority.STANDARD: 15,
    Priority.EXPRESS: 10,
    Priority.RUSH: 5,
}


def _default_multipliers() -> dict[str, float]:
    return {
        Priority.STANDARD.value: 1.0,
        Priority.EXPRESS.value: 1.5,
        Priority.RUSH.value: 2.0,
    }


@dataclass
class FeeOptions:
    base_fee: float = 5.99
    per_mile_rate: float = 1.50
    per_minute_rate: float = 0.10
    priority_multipliers: dict[str, float] = field(default_factory=_default_multipliers)
    minimum_fee: float = 3.99
    maximum_fee: float = 50.00
    free_delivery_threshold: float = 35.00

    def __post_init__(self) -> None:
        if self.minimum_fee > self.maximum_fee:
            raise ValidationError("minimum_fee cannot exceed maximum_fee")
        missing = [p.value for p in Priority if p.value not in self.priority_multipliers]
        if missing:
            raise ValidationError(f"Missing priority multipliers: {', '.join(missing)}")

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "FeeOptions":
        config = config or default_settings
        return cls(
            base_fee=config.base_fee,
            per_mile_rate=config.per_mile_rate,
            per_minute_rate=config.per_minute_rate,
            minimum_fee=config.minimum_fee,
            maximum_fee=config.maximum_fee,
            free_delivery_threshold=config.free_delivery_threshold,
        )


def resolve_priority(priority: Priority | str) -> Priority:
    try:
        return Priority(priority)
    except ValueError as exc:
        allowed = ", ".join(p.value for p in Priority)
        raise ValidationError(f"Unknown priority '{priority}'. Expected one of: {allowed}") from exc


class FeeCalculator:
    """Prices a delivery from its route using a base/distance/time model."""

    def __init__(
        self,
        geocoding_service: GeocodingService,
        route_provider: RouteProvider,
        options: FeeOptions | None = None,
    ) -> None:
        self.geocoding_service = geocoding_service
        self.route_provider = route_provider
        self._options = options or FeeOptions.from_settings()

    async def calculate_delivery_fee(
        self,
        origin_address: str,
        destination_address: str,
        priority: Priority | str = Priority.STANDARD,
        order_total: Optional[float] = None,
    ) -> DeliveryEstimate:
        priority = resolve_priority(priority)
        outcomes = await asyncio.gather(
            self.geocoding_service.geocode(origin_address),
            self.geocoding_service.geocode(destination_address),
            return_exceptions=True,
        )
        # Both lookups are awaited before the first failure is re-raised.
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        origin, destination = outcomes
        if origin is None or destination is None:
            logger.info(
                f"Fee estimate aborted, unresolved address: origin={origin is not None}, "
                f"destination={destination is not None}"
            )
            raise AddressResolutionError(
                "Unable to geocode one or both addresses. Please check the addresses and try again."
            )

        route = await self.route_provider.calculate_route(origin.location, destination.location)
        estimate = self.compute_estimate(route, priority, order_total)
        logger.info(
            f"Delivery fee {estimate.total_fee:.2f} for {route.distance.value}m/{route.duration.value}s "
            f"({priority.value}, free={estimate.is_free_delivery})"
        )
        return estimate

    def compute_estimate(
        self,
        route: RouteInfo,
        priority: Priority | str = Priority.STANDARD,
        order_total: Optional[float] = None,
    ) -> DeliveryEstimate:
        """Apply the pricing model to a route.

        ``priority_fee`` is the surcharge portion already contained in
        ``total_fee``; it is reported separately for the fee breakdown and is not
        added on top.
        """
        priority = resolve_priority(priority)
        options = self._options
        distance_miles = meters_to_miles(route.distance.value)
        duration_minutes = route.duration.value / 60

        base_fee = options.base_fee
        distance_fee = distance_miles * options.per_mile_rate
        time_fee = duration_minutes * options.per_minute_rate
        multiplier = options.priority_multipliers[priority.value]

        subtotal = base_fee + distance_fee + time_fee
        total_fee = subtotal * multiplier
        priority_fee = subtotal * (multiplier - 1)

        total_fee = max(options.minimum_fee, min(options.maximum_fee, total_fee))

        is_free_delivery = order_total is not None and order_total >= options.free_delivery_threshold
        if is_free_delivery:
            total_fee = 0.0

        return DeliveryEstimate(
            distance=route.distance,
            duration=route.duration,
            base_fee=round_currency(base_fee),
            distance_fee=round_currency(distance_fee),
            time_fee=round_currency(time_fee),
            priority_fee=round_currency(priority_fee),
            total_fee=round_currency(total_fee),
            is_free_delivery=is_free_delivery,
            route=route.polyline,
        )

    def get_estimated_delivery_time(self, duration_seconds: float, priority: Priority | str = Priority.STANDARD) -> str:
        priority = resolve_priority(priority)
        if duration_seconds < 0:
            raise ValidationError("duration_seconds cannot be negative")
        total_minutes = math.ceil(duration_seconds / 60) + PREPARATION_MINUTES[priority]
        return format_minutes(total_minutes)

    def update_options(self, **partial: Any) -> None:
        """Shallow-merge ``partial`` into the current options."""
        known = {f.name for f in fields(FeeOptions)}
        unknown = sorted(set(partial) - known)
        if unknown:
            raise ValidationError(f"Unknown fee options: {', '.join(unknown)}")
        self._options = replace(self._options, **partial)

    def get_options(self) -> FeeOptions:
        return copy.deepcopy(self._options)
