"""Delivery fee request/response schemas."""

from __future__ import annotations

from typing import Dict, Optional

from pydantic import Field

from .geocoding import CamelModel


class TextValueModel(CamelModel):
    text: str
    value: int


class FeeEstimateRequest(CamelModel):
    origin_address: str = Field(..., min_length=1)
    destination_address: str = Field(..., min_length=1)
    priority: str = "standard"
    order_total: Optional[float] = Field(default=None, ge=0)


class DeliveryEstimateModel(CamelModel):
    distance: TextValueModel
    duration: TextValueModel
    base_fee: float
    distance_fee: float
    time_fee: float
    priority_fee: float
    total_fee: float
    is_free_delivery: bool
    route: str
    estimated_delivery_time: Optional[str] = None


class DeliveryTimeRequest(CamelModel):
    duration_seconds: float = Field(..., ge=0)
    priority: str = "standard"


class DeliveryTimeResponse(CamelModel):
    estimated_delivery_time: str


class FeeOptionsModel(CamelModel):
    base_fee: float
    per_mile_rate: float
    per_minute_rate: float
    priority_multipliers: Dict[str, float]
    minimum_fee: float
    maximum_fee: float
    free_delivery_threshold: float
