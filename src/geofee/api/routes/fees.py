"""Delivery fee endpoints."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, status

from ...errors import GeocodingError
from ...schemas.fees import (
    DeliveryEstimateModel,
    DeliveryTimeRequest,
    DeliveryTimeResponse,
    FeeEstimateRequest,
    FeeOptionsModel,
)
from ...services.fees.calculator import FeeCalculator
from ..dependencies import get_fee_calculator, to_http_exception

router = APIRouter(prefix="/fees", tags=["fees"])


@router.post("/estimate", response_model=DeliveryEstimateModel, status_code=status.HTTP_200_OK)
async def estimate(payload: FeeEstimateRequest, calculator: FeeCalculator = Depends(get_fee_calculator)) -> dict:
    try:
        estimate = await calculator.calculate_delivery_fee(
            payload.origin_address,
            payload.destination_address,
            payload.priority,
            payload.order_total,
        )
        delivery_time = calculator.get_estimated_delivery_time(estimate.duration.value, payload.priority)
    except GeocodingError as exc:
        raise to_http_exception(exc) from exc
    return {**asdict(estimate), "estimated_delivery_time": delivery_time}


@router.post("/delivery-time", response_model=DeliveryTimeResponse, status_code=status.HTTP_200_OK)
def delivery_time(payload: DeliveryTimeRequest, calculator: FeeCalculator = Depends(get_fee_calculator)) -> dict:
    try:
        text = calculator.get_estimated_delivery_time(payload.duration_seconds, payload.priority)
    except GeocodingError as exc:
        raise to_http_exception(exc) from exc
    return {"estimated_delivery_time": text}


@router.get("/options", response_model=FeeOptionsModel, status_code=status.HTTP_200_OK)
def get_options(calculator: FeeCalculator = Depends(get_fee_calculator)) -> dict:
    return asdict(calculator.get_options())

