"""Geocoding endpoints."""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ...errors import GeocodingError
from ...models.geo import Coordinate, Viewport
from ...schemas.geocoding import (
    BatchGeocodeRequest,
    BatchGeocodeResponse,
    GeocodeRequest,
    GeocodeResponse,
    ReverseGeocodeRequest,
    StatsResponse,
    ValidateRequest,
    ValidateResponse,
)
from ...services.geocoding.service import (
    AddressValidationOptions,
    BatchGeocodeOptions,
    ComponentRestrictions,
    GeocodeOptions,
    GeocodingService,
    ReverseGeocodeOptions,
)
from ..dependencies import get_geocoding_service, to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["geocoding"])


def _geocode_options(payload: GeocodeRequest) -> GeocodeOptions:
    bounds = None
    if payload.bounds:
        bounds = Viewport(
            northeast=Coordinate(payload.bounds.northeast.lat, payload.bounds.northeast.lng),
            southwest=Coordinate(payload.bounds.southwest.lat, payload.bounds.southwest.lng),
        )
    restrictions = None
    if payload.component_restrictions:
        restrictions = ComponentRestrictions(**payload.component_restrictions.model_dump())
    return GeocodeOptions(
        language=payload.language,
        region=payload.region,
        bounds=bounds,
        component_restrictions=restrictions,
    )


@router.post("/geocode", response_model=GeocodeResponse, status_code=status.HTTP_200_OK)
async def geocode(payload: GeocodeRequest, service: GeocodingService = Depends(get_geocoding_service)) -> dict:
    try:
        result = await service.geocode(payload.address, _geocode_options(payload))
    except GeocodingError as exc:
        raise to_http_exception(exc) from exc
    return {"result": result.to_dict() if result else None}


@router.post("/reverse-geocode", response_model=GeocodeResponse, status_code=status.HTTP_200_OK)
async def reverse_geocode(
    payload: ReverseGeocodeRequest,
    service: GeocodingService = Depends(get_geocoding_service),
) -> dict:
    options = ReverseGeocodeOptions(
        language=payload.language,
        result_types=tuple(payload.result_types),
        location_types=tuple(payload.location_types),
    )
    try:
        result = await service.reverse_geocode(payload.lat, payload.lng, options)
    except GeocodingError as exc:
        raise to_http_exception(exc) from exc
    return {"result": result.to_dict() if result else None}


@router.post("/validate", response_model=ValidateResponse, status_code=status.HTTP_200_OK)
async def validate(payload: ValidateRequest, service: GeocodingService = Depends(get_geocoding_service)) -> dict:
    options = AddressValidationOptions(
        strict_validation=payload.strict_validation,
        check_deliverability=payload.check_deliverability,
        allow_po_boxes=payload.allow_po_boxes,
        allow_approximate_matches=payload.allow_approximate_matches,
        required_components=tuple(payload.required_components),
    )
    try:
        result = await service.validate_address(payload.address, options)
    except GeocodingError as exc:
        raise to_http_exception(exc) from exc
    return {"result": result.to_dict()}


@router.post("/batch-geocode", response_model=BatchGeocodeResponse, status_code=status.HTTP_200_OK)
async def batch_geocode(
    payload: BatchGeocodeRequest,
    service: GeocodingService = Depends(get_geocoding_service),
) -> dict:
    if not service.api_key_configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Google Maps API key is required for geocoding",
        )
    options = BatchGeocodeOptions(
        validate_delivery=payload.options.validate_delivery,
        language=payload.options.language,
        region=payload.options.region,
    )
    batch = await service.batch_geocode(payload.addresses, options)
    return batch.to_dict()


@router.get("/stats", response_model=StatsResponse, status_code=status.HTTP_200_OK)
def stats(service: GeocodingService = Depends(get_geocoding_service)) -> dict:
    return asdict(service.get_stats())


@router.post("/clear-cache", status_code=status.HTTP_204_NO_CONTENT)
def clear_cache(service: GeocodingService = Depends(get_geocoding_service)) -> Response:
    service.clear_cache()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
