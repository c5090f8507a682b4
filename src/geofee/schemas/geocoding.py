"""Geocoding request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MAX_BATCH_ADDRESSES = 100


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CoordinateModel(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class ViewportModel(BaseModel):
    northeast: CoordinateModel
    southwest: CoordinateModel


class GeometryModel(BaseModel):
    location: CoordinateModel
    location_type: str
    viewport: Optional[ViewportModel] = None


class AddressComponentModel(BaseModel):
    long_name: str
    short_name: str
    types: List[str]


class GeocodeResultModel(BaseModel):
    formatted_address: str
    geometry: GeometryModel
    place_id: str
    types: List[str]
    address_components: List[AddressComponentModel]
    partial_match: bool = False


class AddressInput(BaseModel):
    address: str = Field(..., description="Free-text address, 3 to 500 characters.")

    @field_validator("address")
    @classmethod
    def _check_address(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 3:
            raise ValueError("Address must be at least 3 characters long")
        if len(value) > 500:
            raise ValueError("Address must be less than 500 characters")
        return value


class ComponentRestrictionsModel(CamelModel):
    country: Optional[str] = None
    postal_code: Optional[str] = None
    locality: Optional[str] = None


class GeocodeRequest(AddressInput, CamelModel):
    language: Optional[str] = None
    region: Optional[str] = None
    bounds: Optional[ViewportModel] = None
    component_restrictions: Optional[ComponentRestrictionsModel] = None


class ReverseGeocodeRequest(CamelModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    language: Optional[str] = None
    result_types: List[str] = Field(default_factory=list)
    location_types: List[str] = Field(default_factory=list)


class GeocodeResponse(BaseModel):
    result: Optional[GeocodeResultModel] = None


class ValidateRequest(AddressInput, CamelModel):
    strict_validation: bool = False
    check_deliverability: bool = False
    allow_po_boxes: bool = Field(default=False, alias="allowPOBoxes")
    allow_approximate_matches: bool = False
    required_components: List[str] = Field(default_factory=list)


class AddressValidationModel(CamelModel):
    is_valid: bool
    is_deliverable: bool
    confidence: str
    issues: List[str] = Field(default_factory=list)
    geocode_result: Optional[GeocodeResultModel] = None


class ValidateResponse(BaseModel):
    result: AddressValidationModel


class BatchOptionsModel(CamelModel):
    validate_delivery: bool = False
    language: Optional[str] = None
    region: Optional[str] = None


class BatchGeocodeRequest(CamelModel):
    addresses: List[str] = Field(..., min_length=1, max_length=MAX_BATCH_ADDRESSES)
    options: BatchOptionsModel = Field(default_factory=BatchOptionsModel)


class BatchItemModel(CamelModel):
    address: str
    success: bool
    result: Optional[GeocodeResultModel] = None
    validation: Optional[AddressValidationModel] = None
    error: Optional[str] = None


class BatchSummaryModel(CamelModel):
    total: int
    successful: int
    failed: int
    processing_time_ms: float


class BatchGeocodeResponse(CamelModel):
    results: List[BatchItemModel]
    summary: BatchSummaryModel


class HealthResponse(CamelModel):
    status: str
    api_key_configured: bool
    cache_enabled: bool
    rate_limit_remaining: int
    last_error: Optional[str] = None


class StatsResponse(CamelModel):
    cache_size: int
    remaining_requests: int
    rate_limit_per_minute: int
