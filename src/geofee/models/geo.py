"""Domain models for geocoding results, routes and delivery estimates."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, List, Optional

from ..errors import ValidationError
from ..services.geospatial import is_valid_coordinates


class LocationType(str, Enum):
    ROOFTOP = "ROOFTOP"
    RANGE_INTERPOLATED = "RANGE_INTERPOLATED"
    GEOMETRIC_CENTER = "GEOMETRIC_CENTER"
    APPROXIMATE = "APPROXIMATE"


class Confidence(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _CONFIDENCE_RANK[self]

    def lower_to(self, other: "Confidence") -> "Confidence":
        """Return the weaker of the two levels; confidence is never raised."""
        return other if other.rank < self.rank else self


_CONFIDENCE_RANK = {Confidence.LOW: 0, Confidence.MEDIUM: 1, Confidence.HIGH: 2}


@dataclass(slots=True, frozen=True)
class Coordinate:
    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not is_valid_coordinates(self.lat, self.lng):
            raise ValidationError(f"Invalid coordinates: {self.lat}, {self.lng}")

    @classmethod
    def from_dict(cls, payload: dict) -> "Coordinate":
        return cls(lat=float(payload["lat"]), lng=float(payload["lng"]))


@dataclass(slots=True, frozen=True)
class Viewport:
    northeast: Coordinate
    southwest: Coordinate


@dataclass(slots=True, frozen=True)
class Geometry:
    location: Coordinate
    location_type: LocationType
    viewport: Optional[Viewport] = None


@dataclass(slots=True, frozen=True)
class AddressComponent:
    long_name: str
    short_name: str
    types: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class GeocodeResult:
    """Normalized first result of a geocoding provider response."""

    formatted_address: str
    geometry: Geometry
    place_id: str
    types: tuple[str, ...]
    address_components: tuple[AddressComponent, ...]
    partial_match: bool = False

    @classmethod
    def from_provider(cls, payload: dict, *, include_viewport: bool = True) -> "GeocodeResult":
        """Build a result from a Google-shaped result object.

        The same shape is produced by ``to_dict`` so API responses can be parsed
        back with this constructor.
        """
        geometry = payload["geometry"]
        viewport = None
        raw_viewport = geometry.get("viewport")
        if include_viewport and raw_viewport:
            viewport = Viewport(
                northeast=Coordinate.from_dict(raw_viewport["northeast"]),
                southwest=Coordinate.from_dict(raw_viewport["southwest"]),
            )
        components = tuple(
            AddressComponent(
                long_name=component.get("long_name", ""),
                short_name=component.get("short_name", ""),
                types=tuple(component.get("types", ())),
            )
            for component in payload.get("address_components", ())
        )
        return cls(
            formatted_address=payload.get("formatted_address", ""),
            geometry=Geometry(
                location=Coordinate.from_dict(geometry["location"]),
                location_type=LocationType(geometry["location_type"]),
                viewport=viewport,
            ),
            place_id=payload.get("place_id", ""),
            types=tuple(payload.get("types", ())),
            address_components=components,
            partial_match=bool(payload.get("partial_match", False)),
        )

    @property
    def location(self) -> Coordinate:
        return self.geometry.location

    def has_component(self, component_type: str) -> bool:
        return any(component_type in component.types for component in self.address_components)

    def component_types(self) -> set[str]:
        return {t for component in self.address_components for t in component.types}

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["geometry"]["location_type"] = self.geometry.location_type.value
        if data["geometry"]["viewport"] is None:
            del data["geometry"]["viewport"]
        return data


def extract_address_components(result: GeocodeResult) -> dict[str, str]:
    """Flatten address components into the fields a checkout form needs."""
    components: dict[str, str] = {}
    for component in result.address_components:
        for component_type in component.types:
            components[component_type] = component.long_name
    return {
        "street_number": components.get("street_number", ""),
        "route": components.get("route", ""),
        "locality": components.get("locality", ""),
        "administrative_area_level_1": components.get("administrative_area_level_1", ""),
        "administrative_area_level_2": components.get("administrative_area_level_2", ""),
        "country": components.get("country", ""),
        "postal_code": components.get("postal_code", ""),
        "formatted_address": result.formatted_address,
    }


@dataclass(slots=True)
class AddressValidationResult:
    is_valid: bool
    is_deliverable: bool
    confidence: Confidence
    issues: List[str] = field(default_factory=list)
    geocode_result: Optional[GeocodeResult] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "is_deliverable": self.is_deliverable,
            "confidence": self.confidence.value,
            "issues": list(self.issues),
            "geocode_result": self.geocode_result.to_dict() if self.geocode_result else None,
        }


@dataclass(slots=True, frozen=True)
class TextValue:
    text: str
    value: int


@dataclass(slots=True, frozen=True)
class RouteInfo:
    distance: TextValue
    duration: TextValue
    polyline: str


@dataclass(slots=True)
class DeliveryEstimate:
    distance: TextValue
    duration: TextValue
    base_fee: float
    distance_fee: float
    time_fee: float
    priority_fee: float
    total_fee: float
    is_free_delivery: bool
    route: str


@dataclass(slots=True)
class BatchItem:
    address: str
    success: bool
    result: Optional[GeocodeResult] = None
    validation: Optional[AddressValidationResult] = None
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "success": self.success,
            "result": self.result.to_dict() if self.result else None,
            "validation": self.validation.to_dict() if self.validation else None,
            "error": self.error,
        }


@dataclass(slots=True)
class BatchSummary:
    total: int
    successful: int
    failed: int
    processing_time_ms: float


@dataclass(slots=True)
class BatchGeocodingResult:
    results: List[BatchItem]
    summary: BatchSummary

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [item.to_dict() for item in self.results],
            "summary": asdict(self.summary),
        }


@dataclass(slots=True)
class HealthStatus:
    status: str
    api_key_configured: bool
    cache_enabled: bool
    rate_limit_remaining: int
    last_error: Optional[str] = None


@dataclass(slots=True)
class ServiceStats:
    cache_size: int
    remaining_requests: int
    rate_limit_per_minute: int
