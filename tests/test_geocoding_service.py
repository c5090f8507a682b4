import asyncio

import pytest

from src.geofee.errors import ConfigurationError, NetworkError, ProviderError, RateLimitError, ValidationError
from src.geofee.models.geo import Confidence, Coordinate, LocationType, Viewport
from src.geofee.services.geocoding.cache import InMemoryCache
from src.geofee.services.geocoding.rate_limiter import SlidingWindowRateLimiter
from src.geofee.services.geocoding.service import (
    AddressValidationOptions,
    BatchGeocodeOptions,
    ComponentRestrictions,
    GeocodeOptions,
    GeocodingService,
    ReverseGeocodeOptions,
)

GOOGLEPLEX = "1600 Amphitheatre Parkway, Mountain View, CA"

DEFAULT_COMPONENTS = [
    {"long_name": "1600", "short_name": "1600", "types": ["street_number"]},
    {"long_name": "Amphitheatre Parkway", "short_name": "Amphitheatre Pkwy", "types": ["route"]},
    {"long_name": "Mountain View", "short_name": "Mountain View", "types": ["locality", "political"]},
    {"long_name": "California", "short_name": "CA", "types": ["administrative_area_level_1", "political"]},
    {"long_name": "United States", "short_name": "US", "types": ["country", "political"]},
    {"long_name": "94043", "short_name": "94043", "types": ["postal_code"]},
]


def _google_result(
    formatted_address: str = "1600 Amphitheatre Pkwy, Mountain View, CA 94043, USA",
    lat: float = 37.4224764,
    lng: float = -122.0842499,
    location_type: str = "ROOFTOP",
    partial_match: bool | None = None,
    components: list | None = None,
) -> dict:
    payload = {
        "formatted_address": formatted_address,
        "geometry": {
            "location": {"lat": lat, "lng": lng},
            "location_type": location_type,
            "viewport": {
                "northeast": {"lat": lat + 0.001, "lng": lng + 0.001},
                "southwest": {"lat": lat - 0.001, "lng": lng - 0.001},
            },
        },
        "place_id": "ChIJ2eUgeAK6j4ARbn5u_wAGqWA",
        "types": ["street_address"],
        "address_components": DEFAULT_COMPONENTS if components is None else components,
    }
    if partial_match is not None:
        payload["partial_match"] = partial_match
    return payload


class FakeProvider:
    def __init__(self, results=None, api_key="test-key", error=None, by_address=None):
        self.api_key = api_key
        self.results = [_google_result()] if results is None else results
        self.error = error
        self.by_address = by_address or {}
        self.calls: list[dict] = []

    async def geocode(self, params):
        self.calls.append(params)
        outcome = self.by_address.get(params.get("address"), self.results)
        if isinstance(outcome, Exception):
            raise outcome
        if self.error:
            raise self.error
        return outcome

    async def reverse_geocode(self, params):
        return await self.geocode(params)


class FakeClock:
    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


def _service(provider=None, limit=50, clock=None, **kwargs) -> GeocodingService:
    clock = clock or FakeClock()
    return GeocodingService(
        provider=provider or FakeProvider(),
        cache=InMemoryCache(clock=clock),
        rate_limiter=SlidingWindowRateLimiter(limit, clock=clock),
        batch_delay=kwargs.pop("batch_delay", 0),
        **kwargs,
    )


def run(coro):
    return asyncio.run(coro)


def test_geocode_normalizes_first_result():
    provider = FakeProvider(results=[_google_result(), _google_result(formatted_address="Other")])
    service = _service(provider)

    result = run(service.geocode(GOOGLEPLEX))

    assert result.formatted_address.startswith("1600 Amphitheatre")
    assert result.location == Coordinate(37.4224764, -122.0842499)
    assert result.geometry.location_type is LocationType.ROOFTOP
    assert result.geometry.viewport is not None
    assert result.partial_match is False
    assert result.has_component("street_number")
    assert provider.calls[0]["language"] == "en"
    assert provider.calls[0]["region"] == "US"


def test_geocode_passes_bounds_and_component_restrictions():
    provider = FakeProvider()
    service = _service(provider)
    options = GeocodeOptions(
        language="fr",
        region="CA",
        bounds=Viewport(northeast=Coordinate(38.0, -122.0), southwest=Coordinate(37.0, -123.0)),
        component_restrictions=ComponentRestrictions(country="US", locality="Mountain View"),
    )

    run(service.geocode(GOOGLEPLEX, options))

    params = provider.calls[0]
    assert params["language"] == "fr"
    assert params["region"] == "CA"
    assert params["bounds"] == "37.0,-123.0|38.0,-122.0"
    assert params["components"] == "country:US|locality:Mountain View"


def test_identical_requests_hit_provider_once():
    provider = FakeProvider()
    service = _service(provider)

    first = run(service.geocode(GOOGLEPLEX))
    second = run(service.geocode(f"  {GOOGLEPLEX.upper()} "))

    assert first is second
    assert len(provider.calls) == 1


def test_cache_hit_does_not_consume_rate_limit():
    service = _service(FakeProvider(), limit=1)
    run(service.geocode(GOOGLEPLEX))
    assert service.get_stats().remaining_requests == 0
    # Served from cache even though the budget is exhausted
    assert run(service.geocode(GOOGLEPLEX)) is not None


def test_different_options_are_cached_separately():
    provider = FakeProvider()
    service = _service(provider)
    run(service.geocode(GOOGLEPLEX))
    run(service.geocode(GOOGLEPLEX, GeocodeOptions(language="de")))
    assert len(provider.calls) == 2


def test_expired_entry_triggers_fresh_call():
    clock = FakeClock()
    provider = FakeProvider()
    service = _service(provider, clock=clock, cache_ttl=60)

    run(service.geocode(GOOGLEPLEX))
    clock.now += 61
    run(service.geocode(GOOGLEPLEX))

    assert len(provider.calls) == 2
    assert service.get_stats().cache_size == 1


def test_caching_can_be_disabled():
    provider = FakeProvider()
    service = _service(provider, enable_caching=False)
    run(service.geocode(GOOGLEPLEX))
    run(service.geocode(GOOGLEPLEX))
    assert len(provider.calls) == 2
    assert service.get_stats().cache_size == 0


def test_rate_limit_rejects_excess_calls_before_network():
    provider = FakeProvider()
    service = _service(provider, limit=2)

    run(service.geocode("1 Main St, Springfield"))
    run(service.geocode("2 Main St, Springfield"))
    with pytest.raises(RateLimitError) as excinfo:
        run(service.geocode("3 Main St, Springfield"))

    assert len(provider.calls) == 2
    assert excinfo.value.retry_after == pytest.approx(60)


def test_zero_results_returns_none_and_is_not_cached():
    provider = FakeProvider(results=[])
    service = _service(provider)
    assert run(service.geocode("Nowhere Lane")) is None
    assert run(service.geocode("Nowhere Lane")) is None
    assert len(provider.calls) == 2


def test_missing_api_key_raises_configuration_error():
    provider = FakeProvider(api_key="")
    service = _service(provider)
    with pytest.raises(ConfigurationError):
        run(service.geocode(GOOGLEPLEX))
    with pytest.raises(ConfigurationError):
        run(service.reverse_geocode(37.4, -122.1))
    assert provider.calls == []


def test_empty_address_raises_validation_error():
    service = _service()
    with pytest.raises(ValidationError):
        run(service.geocode("   "))


def test_provider_errors_propagate():
    service = _service(FakeProvider(error=ProviderError("denied", provider_status="REQUEST_DENIED")))
    with pytest.raises(ProviderError):
        run(service.geocode(GOOGLEPLEX))


def test_reverse_geocode_validates_coordinates():
    provider = FakeProvider()
    service = _service(provider)
    with pytest.raises(ValidationError):
        run(service.reverse_geocode(120.0, 0.0))
    assert provider.calls == []


def test_reverse_geocode_params_and_cache_rounding():
    provider = FakeProvider()
    service = _service(provider)
    options = ReverseGeocodeOptions(result_types=("street_address", "premise"), location_types=("ROOFTOP",))

    result = run(service.reverse_geocode(37.4224764, -122.0842499, options))
    run(service.reverse_geocode(37.42247641, -122.08424991, options))

    assert result.geometry.viewport is None
    assert len(provider.calls) == 1
    params = provider.calls[0]
    assert params["latlng"] == "37.4224764,-122.0842499"
    assert params["result_type"] == "street_address|premise"
    assert params["location_type"] == "ROOFTOP"


def test_validate_rooftop_address_is_high_confidence():
    service = _service()
    validation = run(service.validate_address(GOOGLEPLEX))
    assert validation.is_valid is True
    assert validation.is_deliverable is True
    assert validation.confidence is Confidence.HIGH
    assert validation.issues == []
    assert validation.geocode_result is not None


def test_validate_unknown_address():
    service = _service(FakeProvider(results=[]))
    validation = run(service.validate_address("Nowhere Lane"))
    assert validation.is_valid is False
    assert validation.is_deliverable is False
    assert validation.confidence is Confidence.LOW
    assert validation.issues == ["Address not found"]


def test_validate_partial_match():
    service = _service(FakeProvider(results=[_google_result(partial_match=True)]))

    lenient = run(service.validate_address(GOOGLEPLEX))
    strict = run(service.validate_address(GOOGLEPLEX, AddressValidationOptions(strict_validation=True)))

    assert lenient.confidence is Confidence.MEDIUM
    assert lenient.is_deliverable is True
    assert len(lenient.issues) == 1
    assert strict.is_deliverable is False


def test_validate_approximate_location():
    service = _service(FakeProvider(results=[_google_result(location_type="APPROXIMATE")]))

    default = run(service.validate_address(GOOGLEPLEX))
    allowed = run(service.validate_address(GOOGLEPLEX, AddressValidationOptions(allow_approximate_matches=True)))

    assert default.confidence is Confidence.LOW
    assert default.is_deliverable is False
    assert allowed.confidence is Confidence.LOW
    assert allowed.is_deliverable is True


def test_confidence_never_increases():
    service = _service(FakeProvider(results=[_google_result(partial_match=True, location_type="APPROXIMATE")]))
    validation = run(service.validate_address(GOOGLEPLEX))
    assert validation.confidence is Confidence.LOW
    assert len(validation.issues) == 2
    assert Confidence.LOW.lower_to(Confidence.HIGH) is Confidence.LOW


def test_validate_required_components_and_street_number():
    components = [c for c in DEFAULT_COMPONENTS if "street_number" not in c["types"]]
    service = _service(FakeProvider(results=[_google_result(components=components)]))
    options = AddressValidationOptions(
        check_deliverability=True,
        required_components=("street_number", "route", "postal_code", "subpremise"),
    )

    validation = run(service.validate_address(GOOGLEPLEX, options))

    assert validation.is_valid is True
    assert validation.is_deliverable is False
    assert "Missing required address components: street_number, subpremise" in validation.issues
    assert any("street number" in issue for issue in validation.issues)


def test_validate_rejects_po_box():
    result = _google_result(formatted_address="PO Box 123, Mountain View, CA 94042, USA")
    service = _service(FakeProvider(results=[result]))

    rejected = run(service.validate_address("PO Box 123, Mountain View, CA"))
    allowed = run(service.validate_address("PO Box 123, Mountain View, CA", AddressValidationOptions(allow_po_boxes=True)))

    assert rejected.is_deliverable is False
    assert "PO Box addresses are not supported" in rejected.issues
    assert allowed.is_deliverable is True


def test_batch_geocode_accounts_for_every_address():
    sleeps: list[float] = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    provider = FakeProvider(
        by_address={
            "Nowhere Lane": [],
            "Broken Rd": NetworkError("Request timeout"),
        }
    )
    service = _service(provider, batch_delay=0.1, sleep=fake_sleep)
    addresses = [GOOGLEPLEX, "Nowhere Lane", "Broken Rd", "1 Infinite Loop, Cupertino"]

    batch = run(service.batch_geocode(addresses))

    summary = batch.summary
    assert summary.total == len(addresses) == summary.successful + summary.failed
    assert (summary.successful, summary.failed) == (2, 2)
    assert [item.address for item in batch.results] == addresses
    assert batch.results[1].error == "Address not found"
    assert batch.results[2].error == "Request timeout"
    assert sleeps == [0.1, 0.1, 0.1]
    assert [call["address"] for call in provider.calls] == addresses


def test_batch_geocode_attaches_delivery_validation():
    service = _service(FakeProvider())
    batch = run(service.batch_geocode([GOOGLEPLEX], BatchGeocodeOptions(validate_delivery=True, language="es")))

    item = batch.results[0]
    assert item.success is True
    assert item.validation is not None
    assert item.validation.is_deliverable is True
    assert batch.to_dict()["summary"]["total"] == 1


def test_health_check_states():
    unhealthy = run(_service(FakeProvider(api_key="")).health_check())
    assert unhealthy.status == "unhealthy"
    assert unhealthy.api_key_configured is False

    healthy = run(_service(FakeProvider()).health_check())
    assert healthy.status == "healthy"
    assert healthy.last_error is None

    degraded = run(_service(FakeProvider(error=NetworkError("Request timeout"))).health_check())
    assert degraded.status == "degraded"
    assert degraded.api_key_configured is True
    assert degraded.last_error == "Request timeout"


def test_stats_and_clear_cache():
    service = _service(FakeProvider(), limit=10)
    run(service.geocode(GOOGLEPLEX))

    stats = service.get_stats()
    assert (stats.cache_size, stats.remaining_requests, stats.rate_limit_per_minute) == (1, 9, 10)
    assert service.get_stats() == stats

    service.clear_cache()
    assert service.get_stats().cache_size == 0
