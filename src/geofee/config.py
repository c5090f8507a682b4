"""Application configuration and settings management."""

from typing import Annotated, Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="GEOFEE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Geocoding & Delivery Fee API"
    api_prefix: str = "/api"

    # Geocoding provider
    google_maps_api_key: Optional[str] = Field(
        default=None,
        description="Google Maps Geocoding API key. Calls fail with a configuration error without it.",
    )
    google_geocode_url: str = Field(default="https://maps.googleapis.com/maps/api/geocode/json")
    default_language: str = Field(default="en")
    default_region: str = Field(default="US")

    # Routing provider
    routing_provider: Literal["google", "osrm"] = Field(
        default="google",
        description="Routing backend used for delivery fee estimates.",
    )
    routing_api_key: Optional[str] = Field(
        default=None,
        description="Directions API key. Falls back to google_maps_api_key when unset.",
    )
    google_directions_url: str = Field(default="https://maps.googleapis.com/maps/api/directions/json")
    osrm_base_url: Optional[str] = Field(
        default=None,
        description="Base URL for the OSRM routing service (e.g., http://localhost:5000).",
    )
    osrm_profile: Literal["driving", "driving-hgv"] = Field(default="driving")

    # Cache and rate limiting
    cache_enabled: bool = True
    cache_ttl_seconds: float = Field(default=24 * 60 * 60, gt=0)
    cache_max_entries: Optional[int] = Field(
        default=None,
        ge=1,
        description="Optional LRU cap on cached geocode results.",
    )
    rate_limit_per_minute: int = Field(default=50, ge=1)
    batch_delay_seconds: float = Field(default=0.1, ge=0.0)

    # Outbound requests
    request_timeout_seconds: float = Field(default=10.0, gt=0)
    max_retries: int = Field(default=3, ge=0)
    retry_delay_seconds: float = Field(default=1.0, ge=0.0)

    # Fee model
    base_fee: float = Field(default=5.99, ge=0.0)
    per_mile_rate: float = Field(default=1.50, ge=0.0)
    per_minute_rate: float = Field(default=0.10, ge=0.0)
    minimum_fee: float = Field(default=3.99, ge=0.0)
    maximum_fee: float = Field(default=50.00, ge=0.0)
    free_delivery_threshold: float = Field(default=35.00, ge=0.0)

    frontend_allowed_origins: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(
            "http://localhost:3000",
            "http://localhost:3001",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @property
    def effective_routing_api_key(self) -> Optional[str]:
        return self.routing_api_key or self.google_maps_api_key

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
