#!/usr/bin/env python3
"""Helper script to check and create the .env file for provider configuration."""

from pathlib import Path
import os

SECRET_KEYS = ("GEOFEE_GOOGLE_MAPS_API_KEY", "GEOFEE_ROUTING_API_KEY")

TEMPLATE = """# Geocoding provider (required)
GEOFEE_GOOGLE_MAPS_API_KEY=your-google-maps-key

# Routing provider: google (Directions API) or osrm
GEOFEE_ROUTING_PROVIDER=google
# GEOFEE_ROUTING_API_KEY=optional-separate-directions-key
# GEOFEE_OSRM_BASE_URL=http://localhost:5000

# Geocoding defaults
GEOFEE_DEFAULT_LANGUAGE=en
GEOFEE_DEFAULT_REGION=US
GEOFEE_CACHE_TTL_SECONDS=86400
GEOFEE_RATE_LIMIT_PER_MINUTE=50

# GEOFEE_FRONTEND_ALLOWED_ORIGINS - JSON array or comma-separated list
"""


def _mask(value: str) -> str:
    return value[:6] + "..." + value[-4:] if len(value) > 12 else "***"


def main():
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Geocoding & Delivery Fee Environment Checker")
    print("=" * 60)
    print()

    if not env_file.exists():
        env_file.write_text(TEMPLATE, encoding="utf-8")
        print(f"Created template .env file at: {env_file}")
        print("Please edit .env and add your Google Maps API key.")
        return

    print(f"Found .env file at: {env_file}")
    print("-" * 60)
    for line in env_file.read_text(encoding="utf-8").splitlines():
        name, sep, value = line.partition("=")
        if sep and name.strip() in SECRET_KEYS:
            print(f"{name}={_mask(value.strip())}")
        else:
            print(line)
    print("-" * 60)
    print()

    for key in SECRET_KEYS:
        value = os.getenv(key)
        print(f"{key} (from environment): {_mask(value) if value else 'not set'}")
    print()

    import sys

    sys.path.insert(0, str(project_root / "src"))
    from geofee.config import settings

    print(f"Geocoding key configured: {bool(settings.google_maps_api_key)}")
    print(f"Routing provider: {settings.routing_provider}")
    if settings.routing_provider == "osrm":
        print(f"OSRM base URL: {settings.osrm_base_url or 'NOT SET'}")
    else:
        print(f"Routing key configured: {bool(settings.effective_routing_api_key)}")
    print(f"Cache TTL: {settings.cache_ttl_seconds:.0f}s, rate limit: {settings.rate_limit_per_minute}/min")


if __name__ == "__main__":
    main()
