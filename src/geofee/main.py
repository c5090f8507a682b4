"""FastAPI application entry point."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .api.error_handlers import register_error_handlers
from .api.routes import fees, geocoding, health
from .config import Settings, settings as default_settings
from .services.fees.calculator import FeeCalculator, FeeOptions
from .services.geocoding.provider import build_http_client
from .services.geocoding.service import GeocodingService
from .services.routing.base import RouteProvider, build_route_provider


def create_app(
    config: Settings | None = None,
    geocoding_service: GeocodingService | None = None,
    route_provider: RouteProvider | None = None,
    fee_calculator: FeeCalculator | None = None,
) -> FastAPI:
    """Build the app and the services it serves.

    Services are constructed once here and shared through ``app.state``; tests
    pass their own instances. Services built here share one HTTP connection
    pool, closed on shutdown.
    """
    config = config or default_settings
    http_client = None
    if geocoding_service is None or route_provider is None:
        http_client = build_http_client(config.request_timeout_seconds)
    geocoding_service = geocoding_service or GeocodingService.from_settings(config, http_client=http_client)
    route_provider = route_provider or build_route_provider(config, http_client=http_client)
    fee_calculator = fee_calculator or FeeCalculator(
        geocoding_service,
        route_provider,
        FeeOptions.from_settings(config),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if http_client is not None:
            await http_client.aclose()

    app = FastAPI(title=config.app_name, root_path="", lifespan=lifespan)
    app.state.http_client = http_client
    app.state.geocoding_service = geocoding_service
    app.state.route_provider = route_provider
    app.state.fee_calculator = fee_calculator
    register_error_handlers(app)

    if config.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(config.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization"],
            max_age=86400,
        )

    @app.middleware("http")
    async def rate_limit_headers(request: Request, call_next):
        response = await call_next(request)
        if request.url.path.startswith(config.api_prefix):
            stats = geocoding_service.get_stats()
            response.headers["X-RateLimit-Limit"] = str(stats.rate_limit_per_minute)
            response.headers["X-RateLimit-Remaining"] = str(stats.remaining_requests)
            response.headers["X-Cache-Size"] = str(stats.cache_size)
        return response

    @app.get("/")
    def root():
        return {
            "service": config.app_name,
            "status": "running",
            "api_prefix": config.api_prefix,
            "health": f"{config.api_prefix}/health",
            "docs": "/docs",
        }

    app.include_router(health.router, prefix=config.api_prefix)
    app.include_router(geocoding.router, prefix=config.api_prefix)
    app.include_router(fees.router, prefix=config.api_prefix)
    return app


app = create_app()
