"""Property Search FastAPI Application.

Main entry point for the backend API server.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from propsearch.api import router
from propsearch.api.routes import error_response
from propsearch.config import Settings, get_settings
from propsearch.models import ErrorCode
from propsearch.services import (
    InMemoryPropertyRepository,
    PlacesService,
    PropertyRepository,
    PropertyService,
    create_amenity_cache,
    create_places_service,
    sample_properties,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[PropertyRepository] = None,
    places: Optional[PlacesService] = None,
) -> FastAPI:
    """Build the application.

    The amenity cache and services are constructed once in the lifespan and
    shared through ``app.state``.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        # Startup
        cache = await create_amenity_cache(settings)
        cache.start_sweeper(settings.cache_sweep_interval)
        places_service = places or create_places_service(settings)

        app.state.settings = settings
        app.state.amenity_cache = cache
        app.state.property_service = PropertyService(
            repository or InMemoryPropertyRepository(sample_properties()),
            places_service,
            cache,
            settings,
        )
        logger.info(f"Amenity cache ready: {cache.get_stats().model_dump()}")
        yield
        # Shutdown
        await places_service.close()
        await cache.close()

    app = FastAPI(
        title="Property Search API",
        description="Real-estate listing search with nearby amenities",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: Exception):
        """Handle request and Pydantic validation errors."""
        return error_response(
            422,
            ErrorCode.VALIDATION_ERROR,
            str(exc),
            "Invalid request format. Please check your input.",
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors."""
        logger.exception(f"Unhandled error on {request.url.path}")
        return error_response(
            500,
            ErrorCode.API_ERROR,
            str(exc),
            "Something went wrong. Please try again.",
        )

    app.include_router(router, prefix="/api")

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        return {
            "status": "healthy",
            "cache": request.app.state.amenity_cache.get_stats().model_dump(),
        }

    return app


app = create_app()
