"""
Main FastAPI application for the SMHI Weather Observations API.

This module contains the main FastAPI application instance, exception
handlers and the public health endpoint.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from metobs_api.clients.exceptions import UpstreamError
from metobs_api.config import settings
from metobs_api.dependencies.auth import API_KEY_HEADER_NAME
from metobs_api.dependencies.services import close_observation_source
from metobs_api.routers.observations import router as observations_router
from metobs_api.routers.status import router as status_router
from metobs_api.utils.logging_config import setup_logging, get_logger

# Initialize logging
setup_logging()
logger = get_logger(__name__)

# Initialize rate limiter
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Handles startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"{settings.PROJECT_NAME} - Application starting up")
    logger.info(f"Environment: {'Development' if settings.DEBUG else 'Production'}")
    logger.info(f"Upstream: {settings.SMHI_BASE_URL}")
    logger.info(f"Degrade on upstream error: {settings.DEGRADE_ON_UPSTREAM_ERROR}")
    if not settings.API_KEY:
        logger.warning("API_KEY is not set; every protected request will be rejected")
    logger.info("=" * 60)

    yield

    # Shutdown
    await close_observation_source()
    logger.info("=" * 60)
    logger.info(f"{settings.PROJECT_NAME} - Application shutting down")
    logger.info("=" * 60)


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Merged SMHI weather observations (air temperature, wind speed, wind gust)",
    version=settings.VERSION,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(status.HTTP_401_UNAUTHORIZED)
async def unauthorized_exception_handler(request: Request, exc: HTTPException):
    """Handle 401 Unauthorized exceptions."""
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={
            "detail": exc.detail,
            "status_code": status.HTTP_401_UNAUTHORIZED
        },
        headers=getattr(exc, "headers", None) or {}
    )


@app.exception_handler(UpstreamError)
async def upstream_exception_handler(request: Request, exc: UpstreamError):
    """Map upstream failures to 502 Bad Gateway."""
    logger.error(f"Upstream failure on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={
            "detail": "Upstream observation service unavailable",
            "status_code": status.HTTP_502_BAD_GATEWAY
        },
    )


# Set up CORS
if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.get("/health")
@limiter.limit("60/minute")  # More generous limit for health checks
async def health_check(request: Request):
    """
    Health check endpoint.

    Rate limit: 60 requests per minute
    """
    return {"status": "healthy"}


# Include routers
app.include_router(observations_router, prefix=settings.API_PREFIX)
app.include_router(status_router, prefix=settings.API_PREFIX)


def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema

    description = """
A REST API that fetches and merges weather observation data from SMHI
(Swedish Meteorological and Hydrological Institute).

### Features

- **Data Merging**: Combines temperature, wind gust and wind speed series by timestamp
- **Geographic Filtering**: Filter observations by distance from a point (`lat`, `lon`, `radiusKm`)
- **Time-based Queries**: Last hour or last day, optionally narrowed with `from`/`to`
- **Station Sets**: List `core`, `additional` or `all` stations

### Weather Parameters

- **Parameter 1**: Air Temperature (Lufttemperatur)
- **Parameter 4**: Wind Speed (Vindhastighet)
- **Parameter 21**: Wind Gust (Byvind)

Missing measurements are returned as `null`, never as zero.

### Authentication

All `/api/*` endpoints require the shared API key in the `x-api-key` header.
`/health` and the documentation pages are public.
    """

    openapi_schema = get_openapi(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description=description,
        routes=app.routes,
    )

    openapi_schema["info"]["contact"] = {
        "name": "SMHI Weather API",
        "email": "api@smhi.se",
    }

    openapi_schema["info"]["license"] = {
        "name": "MIT License",
        "url": "https://opensource.org/licenses/MIT"
    }

    openapi_schema.setdefault("components", {})["securitySchemes"] = {
        "ApiKeyAuth": {
            "type": "apiKey",
            "in": "header",
            "name": API_KEY_HEADER_NAME,
            "description": "API key for authentication"
        }
    }

    openapi_schema["tags"] = [
        {
            "name": "Observations",
            "description": "Merged observations and station listings - API key required"
        },
        {
            "name": "status",
            "description": "Authenticated status endpoint"
        },
    ]

    app.openapi_schema = openapi_schema
    return app.openapi_schema

app.openapi = custom_openapi
