import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import favorites
from .db.connection import dispose_engine
from .schemas.error import ErrorType, ValidationErrorDetail
from .services.favorites.errors import FavoritesError
from .settings import AppSettings, get_settings
from .utils.error_responses import (
    build_error_response,
    build_favorites_error_response,
    build_validation_error_response,
)
from .utils.request_context import get_request_id, set_request_id

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level_numeric,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _validate_environment(configured: AppSettings | None = None) -> None:
    """Log warnings for optional configuration left at its default."""
    warnings = (configured or get_settings()).optional_config_warnings()

    if warnings:
        logger.warning("=" * 60)
        logger.warning("Environment Configuration Warnings:")
        for warning in warnings:
            logger.warning(f"  • {warning}")
        logger.warning("=" * 60)


def validate_environment() -> None:
    """Public wrapper ensuring CLI tools can trigger configuration validation."""

    _validate_environment()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    validate_environment()

    configured = get_settings()
    logger.info("=" * 60)
    logger.info("Storefront Favorites API")
    logger.info("=" * 60)
    logger.info(f"Admin API version: {configured.shopify_api_version}")
    logger.info(f"Favorites metafield: {configured.favorites_namespace}.{configured.favorites_key}")
    if configured.shop_access_tokens:
        logger.info(
            "Credentials: static mapping for %s shop(s)",
            len(configured.shop_access_tokens),
        )
    else:
        logger.info("Credentials: session table")
    logger.info("=" * 60)

    yield

    logger.info("Shutting down Storefront Favorites API")
    await dispose_engine()


app = FastAPI(
    title="Storefront Favorites API",
    version="0.1.0",
    description=(
        "Keeps a customer's favorite product handles in a Shopify customer"
        " metafield on behalf of the storefront widget."
    ),
    lifespan=lifespan,
    redirect_slashes=False,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    max_age=86400,
)


# Middleware to add request ID to each request
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add unique request ID to each request for tracking."""
    request_id = str(uuid.uuid4())
    set_request_id(request_id)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# Exception handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed requests as 400 with per-field details."""
    errors = [
        ValidationErrorDetail(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            value=error.get("input"),
        )
        for error in exc.errors()
    ]

    logger.warning(
        "Validation error for request %s to %s: %s errors",
        get_request_id(),
        request.url.path,
        len(errors),
    )

    error_response = build_validation_error_response(
        message="Request validation failed",
        detail=f"{len(errors)} validation error(s)",
        status_code=status.HTTP_400_BAD_REQUEST,
        path=str(request.url.path),
        errors=errors,
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_response.model_dump(mode="json"),
    )


@app.exception_handler(FavoritesError)
async def favorites_exception_handler(request: Request, exc: FavoritesError):
    """Render synchronizer failures with the status their category dictates."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "%s for request %s to %s: %s",
        type(exc).__name__,
        get_request_id(),
        request.url.path,
        exc.message,
    )

    error_response = build_favorites_error_response(exc, path=str(request.url.path))

    return JSONResponse(
        status_code=exc.status_code,
        content=error_response.model_dump(mode="json"),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Handle all other unhandled exceptions."""
    logger.exception(
        "Unhandled exception for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        type(exc).__name__,
    )

    error_response = build_error_response(
        error_type=ErrorType.INTERNAL_ERROR,
        message=str(exc) or "Internal server error",
        detail=f"An unexpected error occurred: {type(exc).__name__}",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        path=str(request.url.path),
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response.model_dump(mode="json"),
    )


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    """Simple health endpoint for readiness checks."""
    return {"status": "ok"}


app.include_router(favorites.router, prefix="/api", tags=["favorites"])
