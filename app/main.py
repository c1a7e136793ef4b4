"""Storefront API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, exception handlers and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.cart import router as cart_router
from app.api.health import router as health_router
from app.api.middleware import setup_middleware
from app.api.orders import router as orders_router
from app.api.products import router as products_router
from app.catalog.service import get_catalog_service
from app.domain.exceptions import DomainError
from app.infrastructure.config import settings
from app.infrastructure.logging import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    # Startup
    configure_logging()
    logger.info(
        "Starting storefront API",
        version=settings.api_version,
        debug=settings.debug,
        currency=settings.currency,
    )

    if settings.seed_demo_catalog:
        seeded = await get_catalog_service().seed_demo_catalog()
        logger.info("Demo catalog ready", product_count=len(seeded))

    yield

    # Shutdown
    logger.info("Shutting down storefront API")


app = FastAPI(
    title="Storefront API",
    description="Cart, checkout and order lifecycle backend",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware (must be added before custom middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware (request ID, error handling)
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(cart_router)
app.include_router(orders_router)
app.include_router(products_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


STATUS_BY_ERROR_CODE: dict[str, int] = {
    # Lookups
    "PRODUCT_NOT_FOUND": 404,
    "CART_ITEM_NOT_FOUND": 404,
    "ORDER_NOT_FOUND": 404,
    # Conflicts with current stock or order state
    "PRODUCT_UNAVAILABLE": 409,
    "INSUFFICIENT_STOCK": 409,
    "ORDER_NOT_CANCELLABLE": 409,
    # Bad input
    "EMPTY_CART": 400,
    "INVALID_QUANTITY": 400,
    "CURRENCY_MISMATCH": 400,
    "NEGATIVE_MONEY": 400,
    # Server side, reported without internals
    "ORDER_NUMBER_COLLISION": 500,
    "STORAGE_COMMIT_FAILED": 500,
}


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Map domain errors to HTTP responses with the standard error body."""
    request_id = getattr(request.state, "request_id", None)
    status_code = STATUS_BY_ERROR_CODE.get(exc.error_code, 400)

    if status_code >= 500:
        logger.error(
            "Request failed",
            path=request.url.path,
            error_code=exc.error_code,
            error=exc.message,
        )
        message = "The request could not be completed, please retry"
        details: dict = {}
    else:
        message = exc.message
        details = exc.details

    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": exc.error_code,
            "message": message,
            "details": details,
            "request_id": request_id,
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", {})
    else:
        error_code = "ERROR"
        message = str(detail)
        details = {}

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details,
            "request_id": request_id,
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )

    return JSONResponse(
        status_code=500,
        content={
            "error_code": "INTERNAL_ERROR",
            "message": "An internal error occurred",
            "details": {},
            "request_id": request_id,
        },
    )
