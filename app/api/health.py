"""Health check endpoints.

Provides endpoints for monitoring service health and readiness.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from app.catalog.repository import get_product_repository
from app.infrastructure.config import settings
from app.infrastructure.unit_of_work import get_transaction_journal

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response schema."""

    status: str
    journal: str
    catalog_products: int


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check service health.

    Returns:
        Health status with service name and version.
    """
    return HealthResponse(
        status="healthy",
        service="storefront-api",
        version=settings.api_version,
    )


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check() -> ReadinessResponse:
    """Check if service is ready to accept requests.

    Returns:
        Readiness status with the active journal and catalog size.
    """
    return ReadinessResponse(
        status="ready",
        journal=type(get_transaction_journal()).__name__,
        catalog_products=len(get_product_repository()),
    )
