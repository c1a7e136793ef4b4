"""Product API endpoints.

- GET /products/{id} - product with current stock
- PATCH /products/{id}/stock?quantity=<delta> - add or remove stock
- PATCH /products/{id}/deactivate - stop selling a product
- PATCH /products/{id}/activate - resume selling a product
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from app.api.schemas import ErrorResponse, PriceSchema, ProductResponse
from app.catalog.service import CatalogService, get_catalog_service
from app.domain.value_objects import ProductSnapshot

router = APIRouter(prefix="/products", tags=["Products"])


def get_service(request: Request) -> CatalogService:
    """Get catalog service with request ID."""
    request_id = getattr(request.state, "request_id", None)
    return get_catalog_service(request_id=request_id)


def product_to_response(product: ProductSnapshot) -> ProductResponse:
    """Convert ProductSnapshot to ProductResponse."""
    return ProductResponse(
        id=product.product_id,
        name=product.name,
        sku=product.sku,
        price=PriceSchema.from_money(product.price),
        stock_quantity=product.stock_quantity,
        is_active=product.is_active,
    )


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get product",
)
async def get_product(
    product_id: UUID,
    service: Annotated[CatalogService, Depends(get_service)],
) -> ProductResponse:
    return product_to_response(await service.get_product(product_id))


@router.patch(
    "/{product_id}/stock",
    response_model=ProductResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Zero adjustment"},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse, "description": "Not enough stock to remove"},
    },
    summary="Adjust stock",
    description=(
        "Add (positive quantity) or remove (negative quantity) stock. "
        "Removal never takes stock below zero."
    ),
)
async def adjust_stock(
    product_id: UUID,
    service: Annotated[CatalogService, Depends(get_service)],
    quantity: int = Query(..., description="Signed stock delta"),
) -> ProductResponse:
    return product_to_response(await service.adjust_stock(product_id, quantity))


@router.patch(
    "/{product_id}/deactivate",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Deactivate product",
    description="Stop selling the product. Existing cart lines stay but cannot be checked out.",
)
async def deactivate_product(
    product_id: UUID,
    service: Annotated[CatalogService, Depends(get_service)],
) -> ProductResponse:
    return product_to_response(await service.set_active(product_id, False))


@router.patch(
    "/{product_id}/activate",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Activate product",
)
async def activate_product(
    product_id: UUID,
    service: Annotated[CatalogService, Depends(get_service)],
) -> ProductResponse:
    return product_to_response(await service.set_active(product_id, True))
