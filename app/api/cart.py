"""Cart API endpoints.

Provides endpoints for a user's shopping cart:
- GET /cart/{user_id} - cart contents, subtotal and item count
- POST /cart/{user_id}/items - add a product
- PUT /cart/{user_id}/items/{product_id} - replace a line's quantity
- DELETE /cart/{user_id}/items/{product_id} - remove a line
- DELETE /cart/{user_id} - clear the cart
- GET /cart/{user_id}/total, /count, /validate - read-side helpers
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from app.api.schemas import (
    CartItemAddRequest,
    CartItemSchema,
    CartItemUpdateRequest,
    CartResponse,
    CartTotalResponse,
    CartValidationResponse,
    CountResponse,
    ErrorResponse,
    PriceSchema,
)
from app.application.cart_service import CartService, CartSummary, get_cart_service
from app.domain.entities import CartItem

router = APIRouter(prefix="/cart", tags=["Cart"])


# ============================================================================
# Dependencies
# ============================================================================


def get_service(request: Request) -> CartService:
    """Get cart service with request ID."""
    request_id = getattr(request.state, "request_id", None)
    return get_cart_service(request_id=request_id)


CartServiceDep = Annotated[CartService, Depends(get_service)]


# ============================================================================
# Converters
# ============================================================================


def cart_item_to_schema(item: CartItem) -> CartItemSchema:
    """Convert CartItem to CartItemSchema."""
    return CartItemSchema(
        id=str(item.id),
        product_id=item.product_id,
        product_name=item.product_name,
        sku=item.sku,
        quantity=item.quantity,
        unit_price=PriceSchema.from_money(item.unit_price),
        line_total=PriceSchema.from_money(item.line_total),
        added_at=item.added_at,
    )


def summary_to_response(summary: CartSummary) -> CartResponse:
    """Convert CartSummary to CartResponse."""
    return CartResponse(
        user_id=summary.user_id,
        items=[cart_item_to_schema(item) for item in summary.items],
        subtotal=PriceSchema.from_money(summary.subtotal),
        item_count=summary.item_count,
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "/{user_id}",
    response_model=CartResponse,
    summary="Get cart",
    description="Get the user's cart. An empty cart is created on first access.",
)
async def get_cart(user_id: UUID, service: CartServiceDep) -> CartResponse:
    return summary_to_response(service.summarize(user_id))


@router.post(
    "/{user_id}/items",
    response_model=CartResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid quantity"},
        404: {"model": ErrorResponse, "description": "Product not found"},
        409: {"model": ErrorResponse, "description": "Product unavailable or insufficient stock"},
    },
    summary="Add item to cart",
    description="Add units of a product. An existing line keeps its price snapshot.",
)
async def add_item(
    user_id: UUID,
    body: CartItemAddRequest,
    service: CartServiceDep,
) -> CartResponse:
    await service.add_item(user_id, body.product_id, body.quantity)
    return summary_to_response(service.summarize(user_id))


@router.put(
    "/{user_id}/items/{product_id}",
    response_model=CartResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Product not in cart"},
        409: {"model": ErrorResponse, "description": "Insufficient stock"},
    },
    summary="Update cart item",
    description="Replace a line's quantity. A quantity of 0 or less removes the line.",
)
async def update_item(
    user_id: UUID,
    product_id: UUID,
    body: CartItemUpdateRequest,
    service: CartServiceDep,
) -> CartResponse:
    await service.update_item(user_id, product_id, body.quantity)
    return summary_to_response(service.summarize(user_id))


@router.delete(
    "/{user_id}/items/{product_id}",
    response_model=CartResponse,
    summary="Remove cart item",
)
async def remove_item(user_id: UUID, product_id: UUID, service: CartServiceDep) -> CartResponse:
    service.remove_item(user_id, product_id)
    return summary_to_response(service.summarize(user_id))


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Clear cart",
)
async def clear_cart(user_id: UUID, service: CartServiceDep) -> None:
    service.clear(user_id)


@router.get("/{user_id}/total", response_model=CartTotalResponse, summary="Get cart total")
async def get_cart_total(user_id: UUID, service: CartServiceDep) -> CartTotalResponse:
    return CartTotalResponse(
        user_id=user_id,
        total=PriceSchema.from_money(service.get_total(user_id)),
    )


@router.get("/{user_id}/count", response_model=CountResponse, summary="Get cart item count")
async def get_cart_count(user_id: UUID, service: CartServiceDep) -> CountResponse:
    return CountResponse(count=service.get_item_count(user_id))


@router.get(
    "/{user_id}/validate",
    response_model=CartValidationResponse,
    summary="Validate cart stock",
    description="Advisory check that every line is currently in stock. Reserves nothing.",
)
async def validate_cart(user_id: UUID, service: CartServiceDep) -> CartValidationResponse:
    return CartValidationResponse(user_id=user_id, valid=await service.validate_stock(user_id))
