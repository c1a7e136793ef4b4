"""Order API endpoints.

Provides endpoints for checkout and order lifecycle management:
- POST /orders/create-from-cart - check out a user's cart
- GET /orders - list orders (paginated, optional status filter)
- GET /orders/{id}, /orders/{id}/items - order details
- GET /orders/number/{order_number} - lookup by order number
- GET /orders/user/{user_id}, /orders/user/{user_id}/count - a user's orders
- GET /orders/status/{status}/count - orders per status
- PATCH /orders/{id}/status, /orders/{id}/payment-status - status overwrites
- DELETE /orders/{id}/cancel - cancel and restore stock
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from app.api.schemas import (
    CountResponse,
    ErrorResponse,
    OrderCreateRequest,
    OrderItemSchema,
    OrderPaymentStatusUpdateRequest,
    OrderResponse,
    OrdersListResponse,
    OrderStatusUpdateRequest,
    OrderSummarySchema,
    PriceSchema,
)
from app.application.checkout_service import CheckoutService, get_checkout_service
from app.application.order_service import OrderService, get_order_service
from app.domain.entities import Order, OrderItem
from app.domain.state_machines import OrderStatus
from app.domain.value_objects import OrderId

router = APIRouter(prefix="/orders", tags=["Orders"])


# ============================================================================
# Dependencies
# ============================================================================


def get_service(request: Request) -> OrderService:
    """Get order service with request ID."""
    request_id = getattr(request.state, "request_id", None)
    return get_order_service(request_id=request_id)


def get_checkout(request: Request) -> CheckoutService:
    """Get checkout service with request ID."""
    request_id = getattr(request.state, "request_id", None)
    return get_checkout_service(request_id=request_id)


OrderServiceDep = Annotated[OrderService, Depends(get_service)]


# ============================================================================
# Converters
# ============================================================================


def order_item_to_schema(item: OrderItem) -> OrderItemSchema:
    """Convert OrderItem to OrderItemSchema."""
    return OrderItemSchema(
        id=str(item.id),
        product_id=item.product_id,
        product_name=item.product_name,
        sku=item.sku,
        quantity=item.quantity,
        unit_price=PriceSchema.from_money(item.unit_price),
        total_price=PriceSchema.from_money(item.total_price),
    )


def order_to_response(order: Order) -> OrderResponse:
    """Convert Order to OrderResponse."""
    return OrderResponse(
        id=str(order.id),
        order_number=str(order.order_number),
        user_id=order.user_id,
        status=order.status,
        payment_status=order.payment_status,
        allowed_transitions=order.status.allowed_transitions(),
        can_be_cancelled=order.status.can_be_cancelled() and not order.stock_released,
        total_amount=PriceSchema.from_money(order.total_amount),
        item_count=order.item_count,
        items=[order_item_to_schema(item) for item in order.items],
        shipping_address=order.shipping_address,
        billing_address=order.billing_address,
        payment_method=order.payment_method,
        notes=order.notes,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def order_to_summary(order: Order) -> OrderSummarySchema:
    """Convert Order to OrderSummarySchema."""
    return OrderSummarySchema(
        id=str(order.id),
        order_number=str(order.order_number),
        user_id=order.user_id,
        status=order.status,
        payment_status=order.payment_status,
        total_amount=PriceSchema.from_money(order.total_amount),
        item_count=order.item_count,
        created_at=order.created_at,
    )


# ============================================================================
# Checkout
# ============================================================================


@router.post(
    "/create-from-cart",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Cart is empty"},
        409: {"model": ErrorResponse, "description": "Insufficient stock or unavailable product"},
        500: {"model": ErrorResponse, "description": "Order could not be stored"},
    },
    summary="Create order from cart",
    description=(
        "Reserve stock for every cart line and create the order. "
        "Either everything succeeds or nothing changes."
    ),
)
async def create_order_from_cart(
    body: OrderCreateRequest,
    checkout: Annotated[CheckoutService, Depends(get_checkout)],
) -> OrderResponse:
    order = await checkout.checkout(
        user_id=body.user_id,
        shipping_address=body.shipping_address,
        billing_address=body.billing_address,
        payment_method=body.payment_method,
        notes=body.notes,
    )
    return order_to_response(order)


# ============================================================================
# Queries
# ============================================================================


@router.get(
    "",
    response_model=OrdersListResponse,
    summary="List orders",
    description="Get a paginated list of orders, newest first.",
)
async def list_orders(
    service: OrderServiceDep,
    page: int = Query(default=1, ge=1, description="Page number"),
    page_size: int = Query(default=20, ge=1, le=100, description="Items per page"),
    status: OrderStatus | None = Query(default=None, description="Filter by status"),
) -> OrdersListResponse:
    """List orders with pagination and filtering.

    Args:
        service: Order service.
        page: Page number (1-based).
        page_size: Items per page.
        status: Filter by order status.

    Returns:
        Paginated list of orders.
    """
    result = service.list_orders(page=page, page_size=page_size, status=status)

    return OrdersListResponse(
        items=[order_to_summary(order) for order in result.orders],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        has_more=(result.page * result.page_size) < result.total,
    )


@router.get(
    "/number/{order_number}",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get order by number",
)
async def get_order_by_number(order_number: str, service: OrderServiceDep) -> OrderResponse:
    return order_to_response(service.get_order_by_number(order_number))


@router.get(
    "/user/{user_id}",
    response_model=list[OrderSummarySchema],
    summary="List a user's orders",
)
async def list_user_orders(user_id: UUID, service: OrderServiceDep) -> list[OrderSummarySchema]:
    return [order_to_summary(order) for order in service.list_orders_for_user(user_id)]


@router.get(
    "/user/{user_id}/count",
    response_model=CountResponse,
    summary="Count a user's orders",
)
async def count_user_orders(user_id: UUID, service: OrderServiceDep) -> CountResponse:
    return CountResponse(count=service.count_orders_for_user(user_id))


@router.get(
    "/status/{order_status}/count",
    response_model=CountResponse,
    summary="Count orders in a status",
)
async def count_orders_by_status(
    order_status: OrderStatus, service: OrderServiceDep
) -> CountResponse:
    return CountResponse(count=service.count_orders_by_status(order_status))


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get order details",
)
async def get_order(order_id: UUID, service: OrderServiceDep) -> OrderResponse:
    return order_to_response(service.get_order(OrderId(order_id)))


@router.get(
    "/{order_id}/items",
    response_model=list[OrderItemSchema],
    responses={404: {"model": ErrorResponse}},
    summary="Get order items",
)
async def get_order_items(order_id: UUID, service: OrderServiceDep) -> list[OrderItemSchema]:
    return [order_item_to_schema(item) for item in service.get_order_items(OrderId(order_id))]


# ============================================================================
# Lifecycle
# ============================================================================


@router.patch(
    "/{order_id}/status",
    response_model=OrderResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse, "description": "Cancellation not allowed"},
    },
    summary="Update order status",
    description=(
        "Overwrite the order status. Setting 'cancelled' performs a full "
        "cancellation, including stock restoration."
    ),
)
async def update_order_status(
    order_id: UUID,
    body: OrderStatusUpdateRequest,
    service: OrderServiceDep,
) -> OrderResponse:
    order = await service.update_status(OrderId(order_id), body.status)
    return order_to_response(order)


@router.patch(
    "/{order_id}/payment-status",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Update payment status",
)
async def update_payment_status(
    order_id: UUID,
    body: OrderPaymentStatusUpdateRequest,
    service: OrderServiceDep,
) -> OrderResponse:
    order = await service.update_payment_status(OrderId(order_id), body.payment_status)
    return order_to_response(order)


@router.delete(
    "/{order_id}/cancel",
    response_model=OrderResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse, "description": "Order cannot be cancelled"},
    },
    summary="Cancel order",
    description="Cancel a pending or confirmed order and return its stock.",
)
async def cancel_order(order_id: UUID, service: OrderServiceDep) -> OrderResponse:
    """Cancel an order.

    Only pending or confirmed orders can be cancelled, and only once.

    Args:
        order_id: Order identifier.
        service: Order service.

    Returns:
        The cancelled order.
    """
    order = await service.cancel(OrderId(order_id))
    return order_to_response(order)
