"""API schemas for the storefront API.

Pydantic models for request/response validation and serialization.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from app.domain.state_machines import OrderStatus, PaymentStatus
from app.domain.value_objects import Money


# ============================================================================
# Common Schemas
# ============================================================================


class PriceSchema(BaseModel):
    """Price representation."""

    amount: int = Field(..., description="Amount in smallest currency unit (cents)")
    currency: str = Field(default="USD", description="ISO 4217 currency code")

    @classmethod
    def from_money(cls, money: Money) -> "PriceSchema":
        return cls(amount=money.amount_cents, currency=money.currency)


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | list[Any] = Field(
        default_factory=dict, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class PaginatedResponse(BaseModel):
    """Base paginated response."""

    total: int = Field(..., description="Total number of items")
    page: int = Field(..., description="Current page number")
    page_size: int = Field(..., description="Items per page")
    has_more: bool = Field(..., description="Whether there are more pages")


class CountResponse(BaseModel):
    """A single count."""

    count: int = Field(..., ge=0, description="Number of matching items")


# ============================================================================
# Product Schemas
# ============================================================================


class ProductResponse(BaseModel):
    """Catalog product with its current stock."""

    id: UUID = Field(..., description="Product ID")
    name: str = Field(..., description="Product name")
    sku: str | None = Field(default=None, description="Stock keeping unit")
    price: PriceSchema = Field(..., description="Current unit price")
    stock_quantity: int = Field(..., ge=0, description="Units in stock")
    is_active: bool = Field(..., description="Whether the product can be sold")


# ============================================================================
# Cart Schemas
# ============================================================================


class CartItemAddRequest(BaseModel):
    """Request to add a product to a cart."""

    product_id: UUID = Field(..., description="Product to add")
    quantity: int = Field(default=1, description="Units to add (at least 1)")


class CartItemUpdateRequest(BaseModel):
    """Request to replace a cart line's quantity."""

    quantity: int = Field(..., description="New quantity; 0 or less removes the line")


class CartItemSchema(BaseModel):
    """Line in a cart."""

    id: str = Field(..., description="Cart line ID")
    product_id: UUID = Field(..., description="Product ID")
    product_name: str = Field(..., description="Product name")
    sku: str | None = Field(default=None, description="Product SKU")
    quantity: int = Field(..., ge=1, description="Units")
    unit_price: PriceSchema = Field(..., description="Unit price snapshot")
    line_total: PriceSchema = Field(..., description="Line total")
    added_at: datetime = Field(..., description="When the line was created")


class CartResponse(BaseModel):
    """Cart contents and totals."""

    user_id: UUID = Field(..., description="Cart owner")
    items: list[CartItemSchema] = Field(default_factory=list, description="Cart lines")
    subtotal: PriceSchema = Field(..., description="Sum of line totals")
    item_count: int = Field(..., ge=0, description="Total units in the cart")


class CartTotalResponse(BaseModel):
    """Cart subtotal."""

    user_id: UUID = Field(..., description="Cart owner")
    total: PriceSchema = Field(..., description="Sum of line totals")


class CartValidationResponse(BaseModel):
    """Advisory stock validation of a cart."""

    user_id: UUID = Field(..., description="Cart owner")
    valid: bool = Field(..., description="Whether every line is currently in stock")


# ============================================================================
# Order Schemas
# ============================================================================


class OrderCreateRequest(BaseModel):
    """Request to turn a user's cart into an order."""

    user_id: UUID = Field(..., description="Cart owner")
    shipping_address: str = Field(..., min_length=1, description="Shipping address")
    billing_address: str = Field(..., min_length=1, description="Billing address")
    payment_method: str = Field(..., min_length=1, description="Payment method")
    notes: str | None = Field(default=None, max_length=1000, description="Order notes")


class OrderStatusUpdateRequest(BaseModel):
    """Request to overwrite an order's status."""

    status: OrderStatus = Field(..., description="New order status")


class OrderPaymentStatusUpdateRequest(BaseModel):
    """Request to overwrite an order's payment status."""

    payment_status: PaymentStatus = Field(..., description="New payment status")


class OrderItemSchema(BaseModel):
    """Item in an order."""

    id: str = Field(..., description="Order line ID")
    product_id: UUID = Field(..., description="Product ID")
    product_name: str = Field(..., description="Product name at time of order")
    sku: str | None = Field(default=None, description="Product SKU")
    quantity: int = Field(..., ge=1, description="Quantity ordered")
    unit_price: PriceSchema = Field(..., description="Unit price at time of order")
    total_price: PriceSchema = Field(..., description="Line total")


class OrderResponse(BaseModel):
    """Order details response."""

    id: str = Field(..., description="Order ID")
    order_number: str = Field(..., description="Human-readable order number")
    user_id: UUID = Field(..., description="Ordering user")
    status: OrderStatus = Field(..., description="Current order status")
    payment_status: PaymentStatus = Field(..., description="Current payment status")
    allowed_transitions: list[OrderStatus] = Field(
        default_factory=list, description="Next statuses in the regular lifecycle"
    )
    can_be_cancelled: bool = Field(..., description="Whether cancel would succeed")
    total_amount: PriceSchema = Field(..., description="Order total")
    item_count: int = Field(..., description="Total units ordered")
    items: list[OrderItemSchema] = Field(..., description="Order items")
    shipping_address: str = Field(..., description="Shipping address")
    billing_address: str = Field(..., description="Billing address")
    payment_method: str = Field(..., description="Payment method")
    notes: str | None = Field(default=None, description="Order notes")
    created_at: datetime = Field(..., description="When order was created")
    updated_at: datetime = Field(..., description="When order was last updated")


class OrderSummarySchema(BaseModel):
    """Order summary for listings."""

    id: str = Field(..., description="Order ID")
    order_number: str = Field(..., description="Human-readable order number")
    user_id: UUID = Field(..., description="Ordering user")
    status: OrderStatus = Field(..., description="Current status")
    payment_status: PaymentStatus = Field(..., description="Current payment status")
    total_amount: PriceSchema = Field(..., description="Order total")
    item_count: int = Field(..., description="Number of units")
    created_at: datetime = Field(..., description="When created")


class OrdersListResponse(PaginatedResponse):
    """Paginated list of orders."""

    items: list[OrderSummarySchema] = Field(..., description="List of orders")
