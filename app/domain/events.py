"""Domain events for the storefront.

Domain events represent significant occurrences in the domain. Events
raised inside a unit of work (checkout, cancellation, stock adjustment)
are written to the transaction journal when it commits; cart events are
logged by the cart service.
"""

from dataclasses import dataclass
from typing import Any, ClassVar

from app.domain.base import DomainEvent


# ============================================================================
# Cart Events
# ============================================================================


@dataclass(frozen=True)
class CartItemAdded(DomainEvent):
    """Event raised when a product is added to a cart.

    ``quantity`` is the quantity added, ``line_quantity`` the line's
    quantity afterwards.
    """

    event_type: ClassVar[str] = "cart.item_added"

    user_id: str = ""
    product_id: str = ""
    quantity: int = 0
    line_quantity: int = 0
    unit_price_cents: int = 0
    currency: str = "USD"

    def _payload(self) -> dict[str, Any]:
        """Get event-specific payload."""
        return {
            "user_id": self.user_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "line_quantity": self.line_quantity,
            "unit_price_cents": self.unit_price_cents,
            "currency": self.currency,
        }


@dataclass(frozen=True)
class CartItemQuantityUpdated(DomainEvent):
    """Event raised when a cart line quantity is replaced."""

    event_type: ClassVar[str] = "cart.item_quantity_updated"

    user_id: str = ""
    product_id: str = ""
    old_quantity: int = 0
    new_quantity: int = 0

    def _payload(self) -> dict[str, Any]:
        """Get event-specific payload."""
        return {
            "user_id": self.user_id,
            "product_id": self.product_id,
            "old_quantity": self.old_quantity,
            "new_quantity": self.new_quantity,
        }


@dataclass(frozen=True)
class CartItemRemoved(DomainEvent):
    """Event raised when a line is removed from a cart."""

    event_type: ClassVar[str] = "cart.item_removed"

    user_id: str = ""
    product_id: str = ""
    quantity: int = 0

    def _payload(self) -> dict[str, Any]:
        """Get event-specific payload."""
        return {
            "user_id": self.user_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
        }


@dataclass(frozen=True)
class CartCleared(DomainEvent):
    """Event raised when all lines are removed from a cart."""

    event_type: ClassVar[str] = "cart.cleared"

    user_id: str = ""
    items_removed: int = 0

    def _payload(self) -> dict[str, Any]:
        """Get event-specific payload."""
        return {"user_id": self.user_id, "items_removed": self.items_removed}


# ============================================================================
# Inventory Events
# ============================================================================


@dataclass(frozen=True)
class StockReserved(DomainEvent):
    """Event raised when stock is conditionally decremented."""

    event_type: ClassVar[str] = "inventory.stock_reserved"

    product_id: str = ""
    quantity: int = 0

    def _payload(self) -> dict[str, Any]:
        """Get event-specific payload."""
        return {"product_id": self.product_id, "quantity": self.quantity}


@dataclass(frozen=True)
class StockReleased(DomainEvent):
    """Event raised when stock is returned to a product."""

    event_type: ClassVar[str] = "inventory.stock_released"

    product_id: str = ""
    quantity: int = 0

    def _payload(self) -> dict[str, Any]:
        """Get event-specific payload."""
        return {"product_id": self.product_id, "quantity": self.quantity}


# ============================================================================
# Order Events
# ============================================================================


@dataclass(frozen=True)
class OrderCreated(DomainEvent):
    """Event raised when checkout creates an order."""

    event_type: ClassVar[str] = "order.created"

    order_number: str = ""
    user_id: str = ""
    total_cents: int = 0
    currency: str = "USD"
    item_count: int = 0

    def _payload(self) -> dict[str, Any]:
        """Get event-specific payload."""
        return {
            "order_number": self.order_number,
            "user_id": self.user_id,
            "total_cents": self.total_cents,
            "currency": self.currency,
            "item_count": self.item_count,
        }


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Event raised when an order's fulfilment status is overwritten."""

    event_type: ClassVar[str] = "order.status_changed"

    old_status: str = ""
    new_status: str = ""

    def _payload(self) -> dict[str, Any]:
        """Get event-specific payload."""
        return {"old_status": self.old_status, "new_status": self.new_status}


@dataclass(frozen=True)
class OrderPaymentStatusChanged(DomainEvent):
    """Event raised when an order's payment status is overwritten."""

    event_type: ClassVar[str] = "order.payment_status_changed"

    old_payment_status: str = ""
    new_payment_status: str = ""

    def _payload(self) -> dict[str, Any]:
        """Get event-specific payload."""
        return {
            "old_payment_status": self.old_payment_status,
            "new_payment_status": self.new_payment_status,
        }


@dataclass(frozen=True)
class OrderCancelled(DomainEvent):
    """Event raised when an order is cancelled and its stock released."""

    event_type: ClassVar[str] = "order.cancelled"

    order_number: str = ""
    previous_status: str = ""
    released: tuple[tuple[str, int], ...] = ()

    def _payload(self) -> dict[str, Any]:
        """Get event-specific payload."""
        return {
            "order_number": self.order_number,
            "previous_status": self.previous_status,
            "released": [
                {"product_id": product_id, "quantity": quantity}
                for product_id, quantity in self.released
            ],
        }
