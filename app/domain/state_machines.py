"""State machines for orders.

Orders move along two independent axes: fulfilment status and payment
status. The transition tables describe the intended lifecycle. Status
overwrites requested by operators are not validated against them. The one
guarded transition is cancellation, which restores stock.
"""

from enum import Enum


# ============================================================================
# Order Status
# ============================================================================


class OrderStatus(str, Enum):
    """Order fulfilment states.

    State diagram:
        PENDING ──────────────┬──────────────────────► CANCELLED
          │                   │
          │ confirm           │ cancel
          ▼                   │
        CONFIRMED ────────────┘
          │
          │ process
          ▼
        PROCESSING
          │
          │ ship
          ▼
        SHIPPED
          │
          │ deliver
          ▼
        DELIVERED ───────────────────────────────────► RETURNED
    """

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"

    def can_transition_to(self, target: "OrderStatus") -> bool:
        """Check if the lifecycle allows moving to target.

        Args:
            target: Target state.

        Returns:
            True if transition is part of the lifecycle.
        """
        return target in _ORDER_TRANSITIONS.get(self, set())

    def allowed_transitions(self) -> list["OrderStatus"]:
        """Get the lifecycle successors of this state."""
        return sorted(_ORDER_TRANSITIONS.get(self, set()), key=lambda s: s.value)

    def can_be_cancelled(self) -> bool:
        """Only orders nobody has started working on may be cancelled."""
        return self in {OrderStatus.PENDING, OrderStatus.CONFIRMED}

    def is_terminal(self) -> bool:
        """Check if no further lifecycle transitions exist."""
        return len(_ORDER_TRANSITIONS.get(self, set())) == 0


_ORDER_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: {OrderStatus.RETURNED},
    OrderStatus.CANCELLED: set(),
    OrderStatus.RETURNED: set(),
}


# ============================================================================
# Payment Status
# ============================================================================


class PaymentStatus(str, Enum):
    """Payment states, independent from fulfilment.

    State diagram:
        PENDING ──────────────────────────► FAILED
          │
          │ pay
          ▼
        PAID ───────────┬─────────────────► PARTIALLY_REFUNDED
          │             │
          │ refund      │ partial refund
          ▼             │
        REFUNDED ◄──────┘
    """

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"

    def can_transition_to(self, target: "PaymentStatus") -> bool:
        """Check if the payment lifecycle allows moving to target."""
        return target in _PAYMENT_TRANSITIONS.get(self, set())

    def allowed_transitions(self) -> list["PaymentStatus"]:
        """Get the lifecycle successors of this state."""
        return sorted(_PAYMENT_TRANSITIONS.get(self, set()), key=lambda s: s.value)

    def is_terminal(self) -> bool:
        """Check if no further payment transitions exist."""
        return len(_PAYMENT_TRANSITIONS.get(self, set())) == 0


_PAYMENT_TRANSITIONS: dict[PaymentStatus, set[PaymentStatus]] = {
    PaymentStatus.PENDING: {PaymentStatus.PAID, PaymentStatus.FAILED},
    PaymentStatus.PAID: {PaymentStatus.REFUNDED, PaymentStatus.PARTIALLY_REFUNDED},
    PaymentStatus.PARTIALLY_REFUNDED: {PaymentStatus.REFUNDED},
    PaymentStatus.REFUNDED: set(),
    PaymentStatus.FAILED: set(),
}

