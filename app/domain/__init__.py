"""Domain layer - Entities, value objects, state machines, domain events.

This module exports the core domain building blocks of the storefront:

- **Entities**: Objects with identity (StockCounter, Cart, Order)
- **Value Objects**: Immutable objects compared by value (Money, OrderNumber, typed IDs)
- **State Machines**: Order fulfilment and payment status
- **Domain Events**: Facts recorded by the aggregates
- **Exceptions**: Domain-specific errors with stable error codes

Example usage:
    from app.domain import Cart, Money, ProductSnapshot

    cart = Cart(id=user_id)
    cart.add_item(
        ProductSnapshot(
            product_id=product_id,
            name="Widget",
            price=Money.from_decimal(Decimal("10.00")),
            is_active=True,
            stock_quantity=5,
        ),
        quantity=2,
    )
    print(cart.subtotal())  # $20.00 USD
"""

# Base classes
from app.domain.base import AggregateRoot, DomainEvent, Entity, ValueObject

# Entities
from app.domain.entities import Cart, CartItem, Order, OrderItem, StockCounter

# Events
from app.domain.events import (
    CartCleared,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
    OrderCancelled,
    OrderCreated,
    OrderPaymentStatusChanged,
    OrderStatusChanged,
    StockReleased,
    StockReserved,
)

# Exceptions
from app.domain.exceptions import (
    CartEmptyError,
    CartError,
    CartItemNotFoundError,
    CurrencyMismatchError,
    DomainError,
    InsufficientStockError,
    InvalidQuantityError,
    InventoryError,
    MoneyError,
    NegativeMoneyError,
    OrderError,
    OrderNotCancellableError,
    OrderNotFoundError,
    OrderNumberCollisionError,
    ProductNotFoundError,
    ProductUnavailableError,
    StorageCommitFailedError,
    StorageError,
)

# State machines
from app.domain.state_machines import OrderStatus, PaymentStatus

# Value objects
from app.domain.value_objects import (
    CartItemId,
    Money,
    OrderId,
    OrderItemId,
    OrderNumber,
    ProductSnapshot,
)

__all__ = [
    # Base
    "AggregateRoot",
    "DomainEvent",
    "Entity",
    "ValueObject",
    # Entities
    "Cart",
    "CartItem",
    "Order",
    "OrderItem",
    "StockCounter",
    # Events
    "CartCleared",
    "CartItemAdded",
    "CartItemQuantityUpdated",
    "CartItemRemoved",
    "OrderCancelled",
    "OrderCreated",
    "OrderPaymentStatusChanged",
    "OrderStatusChanged",
    "StockReleased",
    "StockReserved",
    # Exceptions
    "CartEmptyError",
    "CartError",
    "CartItemNotFoundError",
    "CurrencyMismatchError",
    "DomainError",
    "InsufficientStockError",
    "InvalidQuantityError",
    "InventoryError",
    "MoneyError",
    "NegativeMoneyError",
    "OrderError",
    "OrderNotCancellableError",
    "OrderNotFoundError",
    "OrderNumberCollisionError",
    "ProductNotFoundError",
    "ProductUnavailableError",
    "StorageCommitFailedError",
    "StorageError",
    # State machines
    "OrderStatus",
    "PaymentStatus",
    # Value objects
    "CartItemId",
    "Money",
    "OrderId",
    "OrderItemId",
    "OrderNumber",
    "ProductSnapshot",
]
