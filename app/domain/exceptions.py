"""Domain exceptions.

Every business rule violation in the storefront core is a DomainError
subclass carrying a machine-readable ``error_code`` and a ``details``
dictionary. The HTTP layer maps codes to status codes; nothing below it
knows about HTTP.
"""

from typing import Any, ClassVar


class DomainError(Exception):
    """Base class for all domain exceptions.

    Attributes:
        error_code: Stable machine-readable code for this kind of failure.
        message: Human-readable error message.
        details: Additional error context.
    """

    error_code: ClassVar[str] = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Product / Inventory Errors
# ============================================================================


class InventoryError(DomainError):
    """Base class for product and stock errors."""

    pass


class ProductNotFoundError(InventoryError):
    """Raised when a product is unknown to the catalog or the ledger."""

    error_code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: str) -> None:
        super().__init__(
            f"Product not found: {product_id}",
            details={"product_id": product_id},
        )


class ProductUnavailableError(InventoryError):
    """Raised when a product is inactive or has no stock left."""

    error_code = "PRODUCT_UNAVAILABLE"

    def __init__(self, product_id: str, reason: str = "Product is not available") -> None:
        """Initialize product unavailable error.

        Args:
            product_id: ID of the product.
            reason: Why the product cannot be sold (inactive, out of stock).
        """
        super().__init__(
            f"Product {product_id} is unavailable: {reason}",
            details={"product_id": product_id, "reason": reason},
        )


class InsufficientStockError(InventoryError):
    """Raised when the requested quantity exceeds the available stock."""

    error_code = "INSUFFICIENT_STOCK"

    def __init__(self, product_id: str, requested: int, available: int | None = None) -> None:
        """Initialize insufficient stock error.

        Args:
            product_id: ID of the product.
            requested: Quantity that was requested.
            available: Stock observed at the time of the failure, if known.
        """
        super().__init__(
            f"Insufficient stock for product {product_id}: "
            f"requested={requested}, available={available}",
            details={
                "product_id": product_id,
                "requested": requested,
                "available": available,
            },
        )


# ============================================================================
# Cart Errors
# ============================================================================


class CartError(DomainError):
    """Base class for cart-related errors."""

    pass


class CartItemNotFoundError(CartError):
    """Raised when a cart has no line for the given product."""

    error_code = "CART_ITEM_NOT_FOUND"

    def __init__(self, user_id: str, product_id: str) -> None:
        super().__init__(
            f"Product {product_id} is not in the cart of user {user_id}",
            details={"user_id": user_id, "product_id": product_id},
        )


class CartEmptyError(CartError):
    """Raised when trying to check out an empty cart."""

    error_code = "EMPTY_CART"

    def __init__(self, user_id: str) -> None:
        super().__init__(
            f"Cannot check out empty cart of user {user_id}",
            details={"user_id": user_id},
        )


class InvalidQuantityError(CartError):
    """Raised when a quantity is not a positive integer."""

    error_code = "INVALID_QUANTITY"

    def __init__(self, quantity: int, reason: str = "Quantity must be at least 1") -> None:
        """Initialize invalid quantity error.

        Args:
            quantity: The invalid quantity value.
            reason: Explanation of why the quantity is invalid.
        """
        super().__init__(
            f"Invalid quantity {quantity}: {reason}",
            details={"quantity": quantity, "reason": reason},
        )


# ============================================================================
# Order Errors
# ============================================================================


class OrderError(DomainError):
    """Base class for order-related errors."""

    pass


class OrderNotFoundError(OrderError):
    """Raised when an order lookup misses."""

    error_code = "ORDER_NOT_FOUND"

    def __init__(self, order_ref: str) -> None:
        super().__init__(
            f"Order not found: {order_ref}",
            details={"order": order_ref},
        )


class OrderNotCancellableError(OrderError):
    """Raised when trying to cancel an order that cannot be cancelled."""

    error_code = "ORDER_NOT_CANCELLABLE"

    def __init__(self, order_id: str, current_status: str) -> None:
        """Initialize order not cancellable error.

        Args:
            order_id: ID of the order.
            current_status: Current status of the order.
        """
        super().__init__(
            f"Order {order_id} cannot be cancelled in status '{current_status}'",
            details={"order_id": order_id, "current_status": current_status},
        )


class OrderNumberCollisionError(OrderError):
    """Raised when no unique order number could be claimed.

    Individual collisions are retried; this surfaces only once the retry
    budget is spent.
    """

    error_code = "ORDER_NUMBER_COLLISION"

    def __init__(self, attempts: int) -> None:
        super().__init__(
            f"Could not allocate a unique order number after {attempts} attempts",
            details={"attempts": attempts},
        )


# ============================================================================
# Storage Errors
# ============================================================================


class StorageError(DomainError):
    """Base class for failures of the transaction store."""

    pass


class StorageCommitFailedError(StorageError):
    """Raised when a unit of work could not be committed.

    The unit of work has been fully rolled back by the time this reaches
    the caller.
    """

    error_code = "STORAGE_COMMIT_FAILED"

    def __init__(self, transaction_id: str, kind: str, reason: str) -> None:
        """Initialize commit failure error.

        Args:
            transaction_id: ID of the rolled back transaction.
            kind: Transaction kind (e.g. "checkout", "order.cancel").
            reason: Underlying failure description.
        """
        super().__init__(
            f"Transaction {transaction_id} ({kind}) could not be committed: {reason}",
            details={"transaction_id": transaction_id, "kind": kind, "reason": reason},
        )


# ============================================================================
# Money Errors
# ============================================================================


class MoneyError(DomainError):
    """Base class for money-related errors."""

    pass


class CurrencyMismatchError(MoneyError):
    """Raised when combining money amounts in different currencies."""

    error_code = "CURRENCY_MISMATCH"

    def __init__(self, currency1: str, currency2: str) -> None:
        super().__init__(
            f"Cannot combine money with different currencies: {currency1} and {currency2}",
            details={"currency1": currency1, "currency2": currency2},
        )


class NegativeMoneyError(MoneyError):
    """Raised when creating money with a negative amount."""

    error_code = "NEGATIVE_MONEY"

    def __init__(self, amount: int) -> None:
        super().__init__(
            f"Money amount cannot be negative: {amount}",
            details={"amount": amount},
        )
