"""Cart application service.

Manages each user's cart:
- Lazy cart creation on first access
- Adding, updating and removing lines with advisory stock checks
- Totals, item counts and stock validation

Stock checks here read the ledger without reserving anything. They keep
obviously impossible carts out, but only checkout's reservation decides
whether the stock is really there. Concurrent edits of the same cart are
last-write-wins.
"""

from dataclasses import dataclass
from uuid import UUID

import structlog

from app.application.inventory_ledger import InventoryLedger, get_inventory_ledger
from app.catalog.service import CatalogService
from app.domain.entities import Cart, CartItem
from app.domain.exceptions import (
    CartItemNotFoundError,
    InsufficientStockError,
    InvalidQuantityError,
    ProductUnavailableError,
)
from app.domain.value_objects import Money
from app.infrastructure.config import settings

logger = structlog.get_logger()


@dataclass
class CartSummary:
    """Read model of a cart."""

    user_id: UUID
    items: list[CartItem]
    subtotal: Money
    item_count: int


# ============================================================================
# In-Memory Cart Repository
# ============================================================================


class CartRepository:
    """In-memory repository for carts, one per user.

    In production, this would be replaced with database persistence.
    """

    def __init__(self) -> None:
        self._carts: dict[UUID, Cart] = {}

    def get(self, user_id: UUID) -> Cart | None:
        """Get a user's cart if it exists."""
        return self._carts.get(user_id)

    def get_or_create(self, user_id: UUID) -> Cart:
        """Get a user's cart, creating an empty one on first access."""
        cart = self._carts.get(user_id)
        if cart is None:
            cart = self._carts[user_id] = Cart(id=user_id)
            logger.debug("Cart created", user_id=str(user_id))
        return cart


# Global repository instance
_cart_repo: CartRepository | None = None


def get_cart_repository() -> CartRepository:
    """Get cart repository singleton."""
    global _cart_repo
    if _cart_repo is None:
        _cart_repo = CartRepository()
    return _cart_repo


def reset_cart_repository() -> None:
    """Reset cart repository (for testing)."""
    global _cart_repo
    _cart_repo = CartRepository()


# ============================================================================
# Cart Service
# ============================================================================


class CartService:
    """Application service for managing carts."""

    def __init__(
        self,
        cart_repo: CartRepository | None = None,
        catalog: CatalogService | None = None,
        ledger: InventoryLedger | None = None,
        request_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            cart_repo: Cart repository.
            catalog: Product catalog for prices and observed stock.
            ledger: Inventory ledger for availability checks.
            request_id: Request ID for correlation.
        """
        self.cart_repo = cart_repo or get_cart_repository()
        self.ledger = ledger or get_inventory_ledger()
        self.catalog = catalog or CatalogService(ledger=self.ledger, request_id=request_id)
        self.request_id = request_id

    def get_cart(self, user_id: UUID) -> Cart:
        """Get a user's cart (created empty on first access)."""
        return self.cart_repo.get_or_create(user_id)

    async def add_item(self, user_id: UUID, product_id: UUID, quantity: int) -> Cart:
        """Add units of a product to a user's cart.

        Args:
            user_id: Cart owner.
            product_id: Product to add.
            quantity: Units to add, at least 1.

        Returns:
            The updated cart.

        Raises:
            InvalidQuantityError: If quantity is less than 1.
            ProductNotFoundError: If the product is unknown.
            ProductUnavailableError: If the product is inactive or out of stock.
            InsufficientStockError: If the line would exceed observed stock.
        """
        if quantity < 1:
            raise InvalidQuantityError(quantity)

        product = await self.catalog.get_product(product_id)
        if not product.is_active:
            raise ProductUnavailableError(str(product_id), "Product is inactive")
        if product.stock_quantity == 0:
            raise ProductUnavailableError(str(product_id), "Product is out of stock")

        cart = self.get_cart(user_id)
        existing = cart.get_item_by_product(product_id)
        requested = quantity + (existing.quantity if existing else 0)
        if requested > product.stock_quantity:
            raise InsufficientStockError(str(product_id), requested, product.stock_quantity)

        cart.add_item(product, quantity)
        self._log_events(cart)
        return cart

    async def update_item(self, user_id: UUID, product_id: UUID, quantity: int) -> Cart:
        """Replace a line's quantity; zero or less removes the line.

        Args:
            user_id: Cart owner.
            product_id: Product whose line to update.
            quantity: New quantity.

        Returns:
            The updated cart.

        Raises:
            CartItemNotFoundError: If the product is not in the cart.
            InsufficientStockError: If quantity exceeds observed stock.
        """
        cart = self.get_cart(user_id)
        if cart.get_item_by_product(product_id) is None:
            raise CartItemNotFoundError(str(user_id), str(product_id))

        if quantity > 0:
            counter = await self.ledger.get_counter(product_id)
            available = counter.stock_quantity if counter else 0
            if quantity > available:
                raise InsufficientStockError(str(product_id), quantity, available)

        cart.set_item_quantity(product_id, quantity)
        self._log_events(cart)
        return cart

    def remove_item(self, user_id: UUID, product_id: UUID) -> Cart:
        """Remove a product's line; no-op when it is not in the cart."""
        cart = self.get_cart(user_id)
        cart.remove_item(product_id)
        self._log_events(cart)
        return cart

    def clear(self, user_id: UUID) -> Cart:
        """Remove every line from a user's cart."""
        cart = self.get_cart(user_id)
        cart.clear()
        self._log_events(cart)
        return cart

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def summarize(self, user_id: UUID) -> CartSummary:
        """Get lines, subtotal and item count of a user's cart."""
        cart = self.get_cart(user_id)
        return CartSummary(
            user_id=user_id,
            items=list(cart.items),
            subtotal=cart.subtotal(settings.currency),
            item_count=cart.item_count,
        )

    def get_total(self, user_id: UUID) -> Money:
        return self.get_cart(user_id).subtotal(settings.currency)

    def get_item_count(self, user_id: UUID) -> int:
        """Get total units in the cart (sum of line quantities)."""
        return self.get_cart(user_id).item_count

    async def validate_stock(self, user_id: UUID) -> bool:
        """Advisory check that every line could be fulfilled right now.

        Returns:
            True if every product is active with enough observed stock.
        """
        cart = self.get_cart(user_id)
        for item in list(cart.items):
            if not await self.ledger.check_available(item.product_id, item.quantity):
                logger.info(
                    "Cart line fails stock validation",
                    user_id=str(user_id),
                    product_id=str(item.product_id),
                    quantity=item.quantity,
                    request_id=self.request_id,
                )
                return False
        return True

    def _log_events(self, cart: Cart) -> None:
        for event in cart.collect_events():
            logger.info(
                "Cart changed",
                event_type=event.event_type,
                user_id=str(cart.user_id),
                payload=event.to_dict()["payload"],
                request_id=self.request_id,
            )


def get_cart_service(request_id: str | None = None) -> CartService:
    """Get cart service instance.

    Args:
        request_id: Request ID for correlation.

    Returns:
        CartService instance.
    """
    return CartService(request_id=request_id)
