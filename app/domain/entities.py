"""Domain entities for the storefront.

Entities are domain objects with identity that persists across state changes.
This module contains the stock counter entity and the two aggregates built on
top of it: Cart and Order.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime
from uuid import UUID

from app.domain.base import AggregateRoot, Entity, utcnow
from app.domain.events import (
    CartCleared,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
    OrderCancelled,
    OrderCreated,
    OrderPaymentStatusChanged,
    OrderStatusChanged,
)
from app.domain.exceptions import (
    CartEmptyError,
    CartItemNotFoundError,
    InsufficientStockError,
    InvalidQuantityError,
    OrderNotCancellableError,
)
from app.domain.state_machines import OrderStatus, PaymentStatus
from app.domain.value_objects import (
    CartItemId,
    Money,
    OrderId,
    OrderItemId,
    OrderNumber,
    ProductSnapshot,
)


# ============================================================================
# Stock Counter Entity
# ============================================================================


@dataclass(eq=False)
class StockCounter(Entity[UUID]):
    """Per-product stock counter owned by the inventory ledger.

    The counter is only ever moved by a delta; nothing outside the ledger
    writes an absolute stock value.

    Attributes:
        id: Product identifier.
        stock_quantity: Units on hand, never negative.
        is_active: Whether the product may be sold.
    """

    stock_quantity: int = 0
    is_active: bool = True

    def __post_init__(self) -> None:
        if self.stock_quantity < 0:
            raise InvalidQuantityError(self.stock_quantity, "Stock cannot be negative")

    @property
    def product_id(self) -> UUID:
        return self.id

    def can_fulfil(self, quantity: int) -> bool:
        """Check whether ``quantity`` units could be taken right now."""
        return self.is_active and self.stock_quantity >= quantity

    def decrement(self, quantity: int) -> None:
        """Take units out of stock.

        Raises:
            InsufficientStockError: If fewer than ``quantity`` units remain.
        """
        if self.stock_quantity < quantity:
            raise InsufficientStockError(str(self.id), quantity, self.stock_quantity)
        self.stock_quantity -= quantity

    def increment(self, quantity: int) -> None:
        """Put units back into stock."""
        self.stock_quantity += quantity


# ============================================================================
# Cart Item Entity
# ============================================================================


@dataclass(eq=False)
class CartItem(Entity[CartItemId]):
    """A line in a shopping cart.

    CartItem is an entity (not an aggregate root) that belongs to the Cart
    aggregate. There is at most one line per product; the unit price is
    the catalog price at the time the product was first added.

    Attributes:
        id: Unique identifier for this cart line.
        product_id: Product identifier.
        product_name: Product name when first added.
        unit_price: Price snapshot taken at first addition.
        quantity: Number of units, at least 1.
        sku: SKU if the catalog has one.
        added_at: Timestamp when the line was created.
    """

    product_id: UUID
    product_name: str
    unit_price: Money
    quantity: int
    sku: str | None = None
    added_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        """Validate cart item constraints."""
        if self.quantity <= 0:
            raise InvalidQuantityError(self.quantity)

    @property
    def line_total(self) -> Money:
        """Calculate total price for this line.

        Returns:
            Unit price multiplied by quantity.
        """
        return self.unit_price * self.quantity


# ============================================================================
# Cart Aggregate Root
# ============================================================================


@dataclass(kw_only=True, eq=False)
class Cart(AggregateRoot[UUID]):
    """Shopping cart aggregate root.

    One cart exists per user and shares the user's identifier. The cart
    itself is never deleted; checkout empties it of the ordered lines.

    Attributes:
        id: Owning user's identifier.
        items: Cart lines in the order they were first added.
    """

    items: list[CartItem] = field(default_factory=list)

    @property
    def user_id(self) -> UUID:
        return self.id

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------

    def subtotal(self, currency: str = "USD") -> Money:
        """Calculate the cart subtotal.

        Args:
            currency: Currency of the result when the cart is empty.

        Returns:
            Exact sum of all line totals.
        """
        return Money.sum((item.line_total for item in self.items), currency)

    @property
    def item_count(self) -> int:
        """Get total number of units (sum of line quantities)."""
        return sum(item.quantity for item in self.items)

    @property
    def is_empty(self) -> bool:
        return len(self.items) == 0

    def get_item_by_product(self, product_id: UUID) -> CartItem | None:
        """Get the line for a product.

        Args:
            product_id: Product identifier.

        Returns:
            CartItem if the product is in the cart, None otherwise.
        """
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    def snapshot(self) -> list[CartItem]:
        """Copy the current lines.

        Returns:
            Detached copies of the lines; later cart edits do not affect them.

        Raises:
            CartEmptyError: If the cart has no lines.
        """
        if self.is_empty:
            raise CartEmptyError(str(self.id))
        return [replace(item) for item in self.items]

    # -------------------------------------------------------------------------
    # Cart Item Operations
    # -------------------------------------------------------------------------

    def add_item(self, product: ProductSnapshot, quantity: int = 1) -> CartItem:
        """Add units of a product to the cart.

        If the product already has a line, its quantity is increased and its
        price snapshot kept. Otherwise a new line is created with the
        product's current price.

        Args:
            product: Catalog snapshot of the product.
            quantity: Number of units to add.

        Returns:
            The new or updated CartItem.

        Raises:
            InvalidQuantityError: If quantity is not positive.
        """
        if quantity <= 0:
            raise InvalidQuantityError(quantity)

        item = self.get_item_by_product(product.product_id)
        if item is None:
            item = CartItem(
                id=CartItemId.generate(),
                product_id=product.product_id,
                product_name=product.name,
                unit_price=product.price,
                quantity=quantity,
                sku=product.sku,
            )
            self.items.append(item)
        else:
            item.quantity += quantity

        self._touch()
        self._record_event(
            CartItemAdded(
                aggregate_id=str(self.id),
                aggregate_type="Cart",
                user_id=str(self.id),
                product_id=str(product.product_id),
                quantity=quantity,
                line_quantity=item.quantity,
                unit_price_cents=item.unit_price.amount_cents,
                currency=item.unit_price.currency,
            )
        )
        return item

    def set_item_quantity(self, product_id: UUID, quantity: int) -> CartItem | None:
        """Replace a line's quantity; zero or less removes the line.

        Args:
            product_id: Product identifier.
            quantity: New quantity.

        Returns:
            The updated line, or None if it was removed.

        Raises:
            CartItemNotFoundError: If the product has no line in the cart.
        """
        item = self.get_item_by_product(product_id)
        if item is None:
            raise CartItemNotFoundError(str(self.id), str(product_id))

        if quantity <= 0:
            self.remove_item(product_id)
            return None

        old_quantity = item.quantity
        item.quantity = quantity
        self._touch()
        self._record_event(
            CartItemQuantityUpdated(
                aggregate_id=str(self.id),
                aggregate_type="Cart",
                user_id=str(self.id),
                product_id=str(product_id),
                old_quantity=old_quantity,
                new_quantity=quantity,
            )
        )
        return item

    def remove_item(self, product_id: UUID) -> CartItem | None:
        """Remove a product's line if present.

        Returns:
            The removed line, or None if the product was not in the cart.
        """
        item = self.get_item_by_product(product_id)
        if item is None:
            return None

        self.items.remove(item)
        self._touch()
        self._record_event(
            CartItemRemoved(
                aggregate_id=str(self.id),
                aggregate_type="Cart",
                user_id=str(self.id),
                product_id=str(product_id),
                quantity=item.quantity,
            )
        )
        return item

    def clear(self) -> int:
        """Remove all lines.

        Returns:
            Number of lines removed.
        """
        count = len(self.items)
        self.items.clear()
        self._touch()
        self._record_event(
            CartCleared(
                aggregate_id=str(self.id),
                aggregate_type="Cart",
                user_id=str(self.id),
                items_removed=count,
            )
        )
        return count

    def remove_ordered(self, ordered: Iterable[tuple[UUID, int]]) -> None:
        """Take ordered quantities out of the cart after checkout.

        Lines are reduced by the ordered quantity and dropped when nothing
        is left, so units added while the checkout was running survive.

        Args:
            ordered: (product_id, quantity) pairs that were ordered.
        """
        for product_id, quantity in ordered:
            item = self.get_item_by_product(product_id)
            if item is None:
                continue
            if item.quantity > quantity:
                item.quantity -= quantity
            else:
                self.items.remove(item)
        self._touch()


# ============================================================================
# Order Aggregate Root
# ============================================================================


@dataclass(frozen=True)
class OrderItem:
    """A line item in an order.

    Order items are immutable snapshots of cart lines at the time of
    checkout.

    Attributes:
        id: Order line identifier.
        order_id: Owning order.
        product_id: Product identifier.
        product_name: Product name at time of order.
        quantity: Ordered quantity (reserved from stock).
        unit_price: Price per unit at time of order.
        sku: SKU if available.
    """

    id: OrderItemId
    order_id: OrderId
    product_id: UUID
    product_name: str
    quantity: int
    unit_price: Money
    sku: str | None = None

    @property
    def total_price(self) -> Money:
        return self.unit_price * self.quantity

    @classmethod
    def from_cart_item(cls, order_id: OrderId, cart_item: CartItem) -> "OrderItem":
        """Create order item from cart item.

        Args:
            order_id: Order the line belongs to.
            cart_item: Cart line to convert.

        Returns:
            OrderItem snapshot.
        """
        return cls(
            id=OrderItemId.generate(),
            order_id=order_id,
            product_id=cart_item.product_id,
            product_name=cart_item.product_name,
            quantity=cart_item.quantity,
            unit_price=cart_item.unit_price,
            sku=cart_item.sku,
        )


@dataclass(kw_only=True, eq=False)
class Order(AggregateRoot[OrderId]):
    """Order aggregate root.

    Orders are created by checkout together with their line items. After
    creation only the two status fields, ``stock_released`` and
    ``updated_at`` change.

    Attributes:
        id: Unique order identifier.
        order_number: Human-readable unique number.
        user_id: Ordering user.
        status: Fulfilment status.
        payment_status: Payment status.
        total_amount: Sum of line totals.
        items: Order line items.
        shipping_address: Free-form shipping address.
        billing_address: Free-form billing address.
        payment_method: Payment method label.
        notes: Optional customer notes.
        stock_released: Whether the reserved stock went back to the ledger.
    """

    order_number: OrderNumber
    user_id: UUID
    total_amount: Money
    shipping_address: str
    billing_address: str
    payment_method: str
    items: list[OrderItem] = field(default_factory=list)
    notes: str | None = None
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    stock_released: bool = False

    @classmethod
    def create(
        cls,
        *,
        order_number: OrderNumber,
        user_id: UUID,
        lines: list[CartItem],
        shipping_address: str,
        billing_address: str,
        payment_method: str,
        notes: str | None = None,
        currency: str = "USD",
        order_id: OrderId | None = None,
    ) -> "Order":
        """Create a pending order from a snapshot of cart lines.

        Args:
            order_number: Claimed order number.
            user_id: Ordering user.
            lines: Cart line snapshot (already reserved).
            shipping_address: Shipping address.
            billing_address: Billing address.
            payment_method: Payment method label.
            notes: Optional notes.
            currency: Currency used when summing the total.
            order_id: Optional pre-generated order ID.

        Returns:
            New Order in PENDING / PENDING.

        Raises:
            CartEmptyError: If there are no lines.
        """
        if not lines:
            raise CartEmptyError(str(user_id))

        order_id = order_id or OrderId.generate()
        items = [OrderItem.from_cart_item(order_id, line) for line in lines]
        order = cls(
            id=order_id,
            order_number=order_number,
            user_id=user_id,
            total_amount=Money.sum((item.total_price for item in items), currency),
            shipping_address=shipping_address,
            billing_address=billing_address,
            payment_method=payment_method,
            notes=notes,
            items=items,
        )
        order._record_event(
            OrderCreated(
                aggregate_id=str(order.id),
                aggregate_type="Order",
                order_number=str(order_number),
                user_id=str(user_id),
                total_cents=order.total_amount.amount_cents,
                currency=order.total_amount.currency,
                item_count=order.item_count,
            )
        )
        return order

    @property
    def item_count(self) -> int:
        """Get total number of units ordered."""
        return sum(item.quantity for item in self.items)

    # -------------------------------------------------------------------------
    # Status Changes
    # -------------------------------------------------------------------------

    def set_status(self, new_status: OrderStatus) -> OrderStatus:
        """Overwrite the fulfilment status.

        Transitions are not validated against the lifecycle table.

        Returns:
            The previous status.
        """
        old_status = self.status
        self.status = new_status
        self._touch()
        self._record_event(
            OrderStatusChanged(
                aggregate_id=str(self.id),
                aggregate_type="Order",
                old_status=old_status.value,
                new_status=new_status.value,
            )
        )
        return old_status

    def set_payment_status(self, new_payment_status: PaymentStatus) -> PaymentStatus:
        """Overwrite the payment status.

        Returns:
            The previous payment status.
        """
        old_payment_status = self.payment_status
        self.payment_status = new_payment_status
        self._touch()
        self._record_event(
            OrderPaymentStatusChanged(
                aggregate_id=str(self.id),
                aggregate_type="Order",
                old_payment_status=old_payment_status.value,
                new_payment_status=new_payment_status.value,
            )
        )
        return old_payment_status

    def mark_cancelled(self) -> OrderStatus:
        """Cancel the order and flag its stock as released.

        The check and the update happen in one synchronous step, so an
        order can be marked cancelled at most once.

        Returns:
            The status the order had before cancellation.

        Raises:
            OrderNotCancellableError: If the status does not allow
                cancellation or the stock was already released.
        """
        if self.stock_released or not self.status.can_be_cancelled():
            raise OrderNotCancellableError(str(self.id), self.status.value)

        previous_status = self.status
        self.status = OrderStatus.CANCELLED
        self.stock_released = True
        self._touch()
        self._record_event(
            OrderCancelled(
                aggregate_id=str(self.id),
                aggregate_type="Order",
                order_number=str(self.order_number),
                previous_status=previous_status.value,
                released=tuple((str(item.product_id), item.quantity) for item in self.items),
            )
        )
        return previous_status

    def revert_cancellation(self, previous_status: OrderStatus) -> None:
        """Undo ``mark_cancelled`` when its unit of work rolls back.

        A status written by someone else in the meantime is left alone.
        """
        if self.status is OrderStatus.CANCELLED:
            self.status = previous_status
        self.stock_released = False
        self._touch()

    def revert_status(self, expected: OrderStatus, previous: OrderStatus) -> None:
        """Undo ``set_status`` if the order still holds ``expected``."""
        if self.status is expected:
            self.status = previous
            self._touch()

    def revert_payment_status(self, expected: PaymentStatus, previous: PaymentStatus) -> None:
        """Undo ``set_payment_status`` if the order still holds ``expected``."""
        if self.payment_status is expected:
            self.payment_status = previous
            self._touch()
