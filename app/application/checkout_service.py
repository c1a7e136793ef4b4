"""Checkout application service.

Turns a user's cart into an order in one unit of work:

1. Snapshot the cart lines (an empty cart fails before anything changes).
2. Reserve stock line by line in ascending product ID order. Every
   reservation registers its compensating release.
3. Claim a unique order number, retrying on collision.
4. Build the order and stage its insertion and the removal of the ordered
   lines from the cart as post-commit effects.
5. Commit by appending one journal record.

Any failure before the commit completes rolls back every reservation and
the number claim, so the cart and the stock counters end where they
started.
"""

from collections.abc import Callable
from functools import partial
from uuid import UUID

import structlog

from app.application.cart_service import CartRepository, get_cart_repository
from app.application.inventory_ledger import (
    InventoryLedger,
    ReservationOutcome,
    get_inventory_ledger,
)
from app.application.order_service import OrderRepository, get_order_repository
from app.domain.entities import CartItem, Order
from app.domain.events import StockReserved
from app.domain.exceptions import (
    DomainError,
    InsufficientStockError,
    OrderNumberCollisionError,
    ProductUnavailableError,
)
from app.domain.value_objects import OrderNumber
from app.infrastructure.config import settings
from app.infrastructure.unit_of_work import TransactionJournal, UnitOfWork

logger = structlog.get_logger()


class CheckoutService:
    """Application service for cart-to-order checkout.

    The service owns no state of its own; it coordinates the cart
    repository, the inventory ledger and the order repository.
    """

    def __init__(
        self,
        cart_repo: CartRepository | None = None,
        ledger: InventoryLedger | None = None,
        order_repo: OrderRepository | None = None,
        journal: TransactionJournal | None = None,
        number_factory: Callable[[], OrderNumber] = OrderNumber.generate,
        max_number_attempts: int | None = None,
        request_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            cart_repo: Cart repository.
            ledger: Inventory ledger.
            order_repo: Order repository.
            journal: Transaction journal (defaults to the global one).
            number_factory: Draws order number candidates.
            max_number_attempts: Order number draws before giving up.
            request_id: Request ID for correlation.
        """
        self.cart_repo = cart_repo or get_cart_repository()
        self.ledger = ledger or get_inventory_ledger()
        self.order_repo = order_repo or get_order_repository()
        self.journal = journal
        self.number_factory = number_factory
        self.max_number_attempts = max_number_attempts or settings.order_number_max_attempts
        self.request_id = request_id

    async def checkout(
        self,
        user_id: UUID,
        shipping_address: str,
        billing_address: str,
        payment_method: str,
        notes: str | None = None,
    ) -> Order:
        """Create an order from the user's cart.

        Args:
            user_id: Cart owner.
            shipping_address: Shipping address.
            billing_address: Billing address.
            payment_method: Payment method label.
            notes: Optional order notes.

        Returns:
            The created order, in PENDING / PENDING.

        Raises:
            CartEmptyError: If the cart has no lines.
            InsufficientStockError: If a line exceeds the product's stock.
            ProductUnavailableError: If a product is inactive or gone.
            OrderNumberCollisionError: If no unique order number was found.
            StorageCommitFailedError: If the journal append failed.
        """
        cart = self.cart_repo.get_or_create(user_id)
        log = logger.bind(user_id=str(user_id), request_id=self.request_id)

        try:
            lines = sorted(cart.snapshot(), key=lambda line: line.product_id)
            log.info("Checkout started", line_count=len(lines))

            async with UnitOfWork(
                "checkout", journal=self.journal, request_id=self.request_id
            ) as uow:
                for line in lines:
                    await self._reserve(uow, line)

                order_number = self._claim_order_number(uow)
                order = Order.create(
                    order_number=order_number,
                    user_id=user_id,
                    lines=lines,
                    shipping_address=shipping_address,
                    billing_address=billing_address,
                    payment_method=payment_method,
                    notes=notes,
                    currency=settings.currency,
                )
                uow.record(order.collect_events())

                ordered = [(line.product_id, line.quantity) for line in lines]
                uow.after_commit("store order", partial(self.order_repo.add, order))
                uow.after_commit(
                    "remove ordered lines",
                    lambda: self.cart_repo.get_or_create(user_id).remove_ordered(ordered),
                )

                await uow.commit()
        except DomainError as e:
            log.warning("Checkout failed", error_code=e.error_code, error=e.message)
            raise

        log.info(
            "Checkout completed",
            order_id=str(order.id),
            order_number=str(order.order_number),
            total_cents=order.total_amount.amount_cents,
        )
        return order

    async def _reserve(self, uow: UnitOfWork, line: CartItem) -> None:
        outcome = await self.ledger.try_reserve(line.product_id, line.quantity)
        if not outcome.succeeded:
            raise await self._reservation_error(line, outcome)

        uow.add_compensation(
            f"release {line.product_id}",
            partial(self.ledger.release, line.product_id, line.quantity),
        )
        uow.record(
            [
                StockReserved(
                    aggregate_id=str(line.product_id),
                    aggregate_type="StockCounter",
                    product_id=str(line.product_id),
                    quantity=line.quantity,
                )
            ]
        )

    async def _reservation_error(
        self, line: CartItem, outcome: ReservationOutcome
    ) -> DomainError:
        product_id = str(line.product_id)
        if outcome is ReservationOutcome.PRODUCT_NOT_FOUND:
            return ProductUnavailableError(product_id, "Product no longer exists")
        if outcome is ReservationOutcome.PRODUCT_INACTIVE:
            return ProductUnavailableError(product_id, "Product is inactive")
        counter = await self.ledger.get_counter(line.product_id)
        return InsufficientStockError(
            product_id, line.quantity, counter.stock_quantity if counter else None
        )

    def _claim_order_number(self, uow: UnitOfWork) -> OrderNumber:
        for attempt in range(1, self.max_number_attempts + 1):
            number = self.number_factory()
            if self.order_repo.claim_order_number(number):
                uow.add_compensation(
                    "release order number",
                    partial(self.order_repo.release_order_number, number),
                )
                return number
            logger.warning(
                "Order number collision",
                order_number=str(number),
                attempt=attempt,
                request_id=self.request_id,
            )
        raise OrderNumberCollisionError(self.max_number_attempts)


# ============================================================================
# Service Factory
# ============================================================================


def get_checkout_service(request_id: str | None = None) -> CheckoutService:
    """Get checkout service instance.

    Args:
        request_id: Request ID for correlation.

    Returns:
        CheckoutService instance.
    """
    return CheckoutService(request_id=request_id)
