"""Order application service.

Orchestrates order lifecycle management including:
- Order lookup by id, number, user and status
- Status and payment status overwrites
- Cancellation with stock restoration

Orders are only created by checkout (see checkout_service). Every change
to an existing order runs in a unit of work and is journaled.
"""

from dataclasses import dataclass, field
from functools import partial
from uuid import UUID

import structlog

from app.application.inventory_ledger import InventoryLedger, get_inventory_ledger
from app.domain.entities import Order, OrderItem
from app.domain.events import StockReleased
from app.domain.exceptions import OrderNotFoundError
from app.domain.state_machines import OrderStatus, PaymentStatus
from app.domain.value_objects import OrderId, OrderNumber
from app.infrastructure.unit_of_work import TransactionJournal, UnitOfWork

logger = structlog.get_logger()


@dataclass
class OrderPage:
    """One page of an order listing."""

    orders: list[Order] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 20


# ============================================================================
# In-Memory Order Repository
# ============================================================================


class OrderRepository:
    """In-memory repository for orders.

    Order numbers are claimed before the order exists so that checkout can
    detect collisions without holding anything across its commit. All
    methods are synchronous; a check and the write that depends on it can
    never be interleaved with another coroutine.

    In production, this would be replaced with database persistence.
    """

    def __init__(self) -> None:
        self._orders: dict[OrderId, Order] = {}
        self._by_number: dict[str, OrderId] = {}
        self._claimed_numbers: set[str] = set()

    # -------------------------------------------------------------------------
    # Order Numbers
    # -------------------------------------------------------------------------

    def claim_order_number(self, number: OrderNumber) -> bool:
        """Reserve an order number.

        Returns:
            True if the number was free and is now claimed, False on collision.
        """
        if number.value in self._claimed_numbers:
            return False
        self._claimed_numbers.add(number.value)
        return True

    def release_order_number(self, number: OrderNumber) -> None:
        """Give back a claimed number that never got an order."""
        if number.value not in self._by_number:
            self._claimed_numbers.discard(number.value)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def add(self, order: Order) -> None:
        """Store a newly created order under its claimed number."""
        self._claimed_numbers.add(order.order_number.value)
        self._orders[order.id] = order
        self._by_number[order.order_number.value] = order.id

    def mark_cancelled(self, order_id: OrderId) -> tuple[Order, OrderStatus]:
        """Compare-and-set an order to CANCELLED.

        Returns:
            The order and the status it had before.

        Raises:
            OrderNotFoundError: If the order does not exist.
            OrderNotCancellableError: If the order cannot be cancelled.
        """
        order = self._orders.get(order_id)
        if order is None:
            raise OrderNotFoundError(str(order_id))
        return order, order.mark_cancelled()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, order_id: OrderId) -> Order | None:
        """Get order by ID."""
        return self._orders.get(order_id)

    def get_by_number(self, order_number: str) -> Order | None:
        """Get order by order number."""
        order_id = self._by_number.get(order_number)
        return self._orders.get(order_id) if order_id else None

    def list_all(
        self,
        page: int = 1,
        page_size: int = 20,
        status: OrderStatus | None = None,
    ) -> tuple[list[Order], int]:
        """List orders with pagination and filtering, newest first."""
        orders = list(self._orders.values())

        if status:
            orders = [o for o in orders if o.status == status]

        orders.sort(key=lambda o: o.created_at, reverse=True)

        total = len(orders)
        start = (page - 1) * page_size
        end = start + page_size
        return orders[start:end], total

    def list_for_user(self, user_id: UUID) -> list[Order]:
        """List a user's orders, newest first."""
        orders = [o for o in self._orders.values() if o.user_id == user_id]
        orders.sort(key=lambda o: o.created_at, reverse=True)
        return orders

    def count_for_user(self, user_id: UUID) -> int:
        return sum(1 for o in self._orders.values() if o.user_id == user_id)

    def count_by_status(self, status: OrderStatus) -> int:
        return sum(1 for o in self._orders.values() if o.status == status)


# Global repository instance
_order_repo: OrderRepository | None = None


def get_order_repository() -> OrderRepository:
    """Get order repository singleton."""
    global _order_repo
    if _order_repo is None:
        _order_repo = OrderRepository()
    return _order_repo


def reset_order_repository() -> None:
    """Reset order repository (for testing)."""
    global _order_repo
    _order_repo = OrderRepository()


# ============================================================================
# Order Service
# ============================================================================


class OrderService:
    """Application service for managing orders.

    Handles order lifecycle:
    - Status and payment status overwrites
    - Cancellation, which returns every line's quantity to stock exactly once
    - Read-side queries
    """

    def __init__(
        self,
        order_repo: OrderRepository | None = None,
        ledger: InventoryLedger | None = None,
        journal: TransactionJournal | None = None,
        request_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            order_repo: Order repository.
            ledger: Inventory ledger that receives released stock.
            journal: Transaction journal (defaults to the global one).
            request_id: Request ID for correlation.
        """
        self.order_repo = order_repo or get_order_repository()
        self.ledger = ledger or get_inventory_ledger()
        self.journal = journal
        self.request_id = request_id

    def _unit_of_work(self, kind: str) -> UnitOfWork:
        return UnitOfWork(kind, journal=self.journal, request_id=self.request_id)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_order(self, order_id: OrderId) -> Order:
        """Get an order by ID.

        Raises:
            OrderNotFoundError: If the order does not exist.
        """
        order = self.order_repo.get(order_id)
        if order is None:
            raise OrderNotFoundError(str(order_id))
        return order

    def get_order_by_number(self, order_number: str) -> Order:
        """Get an order by its order number.

        Raises:
            OrderNotFoundError: If no order has this number.
        """
        order = self.order_repo.get_by_number(order_number)
        if order is None:
            raise OrderNotFoundError(order_number)
        return order

    def get_order_items(self, order_id: OrderId) -> list[OrderItem]:
        return list(self.get_order(order_id).items)

    def list_orders(
        self,
        page: int = 1,
        page_size: int = 20,
        status: OrderStatus | None = None,
    ) -> OrderPage:
        """List orders with pagination and an optional status filter.

        Args:
            page: Page number (1-based).
            page_size: Items per page.
            status: Filter by status.

        Returns:
            OrderPage with the requested slice, newest first.
        """
        orders, total = self.order_repo.list_all(page=page, page_size=page_size, status=status)
        return OrderPage(orders=orders, total=total, page=page, page_size=page_size)

    def list_orders_for_user(self, user_id: UUID) -> list[Order]:
        return self.order_repo.list_for_user(user_id)

    def count_orders_for_user(self, user_id: UUID) -> int:
        return self.order_repo.count_for_user(user_id)

    def count_orders_by_status(self, status: OrderStatus) -> int:
        return self.order_repo.count_by_status(status)

    # -------------------------------------------------------------------------
    # Status Changes
    # -------------------------------------------------------------------------

    async def update_status(self, order_id: OrderId, new_status: OrderStatus) -> Order:
        """Overwrite an order's fulfilment status.

        The overwrite is not checked against the lifecycle table, with one
        exception: CANCELLED is routed through ``cancel`` so that stock is
        always restored.

        Raises:
            OrderNotFoundError: If the order does not exist.
            OrderNotCancellableError: If new_status is CANCELLED and the
                order cannot be cancelled.
            StorageCommitFailedError: If the journal append failed.
        """
        if new_status is OrderStatus.CANCELLED:
            return await self.cancel(order_id)

        order = self.get_order(order_id)
        async with self._unit_of_work("order.status") as uow:
            old_status = order.set_status(new_status)
            uow.add_compensation(
                "restore status", partial(order.revert_status, new_status, old_status)
            )
            uow.record(order.collect_events())
            await uow.commit()

        logger.info(
            "Order status updated",
            order_id=str(order_id),
            from_status=old_status.value,
            to_status=new_status.value,
            request_id=self.request_id,
        )
        return order

    async def update_payment_status(
        self, order_id: OrderId, new_payment_status: PaymentStatus
    ) -> Order:
        """Overwrite an order's payment status.

        Raises:
            OrderNotFoundError: If the order does not exist.
            StorageCommitFailedError: If the journal append failed.
        """
        order = self.get_order(order_id)
        async with self._unit_of_work("order.payment_status") as uow:
            old_payment_status = order.set_payment_status(new_payment_status)
            uow.add_compensation(
                "restore payment status",
                partial(order.revert_payment_status, new_payment_status, old_payment_status),
            )
            uow.record(order.collect_events())
            await uow.commit()

        logger.info(
            "Order payment status updated",
            order_id=str(order_id),
            from_status=old_payment_status.value,
            to_status=new_payment_status.value,
            request_id=self.request_id,
        )
        return order

    async def cancel(self, order_id: OrderId) -> Order:
        """Cancel an order and return its stock to the ledger.

        The order is switched to CANCELLED and flagged as released in one
        synchronous step, so of two concurrent cancellations only one gets
        past it. Stock is released only after the journal accepted the
        transaction; if it did not, the order keeps its previous status and
        no stock moves.

        Raises:
            OrderNotFoundError: If the order does not exist.
            OrderNotCancellableError: If the status is not PENDING or
                CONFIRMED, or the order was already cancelled.
            StorageCommitFailedError: If the journal append failed.
        """
        async with self._unit_of_work("order.cancel") as uow:
            order, previous_status = self.order_repo.mark_cancelled(order_id)
            uow.add_compensation(
                "revert cancellation",
                partial(order.revert_cancellation, previous_status),
            )
            uow.record(order.collect_events())

            for item in order.items:
                uow.after_commit(
                    f"release {item.product_id}",
                    partial(self.ledger.release, item.product_id, item.quantity),
                )
                uow.record(
                    [
                        StockReleased(
                            aggregate_id=str(item.product_id),
                            aggregate_type="StockCounter",
                            product_id=str(item.product_id),
                            quantity=item.quantity,
                        )
                    ]
                )

            await uow.commit()

        logger.info(
            "Order cancelled",
            order_id=str(order_id),
            order_number=str(order.order_number),
            previous_status=previous_status.value,
            lines_released=len(order.items),
            request_id=self.request_id,
        )
        return order


# ============================================================================
# Service Factory
# ============================================================================


def get_order_service(request_id: str | None = None) -> OrderService:
    """Get order service instance.

    Args:
        request_id: Request ID for correlation.

    Returns:
        OrderService instance.
    """
    return OrderService(request_id=request_id)
