"""Inventory ledger.

Owns the per-product stock counters. Stock only moves through the
ledger's conditional operations:

- ``try_reserve`` / ``reserve`` check and decrement in one step;
- ``release`` increments;
- ``check_available`` is an advisory read.

Each product has its own asyncio lock held across the read-check-write
against the counter repository, so reservations on one product are
serialized while different products never contend. Locks are never held
across a journal commit.
"""

import asyncio
from dataclasses import replace
from enum import Enum
from uuid import UUID

import structlog

from app.domain.entities import StockCounter
from app.domain.exceptions import (
    InsufficientStockError,
    InvalidQuantityError,
    ProductNotFoundError,
    ProductUnavailableError,
)

logger = structlog.get_logger()


class ReservationOutcome(str, Enum):
    """Result of a conditional stock decrement."""

    RESERVED = "reserved"
    INSUFFICIENT_STOCK = "insufficient_stock"
    PRODUCT_NOT_FOUND = "product_not_found"
    PRODUCT_INACTIVE = "product_inactive"

    @property
    def succeeded(self) -> bool:
        return self is ReservationOutcome.RESERVED


# ============================================================================
# In-Memory Stock Counter Repository
# ============================================================================


class StockCounterRepository:
    """In-memory repository for stock counters.

    Reads and writes are awaitable and hand out copies, the way a database
    round trip would. In production, this would be replaced with database
    persistence.
    """

    def __init__(self) -> None:
        self._counters: dict[UUID, StockCounter] = {}

    async def get(self, product_id: UUID) -> StockCounter | None:
        """Get a copy of a product's counter."""
        counter = self._counters.get(product_id)
        return replace(counter) if counter else None

    async def save(self, counter: StockCounter) -> None:
        """Store a counter."""
        self._counters[counter.id] = replace(counter)


# Global repository instance
_counter_repo: StockCounterRepository | None = None


def get_stock_counter_repository() -> StockCounterRepository:
    """Get stock counter repository singleton."""
    global _counter_repo
    if _counter_repo is None:
        _counter_repo = StockCounterRepository()
    return _counter_repo


def reset_stock_counter_repository() -> None:
    """Reset stock counter repository (for testing)."""
    global _counter_repo
    _counter_repo = StockCounterRepository()


# ============================================================================
# Inventory Ledger
# ============================================================================


def _require_positive(quantity: int) -> None:
    if quantity < 1:
        raise InvalidQuantityError(quantity)


class InventoryLedger:
    """Single authority for stock mutations.

    Example usage:
        ledger = get_inventory_ledger()
        outcome = await ledger.try_reserve(product_id, 2)
        if outcome.succeeded:
            ...
            await ledger.release(product_id, 2)
    """

    def __init__(self, counter_repo: StockCounterRepository | None = None) -> None:
        """Initialize ledger.

        Args:
            counter_repo: Stock counter repository.
        """
        self.counter_repo = counter_repo or get_stock_counter_repository()
        self._locks: dict[UUID, asyncio.Lock] = {}

    def _lock_for(self, product_id: UUID) -> asyncio.Lock:
        lock = self._locks.get(product_id)
        if lock is None:
            lock = self._locks[product_id] = asyncio.Lock()
        return lock

    # -------------------------------------------------------------------------
    # Counter Management
    # -------------------------------------------------------------------------

    async def register(
        self,
        product_id: UUID,
        stock_quantity: int = 0,
        is_active: bool = True,
    ) -> StockCounter:
        """Create the counter for a new product.

        Args:
            product_id: Product identifier.
            stock_quantity: Initial stock, not negative.
            is_active: Whether the product can be sold.

        Returns:
            The new counter.

        Raises:
            InvalidQuantityError: If stock_quantity is negative.
            ValueError: If the product already has a counter.
        """
        counter = StockCounter(id=product_id, stock_quantity=stock_quantity, is_active=is_active)
        async with self._lock_for(product_id):
            if await self.counter_repo.get(product_id) is not None:
                raise ValueError(f"Product {product_id} already has a stock counter")
            await self.counter_repo.save(counter)

        logger.info(
            "Stock counter registered",
            product_id=str(product_id),
            stock_quantity=stock_quantity,
            is_active=is_active,
        )
        return counter

    async def get_counter(self, product_id: UUID) -> StockCounter | None:
        """Get the current counter of a product, if any."""
        return await self.counter_repo.get(product_id)

    async def set_active(self, product_id: UUID, is_active: bool) -> StockCounter:
        """Enable or disable sales of a product.

        Raises:
            ProductNotFoundError: If the product has no counter.
        """
        async with self._lock_for(product_id):
            counter = await self.counter_repo.get(product_id)
            if counter is None:
                raise ProductNotFoundError(str(product_id))
            counter.is_active = is_active
            await self.counter_repo.save(counter)
        return counter

    # -------------------------------------------------------------------------
    # Reservation Protocol
    # -------------------------------------------------------------------------

    async def try_reserve(self, product_id: UUID, quantity: int) -> ReservationOutcome:
        """Atomically take ``quantity`` units if the product can supply them.

        Args:
            product_id: Product identifier.
            quantity: Units to take, at least 1.

        Returns:
            RESERVED if stock was decremented; otherwise the reason nothing
            changed.

        Raises:
            InvalidQuantityError: If quantity is less than 1.
        """
        _require_positive(quantity)

        async with self._lock_for(product_id):
            counter = await self.counter_repo.get(product_id)
            if counter is None:
                outcome = ReservationOutcome.PRODUCT_NOT_FOUND
            elif not counter.is_active:
                outcome = ReservationOutcome.PRODUCT_INACTIVE
            elif counter.stock_quantity < quantity:
                outcome = ReservationOutcome.INSUFFICIENT_STOCK
            else:
                counter.decrement(quantity)
                await self.counter_repo.save(counter)
                outcome = ReservationOutcome.RESERVED

        logger.debug(
            "Stock reservation attempted",
            product_id=str(product_id),
            quantity=quantity,
            outcome=outcome.value,
        )
        return outcome

    async def reserve(self, product_id: UUID, quantity: int) -> None:
        """Raising variant of ``try_reserve``.

        Raises:
            InvalidQuantityError: If quantity is less than 1.
            ProductNotFoundError: If the product has no counter.
            ProductUnavailableError: If the product is inactive.
            InsufficientStockError: If stock is below quantity.
        """
        outcome = await self.try_reserve(product_id, quantity)
        if outcome is ReservationOutcome.PRODUCT_NOT_FOUND:
            raise ProductNotFoundError(str(product_id))
        if outcome is ReservationOutcome.PRODUCT_INACTIVE:
            raise ProductUnavailableError(str(product_id), "Product is inactive")
        if outcome is ReservationOutcome.INSUFFICIENT_STOCK:
            counter = await self.counter_repo.get(product_id)
            available = counter.stock_quantity if counter else None
            raise InsufficientStockError(str(product_id), quantity, available)

    async def release(self, product_id: UUID, quantity: int) -> int:
        """Return ``quantity`` units to stock.

        Not idempotent: every call adds. Callers guard against releasing
        the same reservation twice.

        Returns:
            Stock after the release.

        Raises:
            InvalidQuantityError: If quantity is less than 1.
            ProductNotFoundError: If the product has no counter.
        """
        _require_positive(quantity)

        async with self._lock_for(product_id):
            counter = await self.counter_repo.get(product_id)
            if counter is None:
                raise ProductNotFoundError(str(product_id))
            counter.increment(quantity)
            await self.counter_repo.save(counter)

        logger.debug(
            "Stock released",
            product_id=str(product_id),
            quantity=quantity,
            stock_quantity=counter.stock_quantity,
        )
        return counter.stock_quantity

    async def check_available(self, product_id: UUID, quantity: int) -> bool:
        """Advisory check: active and at least ``quantity`` in stock.

        The answer may be stale by the time the caller acts on it.
        """
        counter = await self.counter_repo.get(product_id)
        return counter is not None and counter.can_fulfil(quantity)

    async def adjust(self, product_id: UUID, delta: int) -> StockCounter:
        """Move stock by a signed delta.

        Decreases go through the conditional reservation path, so an
        adjustment can never drive stock negative.

        Args:
            product_id: Product identifier.
            delta: Units to add (positive) or remove (negative).

        Returns:
            The counter after the adjustment.

        Raises:
            InvalidQuantityError: If delta is zero.
            ProductNotFoundError: If the product has no counter.
            ProductUnavailableError: If removing stock from an inactive product.
            InsufficientStockError: If removing more than is in stock.
        """
        if delta == 0:
            raise InvalidQuantityError(delta, "Stock adjustment must be non-zero")

        if delta > 0:
            await self.release(product_id, delta)
        else:
            await self.reserve(product_id, -delta)

        counter = await self.counter_repo.get(product_id)
        logger.info(
            "Stock adjusted",
            product_id=str(product_id),
            delta=delta,
            stock_quantity=counter.stock_quantity,
        )
        return counter


# Global ledger instance
_ledger: InventoryLedger | None = None


def get_inventory_ledger() -> InventoryLedger:
    """Get inventory ledger singleton."""
    global _ledger
    if _ledger is None:
        _ledger = InventoryLedger()
    return _ledger


def reset_inventory_ledger() -> None:
    """Reset inventory ledger and its counters (for testing)."""
    global _ledger
    reset_stock_counter_repository()
    _ledger = InventoryLedger()
