"""Shared fixtures for the storefront test suite."""

import asyncio
from collections.abc import Awaitable, Callable
from decimal import Decimal
from uuid import UUID

import pytest

from app.application.cart_service import reset_cart_repository
from app.application.inventory_ledger import (
    InventoryLedger,
    StockCounterRepository,
    reset_inventory_ledger,
)
from app.application.order_service import reset_order_repository
from app.catalog.repository import reset_product_repository
from app.catalog.service import CatalogService
from app.domain.entities import StockCounter
from app.domain.value_objects import Money, ProductSnapshot
from app.infrastructure.unit_of_work import TransactionRecord, reset_transaction_journal

AddProduct = Callable[..., Awaitable[ProductSnapshot]]


@pytest.fixture(autouse=True)
def reset_state() -> None:
    """Start every test with empty repositories, ledger and journal."""
    reset_inventory_ledger()
    reset_product_repository()
    reset_cart_repository()
    reset_order_repository()
    reset_transaction_journal()


# ============================================================================
# Test Doubles
# ============================================================================


class SlowStockCounterRepository(StockCounterRepository):
    """Counter repository that yields to the event loop on every read.

    Without the ledger's per-product lock, two reservations racing on the
    same product would both read the old stock value.
    """

    async def get(self, product_id: UUID) -> StockCounter | None:
        await asyncio.sleep(0)
        counter = await super().get(product_id)
        await asyncio.sleep(0)
        return counter


class FailingJournal:
    """Journal whose every append fails."""

    def __init__(self) -> None:
        self.attempts: list[TransactionRecord] = []

    async def append(self, record: TransactionRecord) -> None:
        self.attempts.append(record)
        raise RuntimeError("journal unavailable")


class GatedFailingJournal(FailingJournal):
    """Journal that holds every append until ``open`` is set, then fails."""

    def __init__(self) -> None:
        super().__init__()
        self.waiting = asyncio.Event()
        self.open = asyncio.Event()

    async def append(self, record: TransactionRecord) -> None:
        self.waiting.set()
        await self.open.wait()
        await super().append(record)


@pytest.fixture
def slow_ledger() -> InventoryLedger:
    """Ledger backed by a repository that forces interleaving."""
    return InventoryLedger(SlowStockCounterRepository())


@pytest.fixture
def failing_journal() -> FailingJournal:
    return FailingJournal()


@pytest.fixture
def gated_journal() -> GatedFailingJournal:
    return GatedFailingJournal()


# ============================================================================
# Catalog Helpers
# ============================================================================


@pytest.fixture
def catalog() -> CatalogService:
    """Catalog service over the global ledger."""
    return CatalogService()


@pytest.fixture
def add_product(catalog: CatalogService) -> AddProduct:
    """Factory registering a product in the global catalog.

    Usage:
        product = await add_product(price="10.00", stock=5)
    """

    async def _add(
        name: str = "Widget",
        price: str = "10.00",
        stock: int = 10,
        is_active: bool = True,
        sku: str | None = None,
        service: CatalogService | None = None,
    ) -> ProductSnapshot:
        return await (service or catalog).register_product(
            name=name,
            price=Money.from_decimal(Decimal(price)),
            stock_quantity=stock,
            sku=sku,
            is_active=is_active,
        )

    return _add
