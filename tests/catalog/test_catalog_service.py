"""Tests for the catalog service."""

from decimal import Decimal
from uuid import uuid4

import pytest

from app.application.inventory_ledger import ReservationOutcome
from app.catalog.service import DEMO_PRODUCTS, CatalogService
from app.domain.exceptions import (
    InsufficientStockError,
    InvalidQuantityError,
    ProductNotFoundError,
    StorageCommitFailedError,
)
from app.domain.value_objects import Money
from app.infrastructure.unit_of_work import get_transaction_journal, set_transaction_journal


class TestProducts:
    """Tests for product registration and lookup."""

    @pytest.mark.asyncio
    async def test_register_and_get(self, catalog: CatalogService) -> None:
        product = await catalog.register_product(
            name="Widget",
            price=Money.from_decimal(Decimal("12.50")),
            stock_quantity=4,
            sku="W-1",
        )

        snapshot = await catalog.get_product(product.product_id)

        assert snapshot.name == "Widget"
        assert snapshot.price == Money(amount_cents=1250)
        assert snapshot.stock_quantity == 4
        assert snapshot.is_active
        assert catalog.product_repo.get_by_sku("W-1").id == product.product_id

    @pytest.mark.asyncio
    async def test_get_unknown_product(self, catalog: CatalogService) -> None:
        with pytest.raises(ProductNotFoundError):
            await catalog.get_product(uuid4())

    @pytest.mark.asyncio
    async def test_snapshot_reflects_ledger(self, catalog: CatalogService, add_product) -> None:
        """Stock in the snapshot is read from the ledger."""
        product = await add_product(stock=5)
        await catalog.ledger.reserve(product.product_id, 2)

        assert (await catalog.get_product(product.product_id)).stock_quantity == 3


class TestAdjustStock:
    """Tests for stock adjustments."""

    @pytest.mark.asyncio
    async def test_adjust_is_journaled(self, catalog: CatalogService, add_product) -> None:
        product = await add_product(stock=5)

        assert (await catalog.adjust_stock(product.product_id, 3)).stock_quantity == 8
        assert (await catalog.adjust_stock(product.product_id, -8)).stock_quantity == 0

        records = get_transaction_journal().list_records(kind="inventory.adjust")
        assert [r.event_types[0] for r in records] == [
            "inventory.stock_released",
            "inventory.stock_reserved",
        ]

    @pytest.mark.asyncio
    async def test_adjust_below_zero(self, catalog: CatalogService, add_product) -> None:
        product = await add_product(stock=1)
        with pytest.raises(InsufficientStockError):
            await catalog.adjust_stock(product.product_id, -2)
        assert (await catalog.get_product(product.product_id)).stock_quantity == 1

    @pytest.mark.asyncio
    async def test_adjust_zero(self, catalog: CatalogService, add_product) -> None:
        product = await add_product()
        with pytest.raises(InvalidQuantityError):
            await catalog.adjust_stock(product.product_id, 0)

    @pytest.mark.asyncio
    async def test_adjust_unknown_product(self, catalog: CatalogService) -> None:
        with pytest.raises(ProductNotFoundError):
            await catalog.adjust_stock(uuid4(), 1)

    @pytest.mark.asyncio
    async def test_adjust_reverted_on_journal_failure(
        self, catalog: CatalogService, add_product, failing_journal
    ) -> None:
        product = await add_product(stock=5)
        set_transaction_journal(failing_journal)

        with pytest.raises(StorageCommitFailedError):
            await catalog.adjust_stock(product.product_id, -2)

        assert (await catalog.get_product(product.product_id)).stock_quantity == 5

    @pytest.mark.asyncio
    async def test_addition_not_applied_on_journal_failure(
        self, catalog: CatalogService, add_product, failing_journal
    ) -> None:
        """Added stock appears only once the journal accepted it."""
        product = await add_product(stock=0, is_active=False)
        set_transaction_journal(failing_journal)

        with pytest.raises(StorageCommitFailedError):
            await catalog.adjust_stock(product.product_id, 5)

        assert (await catalog.get_product(product.product_id)).stock_quantity == 0

    @pytest.mark.asyncio
    async def test_add_stock_to_inactive_product(
        self, catalog: CatalogService, add_product
    ) -> None:
        product = await add_product(stock=0, is_active=False)

        snapshot = await catalog.adjust_stock(product.product_id, 5)

        assert snapshot.stock_quantity == 5
        assert not snapshot.is_active


class TestActivation:
    """Tests for enabling and disabling sales."""

    @pytest.mark.asyncio
    async def test_deactivate_and_activate(self, catalog: CatalogService, add_product) -> None:
        product = await add_product(stock=3)

        snapshot = await catalog.set_active(product.product_id, False)
        assert not snapshot.is_active
        assert snapshot.stock_quantity == 3

        snapshot = await catalog.set_active(product.product_id, True)
        assert snapshot.is_active

    @pytest.mark.asyncio
    async def test_deactivated_product_cannot_be_reserved(
        self, catalog: CatalogService, add_product
    ) -> None:
        product = await add_product(stock=3)
        await catalog.set_active(product.product_id, False)

        outcome = await catalog.ledger.try_reserve(product.product_id, 1)

        assert outcome is ReservationOutcome.PRODUCT_INACTIVE

    @pytest.mark.asyncio
    async def test_unknown_product(self, catalog: CatalogService) -> None:
        with pytest.raises(ProductNotFoundError):
            await catalog.set_active(uuid4(), False)


class TestDemoCatalog:
    """Tests for demo catalog seeding."""

    @pytest.mark.asyncio
    async def test_seed_demo_catalog(self, catalog: CatalogService) -> None:
        seeded = await catalog.seed_demo_catalog()

        assert len(seeded) == len(DEMO_PRODUCTS)
        assert {p.sku for p in seeded} == {sku for sku, *_ in DEMO_PRODUCTS}

    @pytest.mark.asyncio
    async def test_seed_skipped_when_populated(
        self, catalog: CatalogService, add_product
    ) -> None:
        await add_product()
        assert await catalog.seed_demo_catalog() == []
