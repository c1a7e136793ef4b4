"""Catalog service for product operations.

Joins catalog data (name, SKU, price) with the inventory ledger's counter
(stock, active flag) into the ProductSnapshot the cart and API consume.
"""

from decimal import Decimal
from functools import partial
from uuid import UUID, uuid4

import structlog

from app.application.inventory_ledger import InventoryLedger, get_inventory_ledger
from app.catalog.models import Product
from app.catalog.repository import ProductRepository, get_product_repository
from app.domain.events import StockReleased, StockReserved
from app.domain.exceptions import InvalidQuantityError, ProductNotFoundError
from app.domain.value_objects import Money, ProductSnapshot
from app.infrastructure.config import settings
from app.infrastructure.unit_of_work import UnitOfWork

logger = structlog.get_logger()


# Demo products seeded when settings.seed_demo_catalog is enabled:
# (sku, name, price, stock)
DEMO_PRODUCTS: list[tuple[str, str, str, int]] = [
    ("DEMO-TSHIRT", "Cotton T-Shirt", "19.99", 50),
    ("DEMO-MUG", "Ceramic Mug", "9.50", 120),
    ("DEMO-HOODIE", "Zip Hoodie", "49.00", 15),
    ("DEMO-CAP", "Baseball Cap", "14.25", 0),
    ("DEMO-POSTER", "Limited Poster", "5.00", 1),
]


class CatalogService:
    """Product lookup and stock administration.

    Example usage:
        service = get_catalog_service()
        product = await service.register_product(
            name="Widget",
            price=Money.from_decimal(Decimal("10.00")),
            stock_quantity=5,
        )
        snapshot = await service.get_product(product.product_id)
    """

    def __init__(
        self,
        product_repo: ProductRepository | None = None,
        ledger: InventoryLedger | None = None,
        request_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            product_repo: Product repository.
            ledger: Inventory ledger holding the stock counters.
            request_id: Request ID for correlation.
        """
        self.product_repo = product_repo or get_product_repository()
        self.ledger = ledger or get_inventory_ledger()
        self.request_id = request_id

    async def register_product(
        self,
        name: str,
        price: Money,
        stock_quantity: int = 0,
        sku: str | None = None,
        description: str | None = None,
        is_active: bool = True,
        product_id: UUID | None = None,
    ) -> ProductSnapshot:
        """Add a product to the catalog together with its stock counter.

        Args:
            name: Display name.
            price: Unit price.
            stock_quantity: Initial stock.
            sku: Optional SKU.
            description: Optional description.
            is_active: Whether the product can be sold.
            product_id: Optional pre-generated product ID.

        Returns:
            Snapshot of the new product.
        """
        product = Product(
            id=product_id or uuid4(),
            name=name,
            price=price,
            sku=sku,
            description=description,
        )
        await self.ledger.register(product.id, stock_quantity, is_active)
        self.product_repo.save(product)

        logger.info(
            "Product registered",
            product_id=str(product.id),
            sku=sku,
            price_cents=price.amount_cents,
            stock_quantity=stock_quantity,
            request_id=self.request_id,
        )
        return await self.get_product(product.id)

    async def get_product(self, product_id: UUID) -> ProductSnapshot:
        """Get the current snapshot of a product.

        Raises:
            ProductNotFoundError: If the product is unknown.
        """
        product = self.product_repo.get(product_id)
        counter = await self.ledger.get_counter(product_id)
        if product is None or counter is None:
            raise ProductNotFoundError(str(product_id))

        return ProductSnapshot(
            product_id=product.id,
            name=product.name,
            price=product.price,
            is_active=counter.is_active,
            stock_quantity=counter.stock_quantity,
            sku=product.sku,
        )

    async def adjust_stock(self, product_id: UUID, delta: int) -> ProductSnapshot:
        """Add or remove stock through the ledger.

        The adjustment is journaled as its own transaction. Removals are
        taken before the commit and given back if the journal rejects it;
        additions are applied only after the commit succeeded.

        Args:
            product_id: Product identifier.
            delta: Units to add (positive) or remove (negative).

        Returns:
            Snapshot after the adjustment.

        Raises:
            ProductNotFoundError: If the product is unknown.
            InvalidQuantityError: If delta is zero.
            ProductUnavailableError: If removing stock from an inactive product.
            InsufficientStockError: If removing more than is in stock.
            StorageCommitFailedError: If the journal append failed.
        """
        await self.get_product(product_id)
        if delta == 0:
            raise InvalidQuantityError(delta, "Stock adjustment must be non-zero")

        async with UnitOfWork("inventory.adjust", request_id=self.request_id) as uow:
            if delta > 0:
                uow.after_commit(
                    "add stock", partial(self.ledger.adjust, product_id, delta)
                )
                event_cls = StockReleased
            else:
                await self.ledger.adjust(product_id, delta)
                uow.add_compensation(
                    "give back removed stock",
                    partial(self.ledger.release, product_id, -delta),
                )
                event_cls = StockReserved
            uow.record(
                [
                    event_cls(
                        aggregate_id=str(product_id),
                        aggregate_type="StockCounter",
                        product_id=str(product_id),
                        quantity=abs(delta),
                    )
                ]
            )
            await uow.commit()

        return await self.get_product(product_id)

    async def set_active(self, product_id: UUID, is_active: bool) -> ProductSnapshot:
        """Enable or disable sales of a product.

        Carts keep lines for a deactivated product, but it can no longer be
        added or checked out.

        Raises:
            ProductNotFoundError: If the product is unknown.
        """
        await self.get_product(product_id)
        await self.ledger.set_active(product_id, is_active)

        logger.info(
            "Product activation changed",
            product_id=str(product_id),
            is_active=is_active,
            request_id=self.request_id,
        )
        return await self.get_product(product_id)

    async def seed_demo_catalog(self) -> list[ProductSnapshot]:
        """Register the demo products unless the catalog already has data.

        Returns:
            Snapshots of the seeded products (empty if nothing was seeded).
        """
        if len(self.product_repo) > 0:
            logger.info("Catalog already populated, skipping demo seed")
            return []

        seeded = [
            await self.register_product(
                name=name,
                price=Money.from_decimal(Decimal(price), settings.currency),
                stock_quantity=stock,
                sku=sku,
            )
            for sku, name, price, stock in DEMO_PRODUCTS
        ]
        logger.info("Demo catalog seeded", product_count=len(seeded))
        return seeded


def get_catalog_service(request_id: str | None = None) -> CatalogService:
    """Get catalog service instance.

    Args:
        request_id: Request ID for correlation.

    Returns:
        CatalogService instance.
    """
    return CatalogService(request_id=request_id)
