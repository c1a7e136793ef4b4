"""Product repository.

In-memory store for catalog products keyed by product ID.
"""

from uuid import UUID

from app.catalog.models import Product


class ProductRepository:
    """In-memory repository for catalog products.

    In production, this would be replaced with database persistence.
    """

    def __init__(self) -> None:
        self._products: dict[UUID, Product] = {}
        self._by_sku: dict[str, UUID] = {}

    def save(self, product: Product) -> Product:
        """Save a product."""
        self._products[product.id] = product
        if product.sku:
            self._by_sku[product.sku] = product.id
        return product

    def get(self, product_id: UUID) -> Product | None:
        """Get product by ID."""
        return self._products.get(product_id)

    def get_by_sku(self, sku: str) -> Product | None:
        """Get product by SKU."""
        product_id = self._by_sku.get(sku)
        return self._products.get(product_id) if product_id else None

    def list_all(self) -> list[Product]:
        """List products, oldest first."""
        return sorted(self._products.values(), key=lambda p: p.created_at)

    def __len__(self) -> int:
        return len(self._products)


# Global repository instance
_product_repo: ProductRepository | None = None


def get_product_repository() -> ProductRepository:
    """Get product repository singleton."""
    global _product_repo
    if _product_repo is None:
        _product_repo = ProductRepository()
    return _product_repo


def reset_product_repository() -> None:
    """Reset product repository (for testing)."""
    global _product_repo
    _product_repo = ProductRepository()
