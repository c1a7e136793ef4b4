"""Product Catalog.

In-memory product catalog joined with the inventory ledger's stock
counters.
"""

from app.catalog.models import Product
from app.catalog.repository import (
    ProductRepository,
    get_product_repository,
    reset_product_repository,
)
from app.catalog.service import DEMO_PRODUCTS, CatalogService, get_catalog_service

__all__ = [
    # Models
    "Product",
    # Repository
    "ProductRepository",
    "get_product_repository",
    "reset_product_repository",
    # Service
    "CatalogService",
    "DEMO_PRODUCTS",
    "get_catalog_service",
]
