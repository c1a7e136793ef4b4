"""Catalog models.

A catalog product carries the descriptive data (name, SKU, price). Stock
and the active flag are not stored here; they live in the inventory
ledger's counter for the same product ID.
"""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

from app.domain.base import utcnow
from app.domain.value_objects import Money


@dataclass
class Product:
    """Product entity in the catalog.

    Attributes:
        id: Unique product identifier (UUID).
        name: Display name.
        price: Current unit price.
        sku: Stock Keeping Unit (optional).
        description: Product description (optional).
        created_at: Creation timestamp.
    """

    name: str
    price: Money
    id: UUID = field(default_factory=uuid4)
    sku: str | None = None
    description: str | None = None
    created_at: datetime = field(default_factory=utcnow)
