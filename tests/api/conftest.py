"""Shared fixtures for API tests."""

import asyncio
from collections.abc import Callable
from decimal import Decimal
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from app.catalog.service import get_catalog_service
from app.domain.value_objects import Money
from app.main import app


@pytest.fixture
def client() -> TestClient:
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def user_id() -> str:
    return str(uuid4())


@pytest.fixture
def seed_product() -> Callable[..., str]:
    """Register a product and return its ID as a string."""

    def _seed(
        name: str = "Widget",
        price: str = "10.00",
        stock: int = 10,
        is_active: bool = True,
    ) -> str:
        snapshot = asyncio.run(
            get_catalog_service().register_product(
                name=name,
                price=Money.from_decimal(Decimal(price)),
                stock_quantity=stock,
                is_active=is_active,
            )
        )
        return str(snapshot.product_id)

    return _seed


@pytest.fixture
def order_payload(user_id: str) -> dict:
    """Checkout request body for the test user."""
    return {
        "user_id": user_id,
        "shipping_address": "1 Main St, Springfield",
        "billing_address": "1 Main St, Springfield",
        "payment_method": "card",
    }
