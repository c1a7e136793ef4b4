"""Tests for order API endpoints."""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from app.infrastructure.unit_of_work import set_transaction_journal


def stock_of(client: TestClient, product_id: str) -> int:
    return client.get(f"/products/{product_id}").json()["stock_quantity"]


@pytest.fixture
def placed_order(client: TestClient, user_id: str, seed_product, order_payload):
    """Order for 2 units of a product with 5 in stock."""
    product_id = seed_product(price="10.00", stock=5)
    client.post(f"/cart/{user_id}/items", json={"product_id": product_id, "quantity": 2})
    response = client.post("/orders/create-from-cart", json=order_payload)
    assert response.status_code == 201
    return response.json(), product_id


class TestCreateFromCart:
    """Tests for POST /orders/create-from-cart."""

    def test_checkout(self, client: TestClient, user_id: str, placed_order) -> None:
        order, product_id = placed_order

        assert order["status"] == "pending"
        assert order["payment_status"] == "pending"
        assert order["total_amount"] == {"amount": 2000, "currency": "USD"}
        assert order["item_count"] == 2
        assert order["can_be_cancelled"] is True
        assert order["order_number"].startswith("ORD-")
        assert stock_of(client, product_id) == 3
        assert client.get(f"/cart/{user_id}").json()["items"] == []

    def test_empty_cart(self, client: TestClient, order_payload) -> None:
        response = client.post("/orders/create-from-cart", json=order_payload)
        assert response.status_code == 400
        assert response.json()["error_code"] == "EMPTY_CART"

    def test_insufficient_stock_changes_nothing(
        self, client: TestClient, user_id: str, seed_product, order_payload
    ) -> None:
        product_id = seed_product(stock=3)
        client.post(f"/cart/{user_id}/items", json={"product_id": product_id, "quantity": 3})
        client.patch(f"/products/{product_id}/stock", params={"quantity": -1})

        response = client.post("/orders/create-from-cart", json=order_payload)

        assert response.status_code == 409
        assert response.json()["error_code"] == "INSUFFICIENT_STOCK"
        assert stock_of(client, product_id) == 2
        assert client.get(f"/cart/{user_id}/count").json() == {"count": 3}
        assert client.get("/orders").json()["total"] == 0

    def test_storage_failure_is_opaque(
        self, client: TestClient, user_id: str, seed_product, order_payload, failing_journal
    ) -> None:
        """Commit failures surface as a generic 500 and leave state intact."""
        product_id = seed_product(stock=3)
        client.post(f"/cart/{user_id}/items", json={"product_id": product_id, "quantity": 1})
        set_transaction_journal(failing_journal)

        response = client.post(
            "/orders/create-from-cart",
            json=order_payload,
            headers={"X-Request-ID": "req-commit"},
        )

        assert response.status_code == 500
        data = response.json()
        assert data["error_code"] == "STORAGE_COMMIT_FAILED"
        assert data["details"] == {}
        assert data["request_id"] == "req-commit"
        assert "journal unavailable" not in data["message"]
        assert stock_of(client, product_id) == 3

    def test_missing_fields(self, client: TestClient, user_id: str) -> None:
        response = client.post("/orders/create-from-cart", json={"user_id": user_id})
        assert response.status_code == 422


class TestOrderQueries:
    """Tests for order lookups."""

    def test_get_order(self, client: TestClient, placed_order) -> None:
        order, _ = placed_order

        response = client.get(f"/orders/{order['id']}")

        assert response.status_code == 200
        assert response.json()["order_number"] == order["order_number"]

    def test_get_unknown_order(self, client: TestClient) -> None:
        response = client.get(f"/orders/{uuid4()}")
        assert response.status_code == 404
        assert response.json()["error_code"] == "ORDER_NOT_FOUND"

    def test_get_by_number(self, client: TestClient, placed_order) -> None:
        order, _ = placed_order
        response = client.get(f"/orders/number/{order['order_number']}")
        assert response.json()["id"] == order["id"]

    def test_get_items(self, client: TestClient, placed_order) -> None:
        order, product_id = placed_order

        items = client.get(f"/orders/{order['id']}/items").json()

        assert len(items) == 1
        assert items[0]["product_id"] == product_id
        assert items[0]["total_price"]["amount"] == 2000

    def test_user_orders(self, client: TestClient, user_id: str, placed_order) -> None:
        orders = client.get(f"/orders/user/{user_id}").json()

        assert [o["id"] for o in orders] == [placed_order[0]["id"]]
        assert client.get(f"/orders/user/{user_id}/count").json() == {"count": 1}

    def test_list_and_count_by_status(self, client: TestClient, placed_order) -> None:
        data = client.get("/orders", params={"status": "pending"}).json()
        assert data["total"] == 1
        assert data["has_more"] is False

        assert client.get("/orders/status/pending/count").json() == {"count": 1}
        assert client.get("/orders/status/shipped/count").json() == {"count": 0}


class TestOrderLifecycle:
    """Tests for status updates and cancellation."""

    def test_cancel_restores_stock(self, client: TestClient, placed_order) -> None:
        order, product_id = placed_order

        response = client.delete(f"/orders/{order['id']}/cancel")

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        assert response.json()["can_be_cancelled"] is False
        assert stock_of(client, product_id) == 5

    def test_cancel_twice(self, client: TestClient, placed_order) -> None:
        order, product_id = placed_order
        client.delete(f"/orders/{order['id']}/cancel")

        response = client.delete(f"/orders/{order['id']}/cancel")

        assert response.status_code == 409
        assert response.json()["error_code"] == "ORDER_NOT_CANCELLABLE"
        assert stock_of(client, product_id) == 5

    def test_cancel_shipped_order(self, client: TestClient, placed_order) -> None:
        order, product_id = placed_order
        client.patch(f"/orders/{order['id']}/status", json={"status": "shipped"})

        response = client.delete(f"/orders/{order['id']}/cancel")

        assert response.status_code == 409
        assert stock_of(client, product_id) == 3

    def test_update_status(self, client: TestClient, placed_order) -> None:
        order, _ = placed_order

        response = client.patch(f"/orders/{order['id']}/status", json={"status": "confirmed"})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "confirmed"
        assert data["allowed_transitions"] == ["cancelled", "processing"]

    def test_update_status_to_cancelled_restores_stock(
        self, client: TestClient, placed_order
    ) -> None:
        order, product_id = placed_order

        response = client.patch(f"/orders/{order['id']}/status", json={"status": "cancelled"})

        assert response.status_code == 200
        assert stock_of(client, product_id) == 5

    def test_update_status_invalid_value(self, client: TestClient, placed_order) -> None:
        order, _ = placed_order
        response = client.patch(f"/orders/{order['id']}/status", json={"status": "lost"})
        assert response.status_code == 422

    def test_update_payment_status(self, client: TestClient, placed_order) -> None:
        order, _ = placed_order

        response = client.patch(
            f"/orders/{order['id']}/payment-status", json={"payment_status": "paid"}
        )

        assert response.status_code == 200
        assert response.json()["payment_status"] == "paid"
        assert response.json()["status"] == "pending"
