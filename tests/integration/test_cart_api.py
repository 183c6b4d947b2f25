"""Integration tests for the cart endpoints."""

from decimal import Decimal
from uuid import uuid4

import pytest

from modules.products.models import ProductStatus

pytestmark = pytest.mark.integration

CART_URL = "/api/v1/cart/"
ITEMS_URL = "/api/v1/cart/items/"


def item_url(product_id):
    return f"/api/v1/cart/items/{product_id}/"


class TestCartRead:
    def test_requires_authentication(self, api_client):
        assert api_client.get(CART_URL).status_code == 401

    def test_empty_cart(self, customer_client, customer):
        response = customer_client.get(CART_URL)
        assert response.status_code == 200
        assert response.data["customer_id"] == str(customer.id)
        assert response.data["items"] == []
        assert response.data["total_items"] == 0
        assert Decimal(response.data["total_amount"]) == Decimal("0.00")


class TestCartWrite:
    def test_add_item(self, customer_client, make_product):
        product = make_product(price="7.50")
        response = customer_client.post(
            ITEMS_URL, {"product_id": str(product.id), "quantity": 2}, format="json"
        )
        assert response.status_code == 201
        line = response.data["items"][0]
        assert line["product_id"] == str(product.id)
        assert line["quantity"] == 2
        assert line["unit_price"] == "7.50"
        assert line["subtotal"] == "15.00"
        assert response.data["total_amount"] == "15.00"

    def test_add_item_defaults_to_one(self, customer_client, make_product):
        product = make_product()
        response = customer_client.post(
            ITEMS_URL, {"product_id": str(product.id)}, format="json"
        )
        assert response.data["items"][0]["quantity"] == 1

    def test_add_item_over_stock(self, customer_client, make_product):
        product = make_product(stock=1)
        response = customer_client.post(
            ITEMS_URL, {"product_id": str(product.id), "quantity": 2}, format="json"
        )
        assert response.status_code == 409
        assert response.data["errors"][0]["code"] == "insufficient_stock"
        assert response.data["errors"][0]["shortfall"] == 1

    def test_add_inactive_product(self, customer_client, make_product):
        product = make_product(status=ProductStatus.INACTIVE)
        response = customer_client.post(
            ITEMS_URL, {"product_id": str(product.id)}, format="json"
        )
        assert response.status_code == 400
        assert response.data["errors"][0]["code"] == "product_unavailable"

    def test_add_zero_quantity(self, customer_client, make_product):
        product = make_product()
        response = customer_client.post(
            ITEMS_URL, {"product_id": str(product.id), "quantity": 0}, format="json"
        )
        assert response.status_code == 400
        assert response.data["errors"][0]["code"] == "invalid_quantity"

    def test_update_and_remove(self, customer_client, make_product):
        product = make_product(stock=10)
        customer_client.post(ITEMS_URL, {"product_id": str(product.id)}, format="json")

        response = customer_client.put(item_url(product.id), {"quantity": 4}, format="json")
        assert response.status_code == 200
        assert response.data["total_items"] == 4

        response = customer_client.delete(item_url(product.id))
        assert response.status_code == 200
        assert response.data["items"] == []

    def test_update_to_zero_removes(self, customer_client, make_product):
        product = make_product()
        customer_client.post(ITEMS_URL, {"product_id": str(product.id)}, format="json")
        response = customer_client.put(item_url(product.id), {"quantity": 0}, format="json")
        assert response.data["items"] == []

    def test_remove_missing_line(self, customer_client):
        response = customer_client.delete(item_url(uuid4()))
        assert response.status_code == 404
        assert response.data["errors"][0]["code"] == "line_not_found"

    def test_clear(self, customer_client, make_product):
        customer_client.post(
            ITEMS_URL, {"product_id": str(make_product().id)}, format="json"
        )
        response = customer_client.delete(CART_URL)
        assert response.status_code == 200
        assert response.data["items"] == []
        assert response.data["id"] is not None

    def test_carts_are_private(self, customer_client, make_customer, make_product, api_client):
        customer_client.post(
            ITEMS_URL, {"product_id": str(make_product().id)}, format="json"
        )
        other_user, _ = make_customer()
        api_client.force_authenticate(user=other_user)
        assert api_client.get(CART_URL).data["items"] == []


class TestValidateAndFix:
    def test_validate_empty(self, customer_client):
        response = customer_client.post(f"{CART_URL}validate/")
        assert response.status_code == 400
        assert response.data["errors"][0]["code"] == "empty_cart"

    def test_validate_reports_price_change(self, customer_client, make_product):
        product = make_product(price="10.00")
        customer_client.post(ITEMS_URL, {"product_id": str(product.id)}, format="json")
        product.price = Decimal("12.00")
        product.save()

        response = customer_client.post(f"{CART_URL}validate/")

        assert response.status_code == 200
        assert response.data["is_valid"] is False
        issue = response.data["issues"][0]
        assert issue["kind"] == "price_changed"
        assert issue["old_price"] == "10.00"
        assert issue["new_price"] == "12.00"
        assert response.data["summary"]["valid_items_count"] == 1

    def test_fix(self, customer_client, make_product):
        product = make_product(price="10.00")
        customer_client.post(ITEMS_URL, {"product_id": str(product.id)}, format="json")
        product.price = Decimal("8.00")
        product.save()

        response = customer_client.patch(f"{CART_URL}fix/")

        assert response.status_code == 200
        assert response.data["items"][0]["unit_price"] == "8.00"

    def test_fix_without_cart(self, customer_client):
        assert customer_client.patch(f"{CART_URL}fix/").status_code == 404
