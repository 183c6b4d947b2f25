"""Integration tests for the order endpoints."""

from decimal import Decimal
from uuid import uuid4

import pytest

from modules.customers.dtos import RequesterDTO
from modules.orders.models import Order

pytestmark = pytest.mark.integration

ORDERS_URL = "/api/v1/orders/"


def detail_url(order_id):
    return f"{ORDERS_URL}{order_id}/"


@pytest.fixture()
def checkout_payload(address):
    return {"shipping_address": address, "payment_method": "credit_card"}


@pytest.fixture()
def filled_cart(customer_client, make_product):
    product = make_product(price="20.00", stock=5)
    customer_client.post(
        "/api/v1/cart/items/", {"product_id": str(product.id), "quantity": 2}, format="json"
    )
    return product


class TestCreate:
    def test_checkout(self, customer_client, filled_cart, checkout_payload, customer):
        response = customer_client.post(ORDERS_URL, checkout_payload, format="json")

        assert response.status_code == 201
        data = response.data
        assert data["status"] == "pending"
        assert data["customer_id"] == customer.id
        assert data["order_number"].startswith("ORD-")
        assert data["order_summary"] == {
            "subtotal": "40.00",
            "tax": "3.20",
            "shipping": "5.99",
            "discount": "0.00",
            "total": "49.19",
        }
        assert data["billing_address"] == data["shipping_address"]
        assert data["can_be_cancelled"] is True
        assert [h["new_status"] for h in data["status_history"]] == ["pending"]
        assert "admin_notes" not in data

        filled_cart.refresh_from_db()
        assert filled_cart.stock_quantity == 3
        assert customer_client.get("/api/v1/cart/").data["items"] == []

    def test_empty_cart(self, customer_client, checkout_payload):
        response = customer_client.post(ORDERS_URL, checkout_payload, format="json")
        assert response.status_code == 400
        assert response.data["errors"][0]["code"] == "empty_cart"

    def test_invalid_address(self, customer_client, filled_cart, checkout_payload):
        checkout_payload["shipping_address"]["zip_code"] = "ABCDE"
        response = customer_client.post(ORDERS_URL, checkout_payload, format="json")
        assert response.status_code == 400
        assert response.data["type"] == "validation_error"
        assert response.data["errors"][0]["attr"] == "shipping_address.zip_code"
        assert not Order.objects.exists()

    def test_invalid_payment_method(self, customer_client, filled_cart, checkout_payload):
        checkout_payload["payment_method"] = "barter"
        response = customer_client.post(ORDERS_URL, checkout_payload, format="json")
        assert response.status_code == 400
        assert response.data["errors"][0]["attr"] == "payment_method"

    def test_stock_drained_after_adding(self, customer_client, filled_cart, checkout_payload):
        filled_cart.stock_quantity = 1
        filled_cart.save()
        response = customer_client.post(ORDERS_URL, checkout_payload, format="json")
        assert response.status_code == 409
        assert response.data["errors"][0]["available"] == 1
        assert not Order.objects.exists()


class TestRead:
    def test_list_is_scoped_to_requester(
        self, customer, make_customer, make_product, place_order, customer_client
    ):
        mine = place_order(customer, (make_product(), 1))
        _, other = make_customer()
        place_order(other, (make_product(), 1))

        response = customer_client.get(ORDERS_URL)

        assert response.status_code == 200
        assert response.data["count"] == 1
        row = response.data["results"][0]
        assert row["id"] == str(mine.id)
        assert row["item_count"] == 1

    def test_admin_sees_all_and_filters(
        self, admin_client, customer, make_customer, make_product, place_order, services
    ):
        place_order(customer, (make_product(), 1))
        _, other = make_customer()
        cancelled = place_order(other, (make_product(), 1))

        services.orders.cancel_order(cancelled.id, RequesterDTO(customer_id=other.id))

        assert admin_client.get(ORDERS_URL).data["count"] == 2
        response = admin_client.get(ORDERS_URL, {"status": "cancelled"})
        assert [r["id"] for r in response.data["results"]] == [str(cancelled.id)]
        response = admin_client.get(ORDERS_URL, {"customer": str(other.id)})
        assert response.data["count"] == 1

    def test_invalid_filter(self, admin_client):
        response = admin_client.get(ORDERS_URL, {"status": "lost"})
        assert response.status_code == 400
        assert response.data["type"] == "validation_error"

    def test_search_by_order_number(self, admin_client, customer, make_product, place_order):
        order = place_order(customer, (make_product(), 1))
        response = admin_client.get(ORDERS_URL, {"search": order.order_number[-6:]})
        assert response.data["count"] == 1

    def test_retrieve_own(self, customer_client, customer, make_product, place_order):
        order = place_order(customer, (make_product(), 1))
        response = customer_client.get(detail_url(order.id))
        assert response.status_code == 200
        assert response.data["order_number"] == order.order_number

    def test_retrieve_foreign_is_forbidden(
        self, customer_client, make_customer, make_product, place_order
    ):
        _, other = make_customer()
        order = place_order(other, (make_product(), 1))
        response = customer_client.get(detail_url(order.id))
        assert response.status_code == 403

    def test_retrieve_missing(self, customer_client):
        response = customer_client.get(detail_url(uuid4()))
        assert response.status_code == 404
        assert response.data["errors"][0]["code"] == "order_not_found"

    def test_admin_sees_admin_notes(self, admin_client, customer, make_product, place_order):
        order = place_order(customer, (make_product(), 1))
        assert "admin_notes" in admin_client.get(detail_url(order.id)).data


class TestCancel:
    def test_customer_cancels(self, customer_client, customer, make_product, place_order):
        product = make_product(stock=5)
        order = place_order(customer, (product, 2))

        response = customer_client.put(
            f"{detail_url(order.id)}cancel/", {"reason": "Ordered twice"}, format="json"
        )

        assert response.status_code == 200
        assert response.data["status"] == "cancelled"
        assert response.data["cancellation_reason"] == "Ordered twice"
        assert response.data["can_be_cancelled"] is False
        product.refresh_from_db()
        assert product.stock_quantity == 5

    def test_cancel_twice(self, customer_client, customer, make_product, place_order):
        order = place_order(customer, (make_product(), 1))
        customer_client.put(f"{detail_url(order.id)}cancel/", {}, format="json")
        response = customer_client.put(f"{detail_url(order.id)}cancel/", {}, format="json")
        assert response.status_code == 400
        assert response.data["errors"][0]["code"] == "invalid_transition"

    def test_cannot_cancel_foreign(
        self, customer_client, make_customer, make_product, place_order
    ):
        _, other = make_customer()
        order = place_order(other, (make_product(), 1))
        response = customer_client.put(f"{detail_url(order.id)}cancel/", {}, format="json")
        assert response.status_code == 403


class TestAdminStatus:
    def test_customer_cannot_change_status(
        self, customer_client, customer, make_product, place_order
    ):
        order = place_order(customer, (make_product(), 1))
        response = customer_client.put(
            f"{detail_url(order.id)}status/", {"status": "confirmed"}, format="json"
        )
        assert response.status_code == 403

    def test_full_lifecycle(self, admin_client, customer, make_product, place_order):
        order = place_order(customer, (make_product(), 1))
        url = f"{detail_url(order.id)}status/"

        for status in ("confirmed", "processing"):
            assert admin_client.put(url, {"status": status}, format="json").status_code == 200
        response = admin_client.put(
            url,
            {"status": "shipped", "tracking_number": "1Z999AA1", "courier": "UPS"},
            format="json",
        )
        assert response.data["tracking_number"] == "1Z999AA1"
        response = admin_client.put(url, {"status": "delivered"}, format="json")

        assert response.status_code == 200
        assert response.data["actual_delivery_date"] is not None
        history = response.data["status_history"]
        assert [h["sequence"] for h in history] == [1, 2, 3, 4, 5]
        assert history[-1]["notes"] == "Order status changed to delivered"

    def test_invalid_transition(self, admin_client, customer, make_product, place_order):
        order = place_order(customer, (make_product(), 1))
        response = admin_client.put(
            f"{detail_url(order.id)}status/", {"status": "delivered"}, format="json"
        )
        assert response.status_code == 400
        assert response.data["errors"][0]["current_status"] == "pending"

    def test_unknown_status(self, admin_client, customer, make_product, place_order):
        order = place_order(customer, (make_product(), 1))
        response = admin_client.put(
            f"{detail_url(order.id)}status/", {"status": "lost"}, format="json"
        )
        assert response.status_code == 400
        assert response.data["type"] == "validation_error"


class TestStatistics:
    def test_admin_only(self, customer_client):
        assert customer_client.get(f"{ORDERS_URL}statistics/").status_code == 403

    def test_statistics(self, admin_client, customer, make_product, place_order):
        order = place_order(customer, (make_product(price="20.00", stock=5), 2))
        response = admin_client.get(f"{ORDERS_URL}statistics/")
        assert response.status_code == 200
        assert response.data["total_orders"] == 1
        assert response.data["orders_by_status"]["pending"]["count"] == 1
        assert Decimal(response.data["revenue"]["total_revenue"]) == order.total

    def test_inverted_range(self, admin_client):
        response = admin_client.get(
            f"{ORDERS_URL}statistics/",
            {"start_date": "2026-02-01", "end_date": "2026-01-01"},
        )
        assert response.status_code == 400
