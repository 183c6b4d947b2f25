"""Tests for OrderDjangoRepository."""

from decimal import Decimal

import pytest

from modules.core.exceptions import ValidationFailure
from modules.orders.constants import OrderStatus
from modules.orders.exceptions import OrderNumberConflict
from modules.orders.repositories.django_repository import OrderDjangoRepository

pytestmark = pytest.mark.integration


@pytest.fixture()
def repo():
    return OrderDjangoRepository()


def _data(customer, address, order_number="ORD-20260101-AAAAAA"):
    return {
        "order_number": order_number,
        "customer_id": customer.id,
        "shipping_address": address,
        "billing_address": address,
        "payment_method": "cash_on_delivery",
        "subtotal": Decimal("10.00"),
        "tax": Decimal("0.80"),
        "shipping": Decimal("5.99"),
        "discount": Decimal("0.00"),
        "total": Decimal("16.79"),
    }


def _item(product, quantity=1):
    return {
        "product_id": product.id,
        "product_name": product.name,
        "quantity": quantity,
        "unit_price": product.price,
        "subtotal": product.price * quantity,
        "prescription_required": False,
    }


def test_create_with_items(repo, customer, address, make_product):
    first, second = make_product(), make_product()
    order = repo.create(_data(customer, address), [_item(first), _item(second, 2)])

    fetched = repo.get_by_id(str(order.id))
    assert [i.product_id for i in fetched.items.order_by("position")] == [first.id, second.id]
    assert repo.order_number_exists(order.order_number)


def test_duplicate_order_number(repo, customer, address, make_product):
    repo.create(_data(customer, address), [_item(make_product())])
    with pytest.raises(OrderNumberConflict):
        repo.create(_data(customer, address), [_item(make_product())])


def test_get_by_invalid_id(repo):
    assert repo.get_by_id("not-a-uuid") is None
    assert repo.get_for_update("not-a-uuid") is None


def test_history_sequence(repo, customer, address, make_product):
    order = repo.create(_data(customer, address), [_item(make_product())])
    repo.add_history(order, OrderStatus.PENDING, "Order created")
    second = repo.add_history(order, OrderStatus.CONFIRMED, old_status=OrderStatus.PENDING)
    assert second.sequence == 2


def test_list_filters(repo, customer, make_customer, address, make_product):
    repo.create(_data(customer, address, "ORD-20260101-AAAAAA"), [_item(make_product())])
    _, other = make_customer()
    repo.create(_data(other, address, "ORD-20260101-BBBBBB"), [_item(make_product())])

    assert repo.list().count() == 2
    assert repo.list(customer_id=customer.id).count() == 1
    assert repo.list({"search": "bbbbbb"}).get().customer_id == other.id
    assert repo.list({"min_total": "20"}).count() == 0

    with pytest.raises(ValidationFailure):
        repo.list({"start_date": "yesterday"})
