"""End-to-end order scenarios through the services."""

from decimal import Decimal

import pytest

from modules.core.models import OutboxEvent
from modules.customers.dtos import RequesterDTO
from modules.inventory.exceptions import InsufficientStock
from modules.orders.constants import OrderStatus
from modules.orders.dtos import AddressDTO, CreateOrderDTO, UpdateOrderStatusDTO
from modules.orders.exceptions import InvalidTransition
from modules.orders.models import Order

pytestmark = pytest.mark.integration


def _advance(services, order, *statuses):
    for status in statuses:
        order = services.orders.update_status(order.id, UpdateOrderStatusDTO(status=status))
    return order


def test_checkout_then_cancel_restores_everything(
    customer, make_product, place_order, services
):
    a = make_product(price="20.00", stock=5)
    b = make_product(price="20.00", stock=1)

    order = place_order(customer, (a, 1), (b, 1))

    assert order.subtotal == Decimal("40.00")
    assert order.tax == Decimal("3.20")
    assert order.shipping == Decimal("5.99")
    assert order.total == Decimal("49.19")
    a.refresh_from_db()
    b.refresh_from_db()
    assert (a.stock_quantity, b.stock_quantity) == (4, 0)
    assert services.carts.snapshot(customer.id).is_empty

    services.orders.cancel_order(order.id, RequesterDTO(customer_id=customer.id))

    a.refresh_from_db()
    b.refresh_from_db()
    assert (a.stock_quantity, b.stock_quantity) == (5, 1)


def test_failed_checkout_leaves_no_trace(customer, make_product, services, address):
    a = make_product(stock=5)
    b = make_product(stock=5)
    services.carts.add_item(customer.id, a.id, 2)
    services.carts.add_item(customer.id, b.id, 3)
    b.stock_quantity = 2
    b.save()

    with pytest.raises(InsufficientStock):
        services.orders.create_order(
            CreateOrderDTO(
                customer_id=customer.id,
                shipping_address=AddressDTO(**address),
                payment_method="cash_on_delivery",
            )
        )

    a.refresh_from_db()
    b.refresh_from_db()
    assert (a.stock_quantity, b.stock_quantity) == (5, 2)
    assert not Order.objects.exists()
    assert not OutboxEvent.objects.exists()
    assert len(services.carts.snapshot(customer.id).lines) == 2


def test_large_order_ships_free(customer, make_product, place_order):
    order = place_order(customer, (make_product(price="25.00", stock=5), 3))
    assert order.shipping == Decimal("0.00")
    assert order.total == Decimal("81.00")


def test_prescription_flag(customer, make_product, place_order):
    order = place_order(
        customer, (make_product(), 1), (make_product(prescription=True), 1)
    )
    assert order.requires_prescription is True


def test_order_keeps_catalog_snapshot(customer, make_product, place_order):
    product = make_product(price="10.00", name="Paracetamol 500mg")
    order = place_order(customer, (product, 2))
    product.name = "Renamed"
    product.price = Decimal("99.00")
    product.save()

    item = Order.objects.get(id=order.id).items.get()
    assert item.product_name == "Paracetamol 500mg"
    assert item.unit_price == Decimal("10.00")
    assert item.subtotal == Decimal("20.00")


def test_history_sequence_is_gapless(customer, make_product, place_order, services):
    order = place_order(customer, (make_product(), 1))
    order = _advance(services, order, "confirmed", "processing", "shipped", "delivered")
    order = _advance(services, order, "delivered")

    history = list(order.status_history.all())
    assert [h.sequence for h in history] == [1, 2, 3, 4, 5, 6]
    assert [h.new_status for h in history] == [
        "pending",
        "confirmed",
        "processing",
        "shipped",
        "delivered",
        "delivered",
    ]
    assert history[0].old_status is None
    assert all(h.old_status == prev.new_status for prev, h in zip(history, history[1:]))


def test_redelivery_keeps_first_delivery_date(customer, make_product, place_order, services):
    order = place_order(customer, (make_product(), 1))
    order = _advance(services, order, "confirmed", "processing", "shipped", "delivered")
    delivered_at = order.actual_delivery_date

    order = _advance(services, order, "delivered")

    assert order.actual_delivery_date == delivered_at


def test_delivered_order_cannot_be_cancelled(customer, make_product, place_order, services):
    product = make_product(stock=5)
    order = place_order(customer, (product, 2))
    _advance(services, order, "confirmed", "processing", "shipped", "delivered")

    with pytest.raises(InvalidTransition):
        services.orders.cancel_order(order.id, RequesterDTO(customer_id=customer.id))

    product.refresh_from_db()
    assert product.stock_quantity == 3


def test_admin_cancel_restores_stock(
    customer, admin_user, make_product, place_order, services
):
    product = make_product(stock=5)
    order = place_order(customer, (product, 2))
    order = _advance(services, order, "confirmed")

    order = services.orders.update_status(
        order.id,
        UpdateOrderStatusDTO(status="cancelled", note="Prescription rejected"),
        actor_id=admin_user.pk,
    )

    assert order.status == OrderStatus.CANCELLED
    assert order.cancellation_reason == "Prescription rejected"
    product.refresh_from_db()
    assert product.stock_quantity == 5
    last = order.status_history.last()
    assert last.actor_id == admin_user.pk
    assert last.notes == "Order cancelled: Prescription rejected"


def test_returned_is_terminal(customer, make_product, place_order, services):
    order = place_order(customer, (make_product(), 1))
    order = _advance(
        services, order, "confirmed", "processing", "shipped", "delivered", "returned"
    )
    assert order.is_terminal
    with pytest.raises(InvalidTransition):
        _advance(services, order, "delivered")


def test_every_change_writes_an_outbox_event(customer, make_product, place_order, services):
    order = place_order(customer, (make_product(), 1))
    _advance(services, order, "confirmed")
    services.orders.cancel_order(order.id, RequesterDTO(customer_id=customer.id))

    types = list(
        OutboxEvent.objects.filter(aggregate_id=str(order.id))
        .order_by("created_at")
        .values_list("event_type", flat=True)
    )
    assert types == ["OrderCreated", "OrderStatusChanged", "OrderCancelled"]


@pytest.fixture()
def scenario_products(make_product):
    a = make_product(price="10.00", stock=5, name="Product A")
    b = make_product(price="20.00", stock=1, name="Product B")
    return a, b


def test_scenario_two_lines_reserved(customer, scenario_products, place_order):
    a, b = scenario_products

    order = place_order(customer, (a, 2), (b, 1))

    assert order.subtotal == Decimal("40.00")
    assert order.status == OrderStatus.PENDING
    a.refresh_from_db()
    b.refresh_from_db()
    assert (a.stock_quantity, b.stock_quantity) == (3, 0)


def test_scenario_second_line_sold_out(customer, scenario_products, services, address):
    a, b = scenario_products
    services.carts.add_item(customer.id, a.id, 2)
    services.carts.add_item(customer.id, b.id, 1)
    b.stock_quantity = 0
    b.save()

    with pytest.raises(InsufficientStock):
        services.orders.create_order(
            CreateOrderDTO(
                customer_id=customer.id,
                shipping_address=AddressDTO(**address),
                payment_method="credit_card",
            )
        )

    a.refresh_from_db()
    assert a.stock_quantity == 5
    assert not Order.objects.exists()


def test_delivered_then_cancel_leaves_order_unchanged(
    customer, scenario_products, place_order, services
):
    a, _ = scenario_products
    order = place_order(customer, (a, 1))
    order = _advance(services, order, "confirmed", "processing", "shipped", "delivered")
    history_before = order.status_history.count()

    with pytest.raises(InvalidTransition):
        services.orders.update_status(order.id, UpdateOrderStatusDTO(status="cancelled"))

    order.refresh_from_db()
    assert order.status == OrderStatus.DELIVERED
    assert order.cancellation_reason == ""
    assert order.status_history.count() == history_before
