from io import StringIO

import pytest
from django.core.management import call_command

from modules.carts.models import Cart
from modules.orders.constants import OrderStatus
from modules.orders.models import Order
from modules.products.models import Product

pytestmark = pytest.mark.unit


def test_seed_data_builds_demo_state():
    out = StringIO()
    call_command("seed_data", stdout=out)

    assert "Seed completed" in out.getvalue()
    assert Product.objects.count() == 7
    order = Order.objects.get()
    assert order.status == OrderStatus.CONFIRMED
    assert order.requires_prescription is True
    assert Product.objects.get(sku="PAR-500").stock_quantity == 118
    cart = Cart.objects.get(customer=order.customer)
    assert [line.product.sku for line in cart.lines] == ["VTC-1000"]


def test_seed_data_is_idempotent():
    call_command("seed_data", stdout=StringIO())
    call_command("seed_data", stdout=StringIO())
    assert Order.objects.count() == 1
    assert Product.objects.count() == 7
