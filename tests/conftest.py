from decimal import Decimal
from types import SimpleNamespace

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from modules.carts.repositories.django_repository import CartDjangoRepository
from modules.carts.services import CartService
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.inventory.ledger import DjangoInventoryLedger
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product, ProductStatus
from modules.products.repositories.django_repository import ProductDjangoRepository

User = get_user_model()


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Users and customers
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_customer():
    """Create a Django user and its Customer; returns ``(user, customer)``."""
    counter = {"n": 0}

    def _make(username=None, is_staff=False, is_active=True):
        counter["n"] += 1
        user = User.objects.create_user(
            username=username or f"shopper{counter['n']}",
            password="testpass123",
            is_staff=is_staff,
        )
        customer = CustomerDjangoRepository().get_or_create_for_user(user)
        if not is_active:
            customer.is_active = False
            customer.save()
        return user, customer

    return _make


@pytest.fixture()
def customer_user(make_customer):
    return make_customer("alice")


@pytest.fixture()
def customer(customer_user):
    return customer_user[1]


@pytest.fixture()
def customer_client(customer_user):
    client = APIClient()
    client.force_authenticate(user=customer_user[0])
    return client


@pytest.fixture()
def admin_user(make_customer):
    return make_customer("pharmacist", is_staff=True)[0]


@pytest.fixture()
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_product():
    counter = {"n": 0}

    def _make(
        price="10.00",
        stock=10,
        name=None,
        prescription=False,
        status=ProductStatus.ACTIVE,
        min_stock=2,
    ):
        counter["n"] += 1
        return Product.objects.create(
            sku=f"TEST-{counter['n']:03d}",
            name=name or f"Test Drug {counter['n']}",
            price=Decimal(price),
            stock_quantity=stock,
            min_stock=min_stock,
            prescription_required=prescription,
            status=status,
        )

    return _make


@pytest.fixture()
def address():
    return {
        "first_name": "Jane",
        "last_name": "Doe",
        "street": "100 Main Street",
        "city": "Springfield",
        "state": "IL",
        "zip_code": "62701",
        "country": "USA",
        "phone": "+1 (217) 555-0100",
    }


# ---------------------------------------------------------------------------
# Services wired to the Django repositories
# ---------------------------------------------------------------------------


def build_services():
    customers = CustomerDjangoRepository()
    catalog = ProductDjangoRepository()
    ledger = DjangoInventoryLedger()
    cart_service = CartService(CartDjangoRepository(), customers, catalog)
    order_service = OrderService(
        order_repository=OrderDjangoRepository(),
        customer_repository=customers,
        catalog=catalog,
        ledger=ledger,
        cart_service=cart_service,
    )
    return SimpleNamespace(
        carts=cart_service, orders=order_service, ledger=ledger, catalog=catalog
    )


@pytest.fixture()
def services():
    return build_services()


@pytest.fixture()
def place_order(services, address):
    """Fill the customer's cart and check out; returns the created order."""
    from modules.orders.dtos import AddressDTO, CreateOrderDTO

    def _place(customer, *lines, payment_method="cash_on_delivery"):
        for product, quantity in lines:
            services.carts.add_item(customer.id, product.id, quantity)
        return services.orders.create_order(
            CreateOrderDTO(
                customer_id=customer.id,
                shipping_address=AddressDTO(**address),
                payment_method=payment_method,
            )
        )

    return _place
