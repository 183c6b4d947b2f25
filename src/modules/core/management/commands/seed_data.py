from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from modules.carts.repositories.django_repository import CartDjangoRepository
from modules.carts.services import CartService
from modules.customers.models import Customer
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.inventory.ledger import DjangoInventoryLedger
from modules.orders.constants import OrderStatus, PaymentMethod
from modules.orders.dtos import AddressDTO, CreateOrderDTO, UpdateOrderStatusDTO
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product, ProductStatus
from modules.products.repositories.django_repository import ProductDjangoRepository

CATALOG = [
    # sku, name, generic name, price, stock, prescription, status
    ("PAR-500", "Paracetamol 500mg", "Acetaminophen", Decimal("10.00"), 120, False, ProductStatus.ACTIVE),
    ("IBU-200", "Ibuprofen 200mg", "Ibuprofen", Decimal("8.49"), 80, False, ProductStatus.ACTIVE),
    ("AMX-500", "Amoxicillin 500mg", "Amoxicillin", Decimal("24.90"), 40, True, ProductStatus.ACTIVE),
    ("LOR-10", "Loratadine 10mg", "Loratadine", Decimal("12.75"), 60, False, ProductStatus.ACTIVE),
    ("OMP-20", "Omeprazole 20mg", "Omeprazole", Decimal("15.30"), 8, False, ProductStatus.ACTIVE),
    ("VTC-1000", "Vitamin C 1000mg", "Ascorbic acid", Decimal("6.99"), 200, False, ProductStatus.ACTIVE),
    ("RNT-150", "Ranitidine 150mg", "Ranitidine", Decimal("9.10"), 0, False, ProductStatus.INACTIVE),
]

SAMPLE_ADDRESS = AddressDTO(
    first_name="Jane",
    last_name="Doe",
    street="100 Main Street",
    city="Springfield",
    state="IL",
    zip_code="62701",
    phone="+1 (217) 555-0100",
)


class Command(BaseCommand):
    help = "Seed database with a small pharmacy catalog, users, a cart and an order."

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write("Seeding development data...")

        users_created = self._seed_users()
        products = self._seed_products()
        orders_created = self._seed_order(products)

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"products={len(products)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self) -> int:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        if not User.objects.filter(username="customer").exists():
            User.objects.create_user(
                "customer",
                password="customer123",
                email="customer@example.com",
                first_name="Jane",
                last_name="Doe",
            )
            created += 1
        return created

    def _seed_products(self) -> list[Product]:
        self.stdout.write("Creating products...")
        products: list[Product] = []
        for sku, name, generic, price, stock, prescription, status in CATALOG:
            product, _ = Product.objects.get_or_create(
                sku=sku,
                defaults={
                    "name": name,
                    "generic_name": generic,
                    "price": price,
                    "stock_quantity": stock,
                    "prescription_required": prescription,
                    "status": status,
                },
            )
            products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products

    def _seed_order(self, products: list[Product]) -> int:
        customer_repo = CustomerDjangoRepository()
        user = get_user_model().objects.get(username="customer")
        customer = customer_repo.get_or_create_for_user(user)
        if Customer.objects.filter(id=customer.id, orders__isnull=False).exists():
            self.stdout.write(self.style.WARNING("Skipping order (customer already has one)."))
            return 0

        self.stdout.write("Creating cart and order...")
        catalog = ProductDjangoRepository()
        cart_service = CartService(CartDjangoRepository(), customer_repo, catalog)
        order_service = OrderService(
            order_repository=OrderDjangoRepository(),
            customer_repository=customer_repo,
            catalog=catalog,
            ledger=DjangoInventoryLedger(),
            cart_service=cart_service,
        )

        by_sku = {product.sku: product for product in products}
        cart_service.add_item(customer.id, by_sku["PAR-500"].id, 2)
        cart_service.add_item(customer.id, by_sku["AMX-500"].id, 1)
        order = order_service.create_order(
            CreateOrderDTO(
                customer_id=customer.id,
                shipping_address=SAMPLE_ADDRESS,
                payment_method=PaymentMethod.CASH_ON_DELIVERY,
                notes="Seed order",
            ),
            actor_id=user.pk,
        )
        order_service.update_status(
            order.id,
            UpdateOrderStatusDTO(status=OrderStatus.CONFIRMED, note="Seed confirmation"),
        )

        # leave something in the cart for the cart endpoints
        cart_service.add_item(customer.id, by_sku["VTC-1000"].id, 3)
        self.stdout.write(self.style.SUCCESS("Creating cart and order... Done!"))
        return 1
