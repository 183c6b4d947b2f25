from django.core.management.base import BaseCommand, CommandError

from modules.carts.repositories.django_repository import CartDjangoRepository
from modules.carts.services import CartService
from modules.customers.exceptions import CustomerNotFound
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.customers.services import CustomerService
from modules.products.repositories.django_repository import ProductDjangoRepository


class Command(BaseCommand):
    help = "Deactivate a customer and retire their cart."

    def add_arguments(self, parser):
        parser.add_argument("customer_id", help="Customer primary key.")

    def handle(self, *args, **options):
        customers = CustomerDjangoRepository()
        carts = CartService(CartDjangoRepository(), customers, ProductDjangoRepository())
        service = CustomerService(customers, cart_retirer=carts)

        try:
            customer = service.deactivate_customer(options["customer_id"])
        except CustomerNotFound as exc:
            raise CommandError(exc.message) from exc

        self.stdout.write(self.style.SUCCESS(f"Customer {customer.id} deactivated."))
