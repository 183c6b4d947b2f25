"""Django ORM implementation of the Cart repository."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db.models import Max

from modules.carts.models import Cart, CartItem
from modules.carts.repositories.interfaces import ICartRepository

logger = structlog.get_logger(__name__)


class CartDjangoRepository(ICartRepository):
    """Concrete Cart repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Cart]:
        try:
            return Cart.objects.prefetch_related("items__product").filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Cart]:
        queryset = Cart.objects.prefetch_related("items__product")
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def save(self, entity: Cart) -> Cart:
        entity.save()
        return entity

    def get_for_customer(self, customer_id: UUID) -> Optional[Cart]:
        return (
            Cart.objects.prefetch_related("items__product")
            .filter(customer_id=customer_id)
            .first()
        )

    def get_for_update(self, customer_id: UUID, create: bool = False) -> Optional[Cart]:
        """Lock and return the cart.  Must run inside ``transaction.atomic``."""
        if create:
            _, created = Cart.objects.get_or_create(customer_id=customer_id)
            if created:
                logger.info("cart.created", customer_id=str(customer_id))
        return Cart.objects.select_for_update().filter(customer_id=customer_id).first()

    def get_line(self, cart: Cart, product_id: UUID) -> Optional[CartItem]:
        try:
            return (
                CartItem.objects.select_related("product")
                .filter(cart=cart, product_id=product_id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def add_line(
        self, cart: Cart, product_id: UUID, quantity: int, unit_price: Decimal
    ) -> CartItem:
        last = cart.items.aggregate(last=Max("position"))["last"]
        return CartItem.objects.create(
            cart=cart,
            product_id=product_id,
            quantity=quantity,
            unit_price=unit_price,
            position=0 if last is None else last + 1,
        )

    def save_line(self, line: CartItem) -> CartItem:
        line.save(update_fields=["quantity", "unit_price"])
        return line

    def delete_line(self, line: CartItem) -> None:
        line.delete()

    def clear_lines(self, cart: Cart) -> int:
        removed, _ = cart.items.all().delete()
        return removed
