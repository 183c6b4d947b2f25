"""Django ORM implementation of the Customer repository.

Methods return ``None`` for missing rows; the Service Layer decides how
to translate a missing entity into a domain error.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.customers.models import Customer
from modules.customers.repositories.interfaces import ICustomerRepository

logger = structlog.get_logger(__name__)


class CustomerDjangoRepository(ICustomerRepository):
    """Concrete Customer repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Customer]:
        """Retrieve a live customer by primary key.

        Returns ``None`` for non-existent, soft-deleted or invalid IDs.
        """
        try:
            return Customer.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Customer]:
        queryset = Customer.objects.alive()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Customer) -> Customer:
        entity.save()
        logger.info("customer.saved", customer_id=str(entity.id))
        return entity

    def get_by_user(self, user: Any) -> Optional[Customer]:
        return Customer.objects.alive().filter(user_id=user.pk).first()

    def get_or_create_for_user(self, user: Any) -> Customer:
        full_name = user.get_full_name() if hasattr(user, "get_full_name") else ""
        customer, created = Customer.objects.get_or_create(
            user_id=user.pk,
            defaults={
                "name": full_name or user.get_username(),
                "email": getattr(user, "email", "") or "",
            },
        )
        if created:
            logger.info(
                "customer.created_for_user",
                customer_id=str(customer.id),
                user_id=user.pk,
            )
        return customer
