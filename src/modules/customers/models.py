"""Customer model: the shopping identity behind an authenticated user.

Business rules implemented:
- One customer per Django user (created lazily on first authenticated use).
- Inactive customers cannot mutate their cart or place orders
  (enforced at service layer).
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel): orders
  reference customers with ``PROTECT``.
"""

from __future__ import annotations

import structlog
from django.conf import settings
from django.db import models

from modules.core.models import SoftDeleteModel

logger = structlog.get_logger(__name__)


class Customer(SoftDeleteModel):
    """Customer aggregate root.

    Authentication lives in ``django.contrib.auth``; this model only holds
    what the ordering core needs: ownership of carts and orders, the
    active flag, and contact details used as address defaults.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="customer",
    )
    name = models.CharField(max_length=255, blank=True, default="")
    email = models.EmailField(max_length=254, blank=True, default="")
    phone = models.CharField(max_length=20, blank=True, default="")
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "customers"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["is_active"], name="customers_active_idx"),
        ]

    def __str__(self) -> str:
        return self.name or f"customer:{self.user_id}"
