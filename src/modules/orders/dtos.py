"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``AddressDTO``: shipping / billing address value object.
- ``CreateOrderDTO``: checkout request (the lines come from the cart).
- ``UpdateOrderStatusDTO``: admin status change.
"""

from __future__ import annotations

import re
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from modules.orders.constants import OrderStatus, PaymentMethod

ZIP_CODE_RE = re.compile(r"^\d{5}(-\d{4})?$")
PHONE_RE = re.compile(r"^\+?[\d\s\-()]+$")


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


class AddressDTO(BaseModel):
    """Immutable postal address.

    Validates:
    - every field except ``country`` is required and non-blank.
    - ``zip_code`` is ``12345`` or ``12345-6789``.
    - ``phone`` contains only digits, spaces, dashes, parentheses and an
      optional leading ``+``.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    first_name: str
    last_name: str
    street: str
    city: str
    state: str
    zip_code: str
    country: str = "USA"
    phone: str

    @field_validator("first_name", "last_name", "street", "city", "state", "country")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v:
            raise ValueError("This field may not be blank.")
        return v

    @field_validator("zip_code")
    @classmethod
    def zip_code_format(cls, v: str) -> str:
        if not ZIP_CODE_RE.match(v):
            raise ValueError("Enter a valid zip code (12345 or 12345-6789).")
        return v

    @field_validator("phone")
    @classmethod
    def phone_format(cls, v: str) -> str:
        if not PHONE_RE.match(v):
            raise ValueError("Enter a valid phone number.")
        return v


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateOrderDTO(BaseModel):
    """Immutable DTO for checkout requests.

    ``billing_address`` defaults to ``shipping_address``.
    """

    model_config = ConfigDict(frozen=True)

    customer_id: UUID
    shipping_address: AddressDTO
    billing_address: Optional[AddressDTO] = None
    payment_method: PaymentMethod
    notes: str = ""

    @property
    def effective_billing_address(self) -> AddressDTO:
        return self.billing_address or self.shipping_address


class UpdateOrderStatusDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: OrderStatus
    note: str = ""
    tracking_number: Optional[str] = None
    courier: Optional[str] = None

