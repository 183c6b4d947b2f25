"""Checkout pricing.

All amounts are quantized to cents with ``ROUND_HALF_UP``.  Rates come
from settings (``ORDER_TAX_RATE``, ``ORDER_SHIPPING_FEE``,
``ORDER_FREE_SHIPPING_THRESHOLD``) unless given explicitly.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from django.conf import settings
from pydantic import BaseModel, ConfigDict

CENT = Decimal("0.01")


def quantize(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


class OrderSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    discount: Decimal
    total: Decimal


class PricingPolicy:
    def __init__(
        self,
        tax_rate: Optional[Decimal] = None,
        shipping_fee: Optional[Decimal] = None,
        free_shipping_threshold: Optional[Decimal] = None,
    ) -> None:
        self.tax_rate = Decimal(
            tax_rate if tax_rate is not None else settings.ORDER_TAX_RATE
        )
        self.shipping_fee = Decimal(
            shipping_fee if shipping_fee is not None else settings.ORDER_SHIPPING_FEE
        )
        self.free_shipping_threshold = Decimal(
            free_shipping_threshold
            if free_shipping_threshold is not None
            else settings.ORDER_FREE_SHIPPING_THRESHOLD
        )

    def summarize(
        self, line_subtotals: Iterable[Decimal], discount: Decimal = Decimal("0")
    ) -> OrderSummary:
        """Price a checkout: subtotal + tax + shipping - discount.

        Shipping is free only when the subtotal is strictly above the
        threshold.
        """
        subtotal = quantize(sum(line_subtotals, Decimal("0")))
        tax = quantize(subtotal * self.tax_rate)
        shipping = (
            Decimal("0.00")
            if subtotal > self.free_shipping_threshold
            else quantize(self.shipping_fee)
        )
        discount = quantize(discount)
        total = subtotal + tax + shipping - discount
        return OrderSummary(
            subtotal=subtotal,
            tax=tax,
            shipping=shipping,
            discount=discount,
            total=total,
        )
