"""Cart service layer (Use Cases).

Two families of operations:

- Store-level (``add_line``, ``update_line_quantity``, ``remove_line``,
  ``clear``, ``snapshot``): the caller supplies the unit price.
- Catalog-aware (``add_item``, ``update_item``, ``validate_cart``,
  ``fix_cart``): prices and availability come from the catalog reader.

Every mutation runs in a transaction that locks the cart row first, so
two devices editing the same cart never corrupt the line list.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

import structlog
from django.conf import settings
from django.db import transaction

from modules.carts.constants import DEFAULT_MAX_LINE_QUANTITY, IssueKind
from modules.carts.dtos import CartIssue, CartSnapshot, CartValidationReport
from modules.carts.exceptions import (
    CartInactive,
    CartNotFound,
    EmptyCart,
    InvalidQuantity,
    LineNotFound,
)
from modules.customers.exceptions import CustomerNotFound, InactiveCustomer
from modules.inventory.exceptions import InsufficientStock
from modules.products.exceptions import ProductUnavailable

if TYPE_CHECKING:
    from modules.carts.models import Cart
    from modules.customers.repositories.interfaces import ICustomerRepository
    from modules.products.dtos import CatalogProductDTO
    from modules.products.repositories.interfaces import ICatalogReader
    from modules.carts.repositories.interfaces import ICartRepository

logger = structlog.get_logger(__name__)


class CartService:
    """Application service for Cart use-cases.

    Receives repositories via constructor injection.
    """

    def __init__(
        self,
        cart_repository: ICartRepository,
        customer_repository: ICustomerRepository,
        catalog: ICatalogReader,
        max_line_quantity: Optional[int] = None,
    ) -> None:
        self._cart_repo = cart_repository
        self._customer_repo = customer_repository
        self._catalog = catalog
        self._max_quantity = max_line_quantity or getattr(
            settings, "CART_MAX_LINE_QUANTITY", DEFAULT_MAX_LINE_QUANTITY
        )

    # ------------------------------------------------------------------
    # Store-level commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def add_line(
        self,
        customer_id: UUID,
        product_id: UUID,
        quantity: int,
        unit_price: Decimal,
    ) -> CartSnapshot:
        """Merge *quantity* into the product's line, or append a new line.

        An existing line keeps its stored price.

        Raises:
            InvalidQuantity: quantity below 1 or merged quantity above the maximum.
        """
        self._check_add_quantity(quantity)
        cart = self._lock_cart(customer_id, create=True)
        self._merge_line(cart, product_id, quantity, unit_price)
        return self._touch(cart)

    @transaction.atomic
    def update_line_quantity(
        self,
        customer_id: UUID,
        product_id: UUID,
        quantity: int,
        unit_price: Optional[Decimal] = None,
    ) -> CartSnapshot:
        """Overwrite a line's quantity and price; ``0`` removes the line.

        Raises:
            InvalidQuantity: negative quantity or above the maximum.
            LineNotFound: the product is not in the cart.
        """
        self._check_update_quantity(quantity)
        cart = self._lock_cart(customer_id)
        line = self._get_line_or_raise(cart, customer_id, product_id)

        if quantity == 0:
            self._cart_repo.delete_line(line)
            logger.info(
                "cart.line_removed",
                customer_id=str(customer_id),
                product_id=str(product_id),
            )
        else:
            line.quantity = quantity
            if unit_price is not None:
                line.unit_price = unit_price
            self._cart_repo.save_line(line)
            logger.info(
                "cart.line_updated",
                customer_id=str(customer_id),
                product_id=str(product_id),
                quantity=quantity,
            )
        return self._touch(cart)

    @transaction.atomic
    def remove_line(self, customer_id: UUID, product_id: UUID) -> CartSnapshot:
        """Raises ``LineNotFound`` if the product is not in the cart."""
        cart = self._lock_cart(customer_id)
        line = self._get_line_or_raise(cart, customer_id, product_id)
        self._cart_repo.delete_line(line)
        logger.info(
            "cart.line_removed",
            customer_id=str(customer_id),
            product_id=str(product_id),
        )
        return self._touch(cart)

    @transaction.atomic
    def clear(self, customer_id: UUID) -> CartSnapshot:
        """Remove every line.  The cart itself survives."""
        cart = self._lock_cart(customer_id)
        if cart is None:
            return CartSnapshot.empty(customer_id)
        removed = self._cart_repo.clear_lines(cart)
        logger.info("cart.cleared", customer_id=str(customer_id), removed=removed)
        return self._touch(cart)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def snapshot(self, customer_id: UUID) -> CartSnapshot:
        """Frozen copy of the cart; an absent cart yields an empty snapshot."""
        cart = self._cart_repo.get_for_customer(customer_id)
        if cart is None:
            return CartSnapshot.empty(customer_id)
        return CartSnapshot.from_entity(cart)

    def checkout_snapshot(self, customer_id: UUID) -> CartSnapshot:
        """Snapshot taken under the cart row lock.

        Must run inside the checkout transaction; the lock is held until the
        order commits.        """
        cart = self._cart_repo.get_for_update(customer_id)
        if cart is None:
            return CartSnapshot.empty(customer_id)
        if not cart.is_active:
            raise CartInactive(customer_id=customer_id)
        return CartSnapshot.from_entity(cart)

    def validate_cart(self, customer_id: UUID) -> CartValidationReport:
        """Check every line against the live catalog without changing anything.

        Unavailable products and stock shortfalls make the cart invalid;
        price drifts are reported too.

        Raises:
            EmptyCart: there are no lines to validate.
        """
        snapshot = self.snapshot(customer_id)
        if snapshot.is_empty:
            raise EmptyCart(customer_id=customer_id)

        products = self._catalog.get_products(line.product_id for line in snapshot.lines)
        issues: List[CartIssue] = []
        valid_ids: List[UUID] = []

        for line in snapshot.lines:
            product = products.get(line.product_id)
            if product is None or not product.is_active:
                issues.append(
                    CartIssue(
                        product_id=line.product_id,
                        product_name=line.product_name,
                        kind=IssueKind.UNAVAILABLE,
                        detail="Product is no longer available.",
                    )
                )
                continue

            if product.stock_quantity < line.quantity:
                issues.append(
                    CartIssue(
                        product_id=line.product_id,
                        product_name=product.name,
                        kind=IssueKind.INSUFFICIENT_STOCK,
                        detail=(
                            f"Insufficient stock. Only {product.stock_quantity} "
                            f"items available."
                        ),
                        requested_quantity=line.quantity,
                        available_quantity=product.stock_quantity,
                    )
                )
                continue

            if product.price != line.unit_price:
                issues.append(
                    CartIssue(
                        product_id=line.product_id,
                        product_name=product.name,
                        kind=IssueKind.PRICE_CHANGED,
                        detail="Price has changed.",
                        old_price=line.unit_price,
                        new_price=product.price,
                    )
                )
            valid_ids.append(line.product_id)

        report = CartValidationReport(
            cart=snapshot,
            is_valid=not issues,
            valid_product_ids=tuple(valid_ids),
            issues=tuple(issues),
        )
        logger.info(
            "cart.validated",
            customer_id=str(customer_id),
            is_valid=report.is_valid,
            issue_count=len(issues),
        )
        return report

    # ------------------------------------------------------------------
    # Catalog-aware commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def add_item(self, customer_id: UUID, product_id: UUID, quantity: int) -> CartSnapshot:
        """Add a product at its live catalog price.

        Raises:
            InvalidQuantity: quantity out of range.
            ProductUnavailable: unknown or inactive product.
            InsufficientStock: stock cannot cover the merged quantity.
        """
        self._check_add_quantity(quantity)
        product = self._available_product(product_id)
        cart = self._lock_cart(customer_id, create=True)

        line = self._cart_repo.get_line(cart, product_id)
        wanted = quantity + (line.quantity if line else 0)
        self._check_stock(product, wanted)

        self._merge_line(cart, product_id, quantity, product.price)
        return self._touch(cart)

    @transaction.atomic
    def update_item(self, customer_id: UUID, product_id: UUID, quantity: int) -> CartSnapshot:
        """Set a line's quantity at the live catalog price; ``0`` removes it."""
        self._check_update_quantity(quantity)
        unit_price = None
        if quantity > 0:
            product = self._available_product(product_id)
            self._check_stock(product, quantity)
            unit_price = product.price
        return self.update_line_quantity(customer_id, product_id, quantity, unit_price)

    @transaction.atomic
    def fix_cart(self, customer_id: UUID) -> CartSnapshot:
        """Drop unavailable lines, re-price lines and cap quantities at stock.

        Raises:
            CartNotFound: the customer has no cart.
        """
        cart = self._lock_cart(customer_id)
        if cart is None:
            raise CartNotFound(customer_id=customer_id)

        lines = cart.lines
        products = self._catalog.get_products(line.product_id for line in lines)
        removed = updated = 0

        for line in lines:
            product = products.get(line.product_id)
            if product is None or not product.is_active:
                self._cart_repo.delete_line(line)
                removed += 1
                continue

            quantity = line.quantity
            if quantity > product.stock_quantity:
                quantity = max(1, product.stock_quantity)
            if quantity != line.quantity or product.price != line.unit_price:
                line.quantity = quantity
                line.unit_price = product.price
                self._cart_repo.save_line(line)
                updated += 1

        logger.info(
            "cart.fixed",
            customer_id=str(customer_id),
            removed=removed,
            updated=updated,
        )
        return self._touch(cart)

    @transaction.atomic
    def retire(self, customer_id: UUID) -> None:
        """Deactivate the cart of a deactivated customer."""
        cart = self._cart_repo.get_for_update(customer_id)
        if cart is None or not cart.is_active:
            return
        cart.is_active = False
        cart.touch()
        self._cart_repo.save(cart)
        logger.info("cart.retired", customer_id=str(customer_id))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_add_quantity(self, quantity: int) -> None:
        if quantity < 1 or quantity > self._max_quantity:
            raise InvalidQuantity(
                f"Quantity must be between 1 and {self._max_quantity}.",
                quantity=quantity,
            )

    def _check_update_quantity(self, quantity: int) -> None:
        if quantity < 0 or quantity > self._max_quantity:
            raise InvalidQuantity(
                f"Quantity must be between 0 and {self._max_quantity}.",
                quantity=quantity,
            )

    def _lock_cart(self, customer_id: UUID, create: bool = False) -> Optional[Cart]:
        customer = self._customer_repo.get_by_id(str(customer_id))
        if customer is None:
            raise CustomerNotFound(
                f"Customer {customer_id} not found.", customer_id=customer_id
            )
        if not customer.is_active:
            raise InactiveCustomer(
                f"Customer {customer_id} is inactive.", customer_id=customer_id
            )

        cart = self._cart_repo.get_for_update(customer_id, create=create)
        if cart is not None and not cart.is_active:
            raise CartInactive(customer_id=customer_id)
        return cart

    def _get_line_or_raise(self, cart: Optional[Cart], customer_id: UUID, product_id: UUID):
        line = self._cart_repo.get_line(cart, product_id) if cart is not None else None
        if line is None:
            raise LineNotFound(
                f"Product {product_id} is not in the cart.",
                customer_id=customer_id,
                product_id=product_id,
            )
        return line

    def _merge_line(
        self, cart: Cart, product_id: UUID, quantity: int, unit_price: Decimal
    ) -> None:
        line = self._cart_repo.get_line(cart, product_id)
        if line is None:
            self._cart_repo.add_line(cart, product_id, quantity, unit_price)
            merged = quantity
        else:
            merged = line.quantity + quantity
            if merged > self._max_quantity:
                raise InvalidQuantity(
                    f"Quantity must be between 1 and {self._max_quantity}.",
                    quantity=merged,
                )
            line.quantity = merged
            self._cart_repo.save_line(line)

        logger.info(
            "cart.line_added",
            customer_id=str(cart.customer_id),
            product_id=str(product_id),
            quantity=quantity,
            line_quantity=merged,
        )

    def _available_product(self, product_id: UUID) -> CatalogProductDTO:
        product = self._catalog.get_product(product_id)
        if product is None or not product.is_active:
            raise ProductUnavailable(
                f"Product {product_id} is not available.", product_id=product_id
            )
        return product

    def _check_stock(self, product: CatalogProductDTO, quantity: int) -> None:
        if product.stock_quantity < quantity:
            raise InsufficientStock(
                f"Only {product.stock_quantity} units of {product.name} available.",
                product_id=product.id,
                requested=quantity,
                available=product.stock_quantity,
            )

    def _touch(self, cart: Cart) -> CartSnapshot:
        cart.touch()
        self._cart_repo.save(cart)
        return self.snapshot(cart.customer_id)
