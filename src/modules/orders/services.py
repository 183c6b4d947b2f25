"""Order service layer (Use Cases).

Orchestrates checkout, cancellation and the admin-driven order
lifecycle.  All write operations are atomic; the service defines the
unit-of-work boundary.

Stock is reserved through the inventory ledger only after every cart
line has been re-validated against the catalog.  If a reservation fails
part-way, the lines already reserved are compensated explicitly before
the error propagates, and the surrounding transaction discards the
order row.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Tuple
from uuid import UUID

import structlog
from django.db import transaction
from django.utils import timezone

from modules.carts.exceptions import EmptyCart
from modules.core.exceptions import DomainError
from modules.customers.exceptions import CustomerNotFound, InactiveCustomer
from modules.inventory.exceptions import InsufficientStock
from modules.orders.constants import (
    DEFAULT_CANCELLATION_REASON,
    ORDER_NUMBER_MAX_RETRIES,
    OrderStatus,
)
from modules.orders.events import OrderCancelled, OrderCreated, OrderStatusChanged
from modules.orders.exceptions import (
    InvalidTransition,
    OrderAccessDenied,
    OrderNotFound,
    OrderNumberConflict,
)
from modules.orders.models import Order
from modules.orders.pricing import PricingPolicy
from modules.products.exceptions import ProductUnavailable

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.carts.services import CartService
    from modules.customers.dtos import RequesterDTO
    from modules.customers.repositories.interfaces import ICustomerRepository
    from modules.inventory.interfaces import IInventoryLedger
    from modules.orders.dtos import CreateOrderDTO, UpdateOrderStatusDTO
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import ICatalogReader

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order use-cases.

    Receives repositories and collaborators via constructor injection.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        customer_repository: ICustomerRepository,
        catalog: ICatalogReader,
        ledger: IInventoryLedger,
        cart_service: CartService,
        pricing: Optional[PricingPolicy] = None,
    ) -> None:
        self._order_repo = order_repository
        self._customer_repo = customer_repository
        self._catalog = catalog
        self._ledger = ledger
        self._cart_service = cart_service
        self._pricing = pricing or PricingPolicy()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(self, dto: CreateOrderDTO, actor_id: Optional[int] = None) -> Order:
        """Convert the customer's cart into a ``pending`` order.

        Steps:
        1. Validate the customer exists and is active.
        2. Lock the cart and read its lines; there must be at least one.
        3. Re-validate every line against the live catalog.
        4. Price the order from live catalog prices.
        5. Persist order, items and the first history entry.
        6. Reserve stock per line, compensating on failure.
        7. Clear the cart and record ``OrderCreated``.

        Raises:
            CustomerNotFound / InactiveCustomer: invalid customer.
            EmptyCart: the cart has no lines.
            ProductUnavailable: a product is missing or inactive.
            InsufficientStock: stock cannot cover a line.
            OrderNumberConflict: no unique order number could be allocated.
        """
        log = logger.bind(customer_id=str(dto.customer_id))
        log.info("order.creation_started")

        # 1. Customer
        customer = self._customer_repo.get_by_id(str(dto.customer_id))
        if not customer:
            raise CustomerNotFound(
                f"Customer {dto.customer_id} not found.", customer_id=dto.customer_id
            )
        if not customer.is_active:
            raise InactiveCustomer(
                f"Customer {dto.customer_id} is inactive.", customer_id=dto.customer_id
            )

        # 2. Cart
        cart = self._cart_service.checkout_snapshot(dto.customer_id)
        if cart.is_empty:
            raise EmptyCart(customer_id=dto.customer_id)

        # 3. Re-validate against the catalog
        products = self._catalog.get_products(line.product_id for line in cart.lines)
        items: List[dict] = []
        for line in cart.lines:
            product = products.get(line.product_id)
            if product is None or not product.is_active:
                raise ProductUnavailable(
                    f"Product {line.product_name or line.product_id} is no longer available.",
                    product_id=line.product_id,
                )
            if product.stock_quantity < line.quantity:
                raise InsufficientStock(
                    f"Insufficient stock for {product.name}: requested "
                    f"{line.quantity}, available {product.stock_quantity}.",
                    product_id=product.id,
                    requested=line.quantity,
                    available=product.stock_quantity,
                )
            items.append(
                {
                    "product_id": product.id,
                    "product_name": product.name,
                    "quantity": line.quantity,
                    "unit_price": product.price,
                    "subtotal": product.price * line.quantity,
                    "prescription_required": product.prescription_required,
                }
            )

        # 4. Pricing
        summary = self._pricing.summarize(item["subtotal"] for item in items)

        # 5. Persist
        order = self._order_repo.create(
            {
                "order_number": self._allocate_order_number(),
                "customer_id": dto.customer_id,
                "shipping_address": dto.shipping_address.model_dump(),
                "billing_address": dto.effective_billing_address.model_dump(),
                "payment_method": dto.payment_method,
                "customer_notes": dto.notes or "",
                "requires_prescription": any(
                    item["prescription_required"] for item in items
                ),
                **summary.model_dump(),
            },
            items,
        )
        self._order_repo.add_history(
            order,
            new_status=OrderStatus.PENDING,
            notes="Order created",
            actor_id=actor_id,
        )

        # 6. Reserve stock
        self._reserve_stock(order, items)

        # 7. Clear cart, record event
        self._cart_service.clear(dto.customer_id)
        order.add_domain_event(
            OrderCreated(
                aggregate_id=order.id,
                order_number=order.order_number,
                customer_id=str(order.customer_id),
                total=str(order.total),
                requires_prescription=order.requires_prescription,
                product_ids=[str(item["product_id"]) for item in items],
            )
        )
        self._order_repo.save(order)

        log.info(
            "order.created",
            order_id=str(order.id),
            order_number=order.order_number,
            total=str(order.total),
        )
        return self._order_repo.get_by_id(str(order.id)) or order

    @transaction.atomic
    def cancel_order(
        self,
        order_id: UUID,
        requester: RequesterDTO,
        reason: Optional[str] = None,
    ) -> Order:
        """Cancel an order and restore its stock.

        The order row is locked first, so two concurrent cancellations
        cannot restore stock twice.

        Raises:
            OrderNotFound: order does not exist.
            OrderAccessDenied: requester is neither the owner nor an admin.
            InvalidTransition: the order is past the cancellable states.
        """
        order = self._lock_order(order_id)
        self._check_access(order, requester)
        return self._cancel_locked(order, reason, actor_id=requester.user_id)

    @transaction.atomic
    def update_status(
        self,
        order_id: UUID,
        dto: UpdateOrderStatusDTO,
        actor_id: Optional[int] = None,
    ) -> Order:
        """Admin transition of an order to a new status.

        ``cancelled`` is routed through the cancellation path so stock is
        restored.  First arrival at ``delivered`` stamps the delivery date.

        Raises:
            OrderNotFound: order does not exist.
            InvalidTransition: transition is not allowed.
        """
        order = self._lock_order(order_id)

        if dto.status == OrderStatus.CANCELLED:
            return self._cancel_locked(order, dto.note or None, actor_id=actor_id)

        log = logger.bind(
            order_id=str(order.id),
            current_status=order.status,
            new_status=dto.status,
        )
        if not order.can_transition_to(dto.status):
            log.warning("order.invalid_transition")
            raise InvalidTransition(
                f"Cannot transition from {order.status} to {dto.status}.",
                order_id=order.id,
                current_status=order.status,
                requested_status=dto.status,
            )

        old_status = order.status
        order.status = dto.status
        if dto.tracking_number is not None:
            order.tracking_number = dto.tracking_number
        if dto.courier is not None:
            order.courier = dto.courier
        if dto.status == OrderStatus.DELIVERED and order.actual_delivery_date is None:
            order.actual_delivery_date = timezone.now()

        order.add_domain_event(
            OrderStatusChanged(
                aggregate_id=order.id,
                order_number=order.order_number,
                old_status=old_status,
                new_status=dto.status,
                tracking_number=order.tracking_number or None,
            )
        )
        self._order_repo.save(order)
        self._order_repo.add_history(
            order,
            new_status=dto.status,
            notes=dto.note or f"Order status changed to {dto.status}",
            old_status=old_status,
            actor_id=actor_id,
        )

        log.info("order.status_updated")
        return self._order_repo.get_by_id(str(order.id)) or order

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: UUID, requester: RequesterDTO) -> Order:
        """Raises ``OrderNotFound`` or ``OrderAccessDenied``."""
        order = self._order_repo.get_by_id(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.", order_id=order_id)
        self._check_access(order, requester)
        return order

    def list_orders(
        self,
        requester: RequesterDTO,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> QuerySet[Order]:
        """Customers see only their own orders; admins see and filter all."""
        customer_id = None if requester.is_admin else requester.customer_id
        return self._order_repo.list(filters, customer_id=customer_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _allocate_order_number(self) -> str:
        for _ in range(ORDER_NUMBER_MAX_RETRIES):
            candidate = Order.generate_order_number()
            if not self._order_repo.order_number_exists(candidate):
                return candidate
        logger.error("order.number_exhausted", attempts=ORDER_NUMBER_MAX_RETRIES)
        raise OrderNumberConflict(attempts=ORDER_NUMBER_MAX_RETRIES)

    def _reserve_stock(self, order: Order, items: List[dict]) -> None:
        # Stock rows are locked in product id order, the same order cancellation uses.
        reserved: List[Tuple[UUID, int]] = []
        for item in sorted(items, key=lambda i: str(i["product_id"])):
            try:
                remaining = self._ledger.adjust(item["product_id"], -item["quantity"])
            except DomainError:
                logger.warning(
                    "order.stock_reservation_failed",
                    order_id=str(order.id),
                    product_id=str(item["product_id"]),
                    compensated=len(reserved),
                )
                for product_id, quantity in reserved:
                    self._ledger.adjust(product_id, quantity)
                raise
            reserved.append((item["product_id"], item["quantity"]))
            logger.info(
                "order.stock_reserved",
                order_id=str(order.id),
                product_id=str(item["product_id"]),
                quantity=item["quantity"],
                remaining=remaining,
            )

    def _lock_order(self, order_id: UUID) -> Order:
        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.", order_id=order_id)
        return order

    def _check_access(self, order: Order, requester: RequesterDTO) -> None:
        if not requester.can_access(order.customer_id):
            logger.warning(
                "order.access_denied",
                order_id=str(order.id),
                customer_id=str(requester.customer_id),
            )
            raise OrderAccessDenied(order_id=order.id)

    def _cancel_locked(
        self, order: Order, reason: Optional[str], actor_id: Optional[int]
    ) -> Order:
        log = logger.bind(order_id=str(order.id), current_status=order.status)
        if not order.can_be_cancelled:
            log.warning("order.cancel_not_allowed")
            raise InvalidTransition(
                f"Cannot cancel order in status {order.status}.",
                order_id=order.id,
                current_status=order.status,
                requested_status=OrderStatus.CANCELLED,
            )

        for item in order.items.order_by("product_id"):
            restored = self._ledger.adjust(item.product_id, item.quantity)
            log.info(
                "order.stock_released",
                product_id=str(item.product_id),
                quantity=item.quantity,
                restored_stock=restored,
            )

        reason = reason or DEFAULT_CANCELLATION_REASON
        old_status = order.status
        order.status = OrderStatus.CANCELLED
        order.cancellation_reason = reason
        order.add_domain_event(
            OrderCancelled(
                aggregate_id=order.id,
                order_number=order.order_number,
                reason=reason,
                previous_status=old_status,
            )
        )
        self._order_repo.save(order)
        self._order_repo.add_history(
            order,
            new_status=OrderStatus.CANCELLED,
            notes=f"Order cancelled: {reason}",
            old_status=old_status,
            actor_id=actor_id,
        )

        log.info("order.cancelled", reason=reason)
        return self._order_repo.get_by_id(str(order.id)) or order
