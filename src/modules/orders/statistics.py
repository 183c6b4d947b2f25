"""Read-side order statistics for the admin dashboard."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

import structlog
from django.db.models import Avg, Count, Max, Sum
from pydantic import BaseModel, ConfigDict

from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderItem
from modules.orders.pricing import quantize

logger = structlog.get_logger(__name__)

ZERO = Decimal("0.00")


class StatusBucket(BaseModel):
    model_config = ConfigDict(frozen=True)

    count: int = 0
    total_amount: Decimal = ZERO


class Revenue(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_revenue: Decimal = ZERO
    average_order_value: Decimal = ZERO


class TopProduct(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: UUID
    name: str
    total_quantity: int
    total_revenue: Decimal


class OrderStatistics(BaseModel):
    model_config = ConfigDict(frozen=True)

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    total_orders: int
    orders_by_status: Dict[str, StatusBucket]
    revenue: Revenue
    top_products: List[TopProduct]


class OrderStatisticsService:
    """Aggregates orders within an optional inclusive date range.

    Cancelled orders are counted under their status but excluded from
    revenue and top products.
    """

    def get_statistics(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        top_n: int = 10,
    ) -> OrderStatistics:
        orders = Order.objects.all()
        if start_date:
            orders = orders.filter(created_at__date__gte=start_date)
        if end_date:
            orders = orders.filter(created_at__date__lte=end_date)

        by_status = {status: StatusBucket() for status in OrderStatus.values}
        for row in orders.values("status").annotate(
            count=Count("id"), total_amount=Sum("total")
        ):
            by_status[row["status"]] = StatusBucket(
                count=row["count"], total_amount=row["total_amount"] or ZERO
            )

        billable = orders.exclude(status=OrderStatus.CANCELLED)
        revenue_row = billable.aggregate(
            revenue=Sum("total"), average_value=Avg("total")
        )
        revenue = Revenue(
            total_revenue=quantize(revenue_row["revenue"] or ZERO),
            average_order_value=quantize(revenue_row["average_value"] or ZERO),
        )

        top_rows = (
            OrderItem.objects.filter(order__in=billable)
            .values("product_id")
            .annotate(
                name=Max("product_name"),
                total_quantity=Sum("quantity"),
                total_revenue=Sum("subtotal"),
            )
            .order_by("-total_quantity", "name")[:top_n]
        )
        top_products = [
            TopProduct(
                product_id=row["product_id"],
                name=row["name"],
                total_quantity=row["total_quantity"],
                total_revenue=row["total_revenue"],
            )
            for row in top_rows
        ]

        stats = OrderStatistics(
            start_date=start_date,
            end_date=end_date,
            total_orders=sum(bucket.count for bucket in by_status.values()),
            orders_by_status=by_status,
            revenue=revenue,
            top_products=top_products,
        )
        logger.info(
            "order.statistics_computed",
            total_orders=stats.total_orders,
            start_date=str(start_date) if start_date else None,
            end_date=str(end_date) if end_date else None,
        )
        return stats
