"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError
from rest_framework import serializers

from modules.orders.constants import OrderStatus, PaymentMethod
from modules.orders.dtos import AddressDTO
from modules.orders.models import Order, OrderItem, OrderStatusHistory

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class AddressSerializer(serializers.Serializer):
    """Shape check; field formats are validated by ``AddressDTO``."""

    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    street = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=100)
    state = serializers.CharField(max_length=100)
    zip_code = serializers.CharField(max_length=10)
    country = serializers.CharField(max_length=100, required=False, default="USA")
    phone = serializers.CharField(max_length=30)

    def validate(self, attrs):
        try:
            AddressDTO(**attrs)
        except PydanticValidationError as exc:
            raise serializers.ValidationError(
                {
                    ".".join(str(part) for part in error["loc"]): error["msg"]
                    for error in exc.errors()
                }
            ) from exc
        return attrs


class CreateOrderSerializer(serializers.Serializer):
    shipping_address = AddressSerializer()
    billing_address = AddressSerializer(required=False, allow_null=True)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices)
    notes = serializers.CharField(
        required=False, default="", allow_blank=True, max_length=500
    )


class CancelOrderSerializer(serializers.Serializer):
    reason = serializers.CharField(
        required=False, allow_blank=True, default="", max_length=500
    )


class UpdateOrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)
    note = serializers.CharField(required=False, allow_blank=True, default="")
    tracking_number = serializers.CharField(
        required=False, allow_blank=True, max_length=100
    )
    courier = serializers.CharField(required=False, allow_blank=True, max_length=100)


class StatisticsQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    top = serializers.IntegerField(required=False, default=10, min_value=1, max_value=100)

    def validate(self, attrs):
        start, end = attrs.get("start_date"), attrs.get("end_date")
        if start and end and start > end:
            raise serializers.ValidationError(
                {"end_date": "end_date must not be before start_date."}
            )
        return attrs


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderItemSerializer(serializers.ModelSerializer):
    """Read serializer for order items (catalog snapshot)."""

    class Meta:
        model = OrderItem
        fields = [
            "product_id",
            "product_name",
            "quantity",
            "unit_price",
            "subtotal",
            "prescription_required",
        ]
        read_only_fields = fields


class StatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusHistory
        fields = [
            "sequence",
            "old_status",
            "new_status",
            "notes",
            "actor_id",
            "created_at",
        ]
        read_only_fields = fields


class OrderSummarySerializer(serializers.Serializer):
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    tax = serializers.DecimalField(max_digits=12, decimal_places=2)
    shipping = serializers.DecimalField(max_digits=12, decimal_places=2)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2)
    total = serializers.DecimalField(max_digits=12, decimal_places=2)


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with nested items and history."""

    items = OrderItemSerializer(many=True, read_only=True)
    status_history = StatusHistorySerializer(many=True, read_only=True)
    order_summary = OrderSummarySerializer(source="*", read_only=True)
    can_be_cancelled = serializers.BooleanField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer_id",
            "status",
            "items",
            "shipping_address",
            "billing_address",
            "order_summary",
            "payment_method",
            "payment_status",
            "requires_prescription",
            "customer_notes",
            "tracking_number",
            "courier",
            "estimated_delivery_date",
            "actual_delivery_date",
            "cancellation_reason",
            "refund_amount",
            "can_be_cancelled",
            "status_history",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AdminOrderSerializer(OrderSerializer):
    """Admins additionally see internal notes."""

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ["admin_notes"]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order list (no nested relations)."""

    item_count = serializers.SerializerMethodField()
    customer_name = serializers.CharField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer_id",
            "customer_name",
            "status",
            "payment_status",
            "total",
            "item_count",
            "created_at",
        ]
        read_only_fields = fields

    def get_item_count(self, obj: Order) -> int:
        return len(obj.items.all())
