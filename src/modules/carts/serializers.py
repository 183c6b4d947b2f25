"""Cart DRF serializers.

Input serializers only check shapes; quantity bounds are business rules
enforced by ``CartService``.  Output serializers read the frozen cart
DTOs.
"""

from __future__ import annotations

from rest_framework import serializers

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class AddCartItemSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(required=False, default=1)


class UpdateCartItemSerializer(serializers.Serializer):
    quantity = serializers.IntegerField()


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class CartLineSerializer(serializers.Serializer):
    product_id = serializers.UUIDField(read_only=True)
    product_name = serializers.CharField(read_only=True)
    quantity = serializers.IntegerField(read_only=True)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)


class CartSerializer(serializers.Serializer):
    """Read serializer for ``CartSnapshot``."""

    id = serializers.UUIDField(source="cart_id", read_only=True, allow_null=True)
    customer_id = serializers.UUIDField(read_only=True)
    is_active = serializers.BooleanField(read_only=True)
    items = CartLineSerializer(source="lines", many=True, read_only=True)
    total_items = serializers.IntegerField(read_only=True)
    total_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, read_only=True
    )
    last_modified_at = serializers.DateTimeField(read_only=True, allow_null=True)


class CartIssueSerializer(serializers.Serializer):
    product_id = serializers.UUIDField(read_only=True)
    product_name = serializers.CharField(read_only=True)
    kind = serializers.CharField(read_only=True)
    detail = serializers.CharField(read_only=True)
    requested_quantity = serializers.IntegerField(read_only=True, allow_null=True)
    available_quantity = serializers.IntegerField(read_only=True, allow_null=True)
    old_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, read_only=True, allow_null=True
    )
    new_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, read_only=True, allow_null=True
    )


class CartValidationSummarySerializer(serializers.Serializer):
    total_items = serializers.IntegerField(read_only=True)
    total_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, read_only=True
    )
    valid_items_count = serializers.IntegerField(read_only=True)
    issue_count = serializers.IntegerField(read_only=True)


class CartValidationSerializer(serializers.Serializer):
    """Read serializer for ``CartValidationReport``."""

    cart = CartSerializer(read_only=True)
    is_valid = serializers.BooleanField(read_only=True)
    valid_product_ids = serializers.ListField(
        child=serializers.UUIDField(), read_only=True
    )
    issues = CartIssueSerializer(many=True, read_only=True)
    summary = CartValidationSummarySerializer(read_only=True)
