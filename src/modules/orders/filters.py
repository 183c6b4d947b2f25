import django_filters
from django.db.models import Q

from modules.orders.constants import OrderStatus, PaymentStatus
from modules.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=OrderStatus.choices)
    payment_status = django_filters.ChoiceFilter(choices=PaymentStatus.choices)
    customer = django_filters.UUIDFilter(field_name="customer_id")
    start_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    end_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")
    min_total = django_filters.NumberFilter(field_name="total", lookup_expr="gte")
    max_total = django_filters.NumberFilter(field_name="total", lookup_expr="lte")
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = Order
        fields = [
            "status",
            "payment_status",
            "customer",
            "start_date",
            "end_date",
            "min_total",
            "max_total",
            "search",
        ]

    def filter_search(self, queryset, name, value):
        """Match order number or the shipping recipient's name."""
        return queryset.filter(
            Q(order_number__icontains=value)
            | Q(shipping_address__first_name__icontains=value)
            | Q(shipping_address__last_name__icontains=value)
        )
