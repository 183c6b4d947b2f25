"""Order API views.

Exposes ``OrderService`` and ``OrderStatisticsService`` via DRF.  Domain
exceptions propagate to ``api_exception_handler``; the views never catch
them.
"""

from __future__ import annotations

from uuid import UUID

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.carts.repositories.django_repository import CartDjangoRepository
from modules.carts.services import CartService
from modules.customers.mixins import RequesterMixin
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.inventory.ledger import DjangoInventoryLedger
from modules.orders.dtos import AddressDTO, CreateOrderDTO, UpdateOrderStatusDTO
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    AdminOrderSerializer,
    CancelOrderSerializer,
    CreateOrderSerializer,
    OrderListSerializer,
    OrderSerializer,
    StatisticsQuerySerializer,
    UpdateOrderStatusSerializer,
)
from modules.orders.services import OrderService
from modules.orders.statistics import OrderStatisticsService
from modules.products.repositories.django_repository import ProductDjangoRepository


class OrderViewSet(RequesterMixin, GenericViewSet):
    """ViewSet for Order operations.

    Does **not** extend ``ModelViewSet``: all ORM access goes through the
    service/repository layer.
    """

    queryset = Order.objects.none()
    serializer_class = OrderSerializer
    filterset_class = OrderFilter

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        customers = CustomerDjangoRepository()
        catalog = ProductDjangoRepository()
        self._service = OrderService(
            order_repository=OrderDjangoRepository(),
            customer_repository=customers,
            catalog=catalog,
            ledger=DjangoInventoryLedger(),
            cart_service=CartService(
                cart_repository=CartDjangoRepository(),
                customer_repository=customers,
                catalog=catalog,
            ),
        )

    def get_permissions(self):
        if self.action in {"update_status", "statistics"}:
            return [IsAdminUser()]
        return super().get_permissions()

    def _render(self, order: Order) -> dict:
        serializer_class = (
            AdminOrderSerializer if self.get_requester().is_admin else OrderSerializer
        )
        return serializer_class(order).data

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @extend_schema(request=CreateOrderSerializer, responses={201: OrderSerializer})
    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/  (checkout of the requester's cart)"""
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        billing = data.get("billing_address")
        dto = CreateOrderDTO(
            customer_id=self.get_requester().customer_id,
            shipping_address=AddressDTO(**data["shipping_address"]),
            billing_address=AddressDTO(**billing) if billing else None,
            payment_method=data["payment_method"],
            notes=data.get("notes", ""),
        )
        order = self._service.create_order(dto, actor_id=request.user.pk)
        return Response(self._render(order), status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    @extend_schema(responses=OrderListSerializer(many=True))
    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/

        Filtering (status, payment status, customer, date and total
        ranges, search) is applied by ``OrderFilter`` in the repository.
        """
        queryset = self._service.list_orders(self.get_requester(), request.query_params)
        page = self.paginate_queryset(queryset)
        serializer = OrderListSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: UUID | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        order = self._service.get_order(pk, self.get_requester())
        return Response(self._render(order))

    # ------------------------------------------------------------------
    # Cancel / Status
    # ------------------------------------------------------------------

    @extend_schema(request=CancelOrderSerializer, responses=OrderSerializer)
    @action(detail=True, methods=["put"])
    def cancel(self, request: Request, pk: UUID | None = None) -> Response:
        """PUT /api/v1/orders/{pk}/cancel/"""
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self._service.cancel_order(
            pk,
            self.get_requester(),
            reason=serializer.validated_data["reason"] or None,
        )
        return Response(self._render(order))

    @extend_schema(request=UpdateOrderStatusSerializer, responses=AdminOrderSerializer)
    @action(detail=True, methods=["put"], url_path="status")
    def update_status(self, request: Request, pk: UUID | None = None) -> Response:
        """PUT /api/v1/orders/{pk}/status/  (admin only)"""
        serializer = UpdateOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self._service.update_status(
            pk,
            UpdateOrderStatusDTO(**serializer.validated_data),
            actor_id=request.user.pk,
        )
        return Response(AdminOrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    @extend_schema(parameters=[StatisticsQuerySerializer])
    @action(detail=False, methods=["get"])
    def statistics(self, request: Request) -> Response:
        """GET /api/v1/orders/statistics/  (admin only)"""
        serializer = StatisticsQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        stats = OrderStatisticsService().get_statistics(
            start_date=data.get("start_date"),
            end_date=data.get("end_date"),
            top_n=data["top"],
        )
        return Response(stats.model_dump(mode="json"))
