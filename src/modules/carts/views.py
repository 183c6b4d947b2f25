"""Cart API views.

The cart is always the authenticated customer's own; there is no cart id
in any URL.  Domain exceptions propagate to ``api_exception_handler``.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.carts.repositories.django_repository import CartDjangoRepository
from modules.carts.serializers import (
    AddCartItemSerializer,
    CartSerializer,
    CartValidationSerializer,
    UpdateCartItemSerializer,
)
from modules.carts.services import CartService
from modules.customers.mixins import RequesterMixin
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.products.repositories.django_repository import ProductDjangoRepository


class CartViewSet(RequesterMixin, ViewSet):
    """Operations on the requester's cart."""

    serializer_class = CartSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CartService(
            cart_repository=CartDjangoRepository(),
            customer_repository=CustomerDjangoRepository(),
            catalog=ProductDjangoRepository(),
        )

    def retrieve(self, request: Request) -> Response:
        """GET /api/v1/cart/"""
        snapshot = self._service.snapshot(self.get_requester().customer_id)
        return Response(CartSerializer(snapshot).data)

    def clear(self, request: Request) -> Response:
        """DELETE /api/v1/cart/"""
        snapshot = self._service.clear(self.get_requester().customer_id)
        return Response(CartSerializer(snapshot).data)

    def add_item(self, request: Request) -> Response:
        """POST /api/v1/cart/items/"""
        serializer = AddCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        snapshot = self._service.add_item(
            self.get_requester().customer_id,
            serializer.validated_data["product_id"],
            serializer.validated_data["quantity"],
        )
        return Response(CartSerializer(snapshot).data, status=status.HTTP_201_CREATED)

    def update_item(self, request: Request, product_id=None) -> Response:
        """PUT /api/v1/cart/items/{product_id}/  (``quantity: 0`` removes the line)"""
        serializer = UpdateCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        snapshot = self._service.update_item(
            self.get_requester().customer_id,
            product_id,
            serializer.validated_data["quantity"],
        )
        return Response(CartSerializer(snapshot).data)

    def remove_item(self, request: Request, product_id=None) -> Response:
        """DELETE /api/v1/cart/items/{product_id}/"""
        snapshot = self._service.remove_line(self.get_requester().customer_id, product_id)
        return Response(CartSerializer(snapshot).data)

    def validate(self, request: Request) -> Response:
        """POST /api/v1/cart/validate/"""
        report = self._service.validate_cart(self.get_requester().customer_id)
        return Response(CartValidationSerializer(report).data)

    def fix(self, request: Request) -> Response:
        """PATCH /api/v1/cart/fix/"""
        snapshot = self._service.fix_cart(self.get_requester().customer_id)
        return Response(CartSerializer(snapshot).data)
