"""Cart URL configuration.

The cart is a singleton per customer, so routes are mapped explicitly
instead of through a router.
"""

from __future__ import annotations

from django.urls import path

from modules.carts.views import CartViewSet

cart = CartViewSet.as_view({"get": "retrieve", "delete": "clear"})
cart_items = CartViewSet.as_view({"post": "add_item"})
cart_item = CartViewSet.as_view({"put": "update_item", "delete": "remove_item"})
cart_validate = CartViewSet.as_view({"post": "validate"})
cart_fix = CartViewSet.as_view({"patch": "fix"})

urlpatterns = [
    path("cart/", cart, name="cart"),
    path("cart/items/", cart_items, name="cart-items"),
    path("cart/items/<uuid:product_id>/", cart_item, name="cart-item"),
    path("cart/validate/", cart_validate, name="cart-validate"),
    path("cart/fix/", cart_fix, name="cart-fix"),
]
