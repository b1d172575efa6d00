# carts/urls.py

from django.urls import path

from carts.views import AddCartItemView, CartView, ClearCartView, RemoveCartItemView

app_name = "carts"

urlpatterns = [
    path("", CartView.as_view(), name="cart"),
    path("items/add/", AddCartItemView.as_view(), name="add-item"),
    path("items/remove/", RemoveCartItemView.as_view(), name="remove-item"),
    path("clear/", ClearCartView.as_view(), name="clear"),
]
