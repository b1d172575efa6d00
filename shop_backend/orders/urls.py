# orders/urls.py

"""
ORDERS URLS (BACK OFFICE)

Mounted under /api/admin/:
    /api/admin/orders/
    /api/admin/orders/stats/
    /api/admin/orders/<id>/
    /api/admin/orders/<id>/status/
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from orders.views import AdminOrderViewSet

router = DefaultRouter()
router.register(r"orders", AdminOrderViewSet, basename="admin-orders")

urlpatterns = [
    path("", include(router.urls)),
]
