# products/urls.py

"""
PRODUCTS URLS

Registers the catalog under /api/products/:
    GET    /api/products/            (AllowAny)
    GET    /api/products/<id>/       (AllowAny)
    POST/PUT/PATCH/DELETE            (products.manage)
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from products.views import ProductViewSet

router = DefaultRouter()

router.register(r"", ProductViewSet, basename="products")

urlpatterns = [
    path("", include(router.urls)),
]
