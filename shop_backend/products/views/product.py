# products/views/product.py

"""
PRODUCT VIEWSET

Purpose:
- Public catalog browsing for the storefront (AllowAny, read-only)
- Back-office product management (products.manage capability)

Key rules:
- Anonymous / customer reads only see is_available products.
- Holders of products.manage see everything, including hidden items.
"""

from django.db.models import Q
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from permissions.roles import CAP_MANAGE_PRODUCTS, HasCapability, effective_capabilities_for
from products.models import Product
from products.serializers.product import ProductSerializer

RELATED_LIMIT = 4


@extend_schema_view(
    list=extend_schema(
        parameters=[
            OpenApiParameter(
                name="q",
                type=str,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Optional search over name, category and description.",
            ),
        ],
    ),
)
class ProductViewSet(viewsets.ModelViewSet):
    """
    Product endpoints.

    Public:
    - GET /api/products/?category=<c>&q=<search>
    - GET /api/products/<id>/
    - GET /api/products/<id>/related/   (same category, up to 4)

    Back office (products.manage):
    - POST / PUT / PATCH / DELETE
    """

    serializer_class = ProductSerializer
    required_capability = CAP_MANAGE_PRODUCTS
    filterset_fields = ["category", "is_available"]

    def get_permissions(self):
        if self.action in ("list", "retrieve", "related"):
            return [AllowAny()]
        return [IsAuthenticated(), HasCapability()]

    def _can_manage(self) -> bool:
        return CAP_MANAGE_PRODUCTS in effective_capabilities_for(self.request.user)

    def get_queryset(self):
        qs = Product.objects.all().order_by("-created_at")

        if not self._can_manage():
            qs = qs.filter(is_available=True)

        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(
                Q(name__icontains=q)
                | Q(category__icontains=q)
                | Q(description__icontains=q)
            )

        return qs

    @extend_schema(responses={200: ProductSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="related")
    def related(self, request, pk=None):
        product = self.get_object()
        qs = (
            Product.objects.filter(category=product.category, is_available=True)
            .exclude(pk=product.pk)
            .order_by("-created_at")[:RELATED_LIMIT]
        )
        return Response(ProductSerializer(qs, many=True).data)
