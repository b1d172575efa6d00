# users/views/admin_users.py

"""
ADMIN USER MANAGEMENT (BACK OFFICE)

Routes (under /api/admin/):
    GET    users/                  paginated list (search, is_active, role, page, limit)
    GET    users/stats/            account counts (days)
    GET    users/<id>/             detail + order history
    PUT    users/<id>/status/      {is_active}
    DELETE users/<id>/

Every route requires a bearer JWT and the users.manage capability.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiTypes, extend_schema
from rest_framework import serializers, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from orders.models import Order
from orders.serializers import OrderSerializer
from permissions.roles import CAP_MANAGE_USERS, HasCapability, effective_capabilities_for
from users.models import User
from users.services import directory

# ---------------------------
# SERIALIZERS
# ---------------------------


class AdminUserSerializer(serializers.ModelSerializer):
    capabilities = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "name",
            "role",
            "is_active",
            "capabilities",
            "last_login_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_capabilities(self, obj) -> list[str]:
        return sorted(effective_capabilities_for(obj))


class UserListQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True)
    is_active = serializers.BooleanField(required=False, allow_null=True, default=None)
    role = serializers.ChoiceField(choices=[c for c, _ in User.ROLE_CHOICES], required=False)
    # Coerced by the directory service
    page = serializers.CharField(required=False, allow_blank=True, default="")
    limit = serializers.CharField(required=False, allow_blank=True, default="")


class UserStatusUpdateSerializer(serializers.Serializer):
    is_active = serializers.BooleanField()


# ---------------------------
# VIEWSET
# ---------------------------


class AdminUserViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_MANAGE_USERS

    @extend_schema(
        parameters=[
            OpenApiParameter("search", OpenApiTypes.STR, OpenApiParameter.QUERY),
            OpenApiParameter("is_active", OpenApiTypes.BOOL, OpenApiParameter.QUERY),
            OpenApiParameter("role", OpenApiTypes.STR, OpenApiParameter.QUERY, enum=["customer", "admin"]),
            OpenApiParameter("page", OpenApiTypes.INT, OpenApiParameter.QUERY),
            OpenApiParameter("limit", OpenApiTypes.INT, OpenApiParameter.QUERY),
        ],
        responses={200: AdminUserSerializer(many=True)},
        description="Paginated account list, newest first",
    )
    def list(self, request):
        query = UserListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data

        result = directory.list_users(
            search=params.get("search"),
            is_active=params.get("is_active"),
            role=params.get("role"),
            page=params.get("page"),
            page_size=params.get("limit"),
        )

        page = result["page"]
        pages = result["pages"]

        return Response(
            {
                "success": True,
                "users": AdminUserSerializer(result["items"], many=True).data,
                "pagination": {
                    "page": page,
                    "page_size": result["page_size"],
                    "pages": pages,
                    "total_count": result["total_count"],
                    "has_next": page < pages,
                    "has_prev": page > 1,
                },
            }
        )

    @extend_schema(responses={200: AdminUserSerializer})
    def retrieve(self, request, pk=None):
        user = directory.get_user(pk)
        orders = (
            Order.objects.filter(buyer=user)
            .select_related("buyer")
            .prefetch_related("items")
            .order_by("-created_at", "-id")
        )

        return Response(
            {
                "success": True,
                "user": AdminUserSerializer(user).data,
                "orders": OrderSerializer(orders, many=True).data,
            }
        )

    @extend_schema(responses={200: dict, 404: dict, 409: dict})
    def destroy(self, request, pk=None):
        directory.delete_user(pk, acting_user=request.user)
        return Response({"success": True, "message": "User deleted successfully"})

    @extend_schema(
        request=UserStatusUpdateSerializer,
        responses={200: AdminUserSerializer},
        description="Activate or block an account",
    )
    @action(detail=True, methods=["put"], url_path="status")
    def update_status(self, request, pk=None):
        serializer = UserStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = directory.set_user_status(
            pk,
            is_active=serializer.validated_data["is_active"],
            acting_user=request.user,
        )

        return Response(
            {
                "success": True,
                "message": "User status updated successfully",
                "user": AdminUserSerializer(user).data,
            }
        )

    @extend_schema(
        parameters=[
            OpenApiParameter(
                "days",
                OpenApiTypes.INT,
                OpenApiParameter.QUERY,
                description="Window for new_users (default 30).",
            ),
        ],
        responses={200: dict},
    )
    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request):
        stats = directory.user_statistics(
            request.query_params.get("days") or directory.DEFAULT_STATS_WINDOW_DAYS
        )
        return Response({"success": True, "stats": stats})
