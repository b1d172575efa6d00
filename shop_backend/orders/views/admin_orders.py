# orders/views/admin_orders.py

"""
ADMIN ORDER MANAGEMENT (BACK OFFICE)

Routes (under /api/admin/):
    GET    orders/                 paginated list (status, sort_by, order, page, limit)
    GET    orders/stats/           dashboard numbers (days)
    GET    orders/<id>/            detail
    PUT    orders/<id>/status/     {order_status}
    DELETE orders/<id>/

Every route requires a bearer JWT and the orders.manage capability.
Business rules live in orders.services.ledger; this module only
translates HTTP <-> ledger calls.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiTypes, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from orders.exceptions import OrderNotFound
from orders.serializers import (
    OrderListQuerySerializer,
    OrderSerializer,
    OrderStatusUpdateSerializer,
)
from orders.services import ledger
from permissions.roles import CAP_MANAGE_ORDERS, HasCapability


def _money(x) -> str:
    return f"{x:.2f}"


class AdminOrderViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_MANAGE_ORDERS

    # -----------------------------
    # LIST
    # -----------------------------
    @extend_schema(
        parameters=[
            OpenApiParameter("status", OpenApiTypes.STR, OpenApiParameter.QUERY),
            OpenApiParameter("sort_by", OpenApiTypes.STR, OpenApiParameter.QUERY),
            OpenApiParameter("order", OpenApiTypes.STR, OpenApiParameter.QUERY, enum=["asc", "desc"]),
            OpenApiParameter("page", OpenApiTypes.INT, OpenApiParameter.QUERY),
            OpenApiParameter("limit", OpenApiTypes.INT, OpenApiParameter.QUERY),
        ],
        responses={200: OrderSerializer(many=True)},
        description="Paginated order list for the back office",
    )
    def list(self, request):
        query = OrderListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data

        result = ledger.list_orders(
            status=params.get("status"),
            sort_by=params.get("sort_by"),
            direction=params.get("order", "desc"),
            page=params["page"],
            page_size=params["limit"],
        )

        page = result["page"]
        pages = result["pages"]

        return Response(
            {
                "success": True,
                "orders": OrderSerializer(result["items"], many=True).data,
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

    # -----------------------------
    # DETAIL
    # -----------------------------
    @extend_schema(responses={200: OrderSerializer})
    def retrieve(self, request, pk=None):
        order = ledger.get_order(pk)
        return Response({"success": True, "order": OrderSerializer(order).data})

    # -----------------------------
    # DELETE
    # -----------------------------
    @extend_schema(responses={200: dict, 404: dict})
    def destroy(self, request, pk=None):
        if not ledger.delete_order(pk):
            raise OrderNotFound()
        return Response({"success": True, "message": "Order deleted successfully"})

    # -----------------------------
    # STATUS
    # -----------------------------
    @extend_schema(
        request=OrderStatusUpdateSerializer,
        responses={200: OrderSerializer},
        description="Move an order along its lifecycle",
    )
    @action(detail=True, methods=["put"], url_path="status")
    def update_status(self, request, pk=None):
        serializer = OrderStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        ledger.update_order_status(pk, serializer.validated_data["order_status"])
        order = ledger.get_order(pk)

        return Response(
            {
                "success": True,
                "message": "Order status updated successfully",
                "order": OrderSerializer(order).data,
            },
            status=status.HTTP_200_OK,
        )

    # -----------------------------
    # STATS
    # -----------------------------
    @extend_schema(
        parameters=[
            OpenApiParameter(
                "days",
                OpenApiTypes.INT,
                OpenApiParameter.QUERY,
                description="Window for recent_* numbers (default 30).",
            ),
        ],
        responses={200: dict},
        description="Order counts and revenue for the dashboard",
    )
    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request):
        stats = ledger.order_statistics(
            request.query_params.get("days") or ledger.DEFAULT_STATS_WINDOW_DAYS
        )

        return Response(
            {
                "success": True,
                "stats": {
                    **stats,
                    "total_revenue": _money(stats["total_revenue"]),
                    "recent_revenue": _money(stats["recent_revenue"]),
                },
            }
        )
