# products/admin.py

from __future__ import annotations

from django.contrib import admin

from products.models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "category",
        "price",
        "compare_at_price",
        "is_available",
        "created_at",
    )
    list_filter = ("is_available", "category", "created_at")
    search_fields = ("name", "category")
    ordering = ("-created_at",)
    readonly_fields = ("created_at", "updated_at")
