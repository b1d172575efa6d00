# users/admin_urls.py

"""
USER MANAGEMENT URLS (BACK OFFICE)

Mounted under /api/admin/:
    /api/admin/users/
    /api/admin/users/stats/
    /api/admin/users/<id>/
    /api/admin/users/<id>/status/
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from users.views import AdminUserViewSet

router = SimpleRouter()
router.register(r"users", AdminUserViewSet, basename="admin-users")

urlpatterns = [
    path("", include(router.urls)),
]
