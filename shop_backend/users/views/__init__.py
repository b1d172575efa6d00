from .admin_users import AdminUserViewSet
from .auth import LoginView, RegisterVerifyView, RegisterView
from .me import MeView

__all__ = [
    "RegisterView",
    "RegisterVerifyView",
    "LoginView",
    "MeView",
    "AdminUserViewSet",
]
