from django.contrib.auth import authenticate
from django.utils import timezone
from drf_spectacular.utils import extend_schema
from rest_framework import serializers, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from users.services.registration import confirm_registration, start_registration

# ---------------------------
# SERIALIZERS (LOCAL, SIMPLE)
# ---------------------------


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=8)
    name = serializers.CharField(required=False, allow_blank=True, max_length=150)


class RegisterVerifySerializer(serializers.Serializer):
    email = serializers.EmailField()
    code = serializers.RegexField(r"^\d{6}$")


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)


class AuthUserSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    email = serializers.EmailField()
    name = serializers.CharField()
    role = serializers.CharField()


class TokenResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    refresh = serializers.CharField()
    access = serializers.CharField()
    user = AuthUserSerializer()


def _token_payload(user) -> dict:
    refresh = RefreshToken.for_user(user)
    return {
        "success": True,
        "refresh": str(refresh),
        "access": str(refresh.access_token),
        "user": {
            "id": str(user.id),
            "email": user.email,
            "name": user.name,
            "role": user.role,
        },
    }


# ---------------------------
# VIEWS
# ---------------------------


class RegisterView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_scope = "auth"
    serializer_class = RegisterSerializer

    @extend_schema(
        request=RegisterSerializer,
        responses={202: dict},
        description="Start sign-up: emails a 6-digit verification code",
    )
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        pending = start_registration(
            email=data["email"],
            password=data["password"],
            name=data.get("name", ""),
        )

        return Response(
            {
                "success": True,
                "message": "Verification code sent",
                "email": pending.email,
                "expires_at": pending.expires_at,
            },
            status=status.HTTP_202_ACCEPTED,
        )


class RegisterVerifyView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_scope = "auth"
    serializer_class = RegisterVerifySerializer

    @extend_schema(
        request=RegisterVerifySerializer,
        responses={201: TokenResponseSerializer},
        description="Finish sign-up with the emailed code; returns JWT tokens",
    )
    def post(self, request):
        serializer = RegisterVerifySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = confirm_registration(
            email=serializer.validated_data["email"],
            code=serializer.validated_data["code"],
        )

        return Response(_token_payload(user), status=status.HTTP_201_CREATED)


class LoginView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_scope = "auth"
    serializer_class = LoginSerializer

    @extend_schema(
        request=LoginSerializer,
        responses={200: TokenResponseSerializer},
        description="Authenticate with email and password; returns JWT tokens",
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = authenticate(
            request=request,
            email=serializer.validated_data["email"],
            password=serializer.validated_data["password"],
        )

        if not user:
            return Response(
                {"success": False, "error": "Invalid credentials"},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        user.last_login_at = timezone.now()
        user.save(update_fields=["last_login_at"])

        return Response(_token_payload(user))
