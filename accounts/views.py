# ====================================================
# STANDARD LIBRARY / DJANGO IMPORTS
# ====================================================
import logging
import math
import random
import time

from django.conf import settings
from django.contrib.auth import authenticate, get_user_model
from django.db import IntegrityError
from django.utils import timezone

# ====================================================
# DJANGO REST FRAMEWORK IMPORTS
# ====================================================
from rest_framework import status
from rest_framework.exceptions import Throttled
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

# ====================================================
# JWT IMPORTS
# ====================================================
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import RefreshToken

# ====================================================
# LOCAL IMPORTS
# ====================================================
from .emails import send_welcome_email
from .models import UserPreferences, UserSettings
from .serializers import (
    EmailVerificationSerializer,
    LoginSerializer,
    RegisterSerializer,
    UserDetailSerializer,
    UserPreferencesSerializer,
    UserSerializer,
    UserSettingsSerializer,
)
from .throttles import VerifyEmailAddressThrottle, VerifyEmailIPThrottle
from .tokens import issue_tokens
from .utils.responses import error_response, validation_error_response


# ====================================================
# GLOBALS
# ====================================================
User = get_user_model()
logger = logging.getLogger(__name__)


# ====================================================
# USER REGISTRATION
# ====================================================
class RegisterView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer)

        email = serializer.validated_data["email"]
        if User.objects.filter(email__iexact=email).exists():
            return error_response(
                "User with this email already exists",
                status.HTTP_409_CONFLICT,
            )

        try:
            user = serializer.save()
        except IntegrityError:
            return error_response(
                "User with this email already exists",
                status.HTTP_409_CONFLICT,
            )

        tokens = issue_tokens(user)

        # Registration stands even when the mail server does not
        try:
            send_welcome_email(user)
            logger.info(f"Welcome email sent to: {user.email}")
        except Exception:
            logger.exception(f"Failed to send welcome email to {user.email}")

        logger.info(f"New user registered: {user.email} ({user.role})")

        return Response(
            {
                "user": UserDetailSerializer(user).data,
                **tokens,
                "message": "User registered successfully",
            },
            status=status.HTTP_201_CREATED,
        )


# ====================================================
# LOGIN
# ====================================================
class LoginView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        if not request.data.get("email") or not request.data.get("password"):
            return error_response("Email and password are required")

        serializer = LoginSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer)

        email = serializer.validated_data["email"]
        user = authenticate(
            request,
            email=email,
            password=serializer.validated_data["password"],
        )

        if not user:
            logger.warning(f"Failed login attempt for email: {email}")
            return error_response("Invalid credentials", status.HTTP_401_UNAUTHORIZED)

        if user.is_admin:
            logger.info(f"Admin login: {email}")

        tokens = issue_tokens(user)
        logger.info(f"Successful login: {email} ({user.role})")

        return Response(
            {"user": UserDetailSerializer(user).data, **tokens},
            status=status.HTTP_200_OK,
        )


# ====================================================
# TOKEN REFRESH
# ====================================================
class RefreshTokenView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        raw_token = request.data.get("refreshToken")

        if not raw_token:
            return error_response("Refresh token is required")

        try:
            refresh = RefreshToken(raw_token)
        except TokenError:
            return error_response(
                "Invalid or expired refresh token",
                status.HTTP_401_UNAUTHORIZED,
            )

        user_id = refresh.get(api_settings.USER_ID_CLAIM)
        user = User.objects.filter(pk=user_id).first()
        if not user:
            return error_response("User not found", status.HTTP_404_NOT_FOUND)

        stored = UserSettings.objects.filter(user=user).values_list(
            "refresh_token", flat=True
        ).first()
        if stored != raw_token:
            return error_response("Invalid refresh token", status.HTTP_401_UNAUTHORIZED)

        refresh.blacklist()
        tokens = issue_tokens(user)

        return Response(
            {"user": UserDetailSerializer(user).data, **tokens},
            status=status.HTTP_200_OK,
        )


# ====================================================
# LOGOUT
# ====================================================
class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        user_settings, _ = UserSettings.objects.get_or_create(user=request.user)

        for raw_token in {request.data.get("refreshToken"), user_settings.refresh_token}:
            if not raw_token:
                continue
            try:
                RefreshToken(raw_token).blacklist()
            except TokenError:
                # Already expired or blacklisted
                logger.debug("Skipping blacklist of an invalid refresh token")

        user_settings.refresh_token = None
        user_settings.last_logout = timezone.now()
        user_settings.save(update_fields=["refresh_token", "last_logout", "updated_at"])

        logger.info(f"User logged out: {request.user.id}")

        return Response(
            {"message": "Logged out successfully"},
            status=status.HTTP_200_OK,
        )


# ====================================================
# CURRENT USER
# ====================================================
class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(UserDetailSerializer(request.user).data)

    def patch(self, request):
        serializer = UserSerializer(request.user, data=request.data, partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer)
        serializer.save()
        return Response(UserDetailSerializer(request.user).data)


# ====================================================
# EMAIL VERIFICATION
# ====================================================
class VerifyEmailView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]
    throttle_classes = [VerifyEmailIPThrottle, VerifyEmailAddressThrottle]

    def check_throttles(self, request):
        # First throttle to refuse decides the message
        for throttle in self.get_throttles():
            if not throttle.allow_request(request, self):
                logger.warning(f"Email verification throttled: {throttle.scope}")
                exc = Throttled(detail=throttle.message)
                exc.wait = throttle.wait()
                raise exc

    def handle_exception(self, exc):
        if isinstance(exc, Throttled):
            headers = {"Retry-After": str(math.ceil(exc.wait))} if exc.wait else None
            return Response(
                {"success": False, "message": str(exc.detail)},
                status=status.HTTP_429_TOO_MANY_REQUESTS,
                headers=headers,
            )
        return super().handle_exception(exc)

    def post(self, request):
        if not request.data.get("email"):
            return Response(
                {"success": False, "message": "Email is required"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        serializer = EmailVerificationSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"success": False, "message": "Invalid email format"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        email = serializer.validated_data["email"]
        exists = User.objects.filter(email__iexact=email).exists()

        # Same delay on both branches so response time says nothing
        delay = settings.EMAIL_VERIFICATION_DELAY_SECONDS
        if delay > 0:
            time.sleep(delay + random.uniform(0, 0.5))

        if not exists:
            return Response(
                {"success": False, "message": "Email verification failed"},
                status=status.HTTP_404_NOT_FOUND,
            )

        return Response(
            {"success": True, "message": "Email verified successfully"},
            status=status.HTTP_200_OK,
        )


# ====================================================
# PREFERENCES & SETTINGS
# ====================================================
class PreferencesView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        preferences, _ = UserPreferences.objects.get_or_create(user=request.user)
        return Response(
            {"success": True, "preferences": UserPreferencesSerializer(preferences).data}
        )

    def put(self, request):
        preferences, _ = UserPreferences.objects.get_or_create(user=request.user)
        serializer = UserPreferencesSerializer(preferences, data=request.data, partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer)
        serializer.save()

        return Response(
            {
                "success": True,
                "message": "Preferences updated successfully",
                "preferences": serializer.data,
            }
        )


class SettingsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        user_settings, _ = UserSettings.objects.get_or_create(user=request.user)
        return Response(
            {"success": True, "settings": UserSettingsSerializer(user_settings).data}
        )

    def put(self, request):
        user_settings, _ = UserSettings.objects.get_or_create(user=request.user)
        serializer = UserSettingsSerializer(user_settings, data=request.data, partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer)
        serializer.save()

        return Response(
            {
                "success": True,
                "message": "Settings updated successfully",
                "settings": serializer.data,
            }
        )
