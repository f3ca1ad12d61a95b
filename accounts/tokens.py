from django.utils import timezone
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import RefreshToken

from .models import UserSettings


def issue_tokens(user):
    """
    Mint an access/refresh pair and remember the refresh token on the
    user's settings row so stale ones can be rejected later.
    """
    refresh = RefreshToken.for_user(user)
    refresh["email"] = user.email
    refresh["role"] = user.role

    settings_row, _ = UserSettings.objects.get_or_create(user=user)
    settings_row.refresh_token = str(refresh)
    settings_row.last_login = timezone.now()
    settings_row.save(update_fields=["refresh_token", "last_login", "updated_at"])

    return {
        "accessToken": str(refresh.access_token),
        "refreshToken": str(refresh),
        "expiresIn": int(api_settings.ACCESS_TOKEN_LIFETIME.total_seconds()),
    }
