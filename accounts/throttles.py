from django.conf import settings
from rest_framework.throttling import SimpleRateThrottle

from .serializers import EmailVerificationSerializer


class EmailVerificationThrottle(SimpleRateThrottle):
    """
    Base for the verify-email throttles.

    The limit comes from ``limit_setting`` and the window from
    EMAIL_VERIFICATION_WINDOW_SECONDS, both read per request.
    """
    limit_setting = None
    message = "Too many attempts. Please try again later."

    def get_rate(self):
        return f"{getattr(settings, self.limit_setting)}/{settings.EMAIL_VERIFICATION_WINDOW_SECONDS}"

    def parse_rate(self, rate):
        num_requests, duration = rate.split("/")
        return int(num_requests), int(duration)


class VerifyEmailIPThrottle(EmailVerificationThrottle):
    scope = "verify-email-ip"
    limit_setting = "EMAIL_VERIFICATION_IP_LIMIT"

    def get_cache_key(self, request, view):
        return self.cache_format % {"scope": self.scope, "ident": self.get_ident(request)}


class VerifyEmailAddressThrottle(EmailVerificationThrottle):
    scope = "verify-email-address"
    limit_setting = "EMAIL_VERIFICATION_EMAIL_LIMIT"
    message = "Too many attempts for this email. Please try again later."

    def get_cache_key(self, request, view):
        serializer = EmailVerificationSerializer(data=request.data)
        # Malformed input is rejected by the view, not counted here
        if not serializer.is_valid():
            return None
        return self.cache_format % {
            "scope": self.scope,
            "ident": serializer.validated_data["email"],
        }
