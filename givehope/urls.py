from django.contrib import admin
from django.urls import include, path

from payments.views import paystack_webhook

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/auth/", include("accounts.urls")),
    path("api/user/", include("accounts.user_urls")),
    path("api/causes/", include("causes.urls")),
    path("api/donations/", include("donations.urls")),
    path("api/payments/", include("payments.urls")),
    path("api/webhooks/paystack/", paystack_webhook, name="paystack-webhook"),
]
