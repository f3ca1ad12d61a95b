from django.contrib import admin
from .models import Donation


@admin.register(Donation)
class DonationAdmin(admin.ModelAdmin):
    list_display = ("user", "cause", "amount", "currency", "status", "is_anonymous", "donated_at")
    list_filter = ("status", "currency", "is_anonymous")
    search_fields = ("user__email", "cause__title")
    # Status follows the payment; edit it through the payment flows
    readonly_fields = ("status",)
