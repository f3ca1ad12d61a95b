from django.contrib import admin
from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = (
        "reference",
        "user",
        "amount",
        "currency",
        "payment_method",
        "provider",
        "status",
        "created_at",
    )
    list_filter = ("status", "payment_method", "provider")
    search_fields = ("reference", "transaction_id", "user__email")
    readonly_fields = ("reference", "status", "transaction_id", "processed_at", "metadata")
