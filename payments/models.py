from django.conf import settings
from django.db import models


class Payment(models.Model):
    METHOD_CHOICES = [
        ("MOBILE_MONEY", "Mobile money"),
        ("BANK_TRANSFER", "Bank transfer"),
        ("DEBIT_CARD", "Debit card"),
        ("CASH", "Cash"),
    ]
    STATUS_CHOICES = [
        ("PENDING", "Pending"),
        ("COMPLETED", "Completed"),
        ("FAILED", "Failed"),
    ]
    TERMINAL_STATUSES = ("COMPLETED", "FAILED")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="payments"
    )
    donation = models.ForeignKey(
        "donations.Donation", on_delete=models.CASCADE, related_name="payments"
    )

    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="GHS")
    payment_method = models.CharField(max_length=20, choices=METHOD_CHOICES)
    provider = models.CharField(max_length=50, blank=True)

    reference = models.CharField(max_length=64, unique=True)
    transaction_id = models.CharField(max_length=100, blank=True, null=True)

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default="PENDING",
    )

    metadata = models.JSONField(default=dict, blank=True)
    processed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.reference} - {self.amount} - {self.status}"

    @property
    def is_terminal(self):
        return self.status in self.TERMINAL_STATUSES
