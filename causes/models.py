from decimal import Decimal

from django.db import models


# =========================
# Cause Model
# =========================
class Cause(models.Model):
    STATUS_CHOICES = [
        ("ACTIVE", "Active"),
        ("PAUSED", "Paused"),
        ("DRAFT", "Draft"),
        ("COMPLETED", "Completed"),
    ]

    title = models.CharField(max_length=200)
    description = models.TextField()
    target_amount = models.DecimalField(max_digits=12, decimal_places=2)
    raised_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Sum of completed payments; only the payment status updater writes it",
    )
    category = models.CharField(max_length=100)
    location = models.CharField(max_length=200)
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default="ACTIVE",
    )
    image_url = models.URLField(max_length=500, blank=True)
    featured = models.BooleanField(default=False)
    deadline = models.DateField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.title} ({self.status})"

    @property
    def is_accepting_donations(self):
        return self.status == "ACTIVE"

    @property
    def progress_percentage(self):
        if not self.target_amount:
            return 0.0
        percentage = (self.raised_amount / self.target_amount) * 100
        return float(min(round(percentage, 1), Decimal("100")))
