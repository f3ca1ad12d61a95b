from django.contrib import admin
from .models import Cause


@admin.register(Cause)
class CauseAdmin(admin.ModelAdmin):
    list_display = (
        "title",
        "category",
        "location",
        "target_amount",
        "raised_amount",
        "status",
        "featured",
    )
    list_filter = ("status", "category", "featured")
    search_fields = ("title", "description", "category", "location")
    readonly_fields = ("raised_amount",)
