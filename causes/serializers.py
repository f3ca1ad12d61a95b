from rest_framework import serializers
from .models import Cause


class CauseSerializer(serializers.ModelSerializer):
    targetAmount = serializers.DecimalField(
        source="target_amount", max_digits=12, decimal_places=2
    )
    raisedAmount = serializers.DecimalField(
        source="raised_amount", max_digits=12, decimal_places=2, read_only=True
    )
    imageUrl = serializers.URLField(
        source="image_url", max_length=500, required=False, allow_blank=True
    )
    progress = serializers.FloatField(source="progress_percentage", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Cause
        fields = (
            "id",
            "title",
            "description",
            "targetAmount",
            "raisedAmount",
            "progress",
            "category",
            "location",
            "status",
            "imageUrl",
            "featured",
            "deadline",
            "createdAt",
            "updatedAt",
        )

    def validate_targetAmount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Target amount must be greater than zero.")
        return value


class CauseSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Cause
        fields = ("id", "title")
