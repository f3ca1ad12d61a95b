from rest_framework import serializers

from causes.serializers import CauseSummarySerializer
from .models import Donation


class DonationSerializer(serializers.ModelSerializer):
    cause = CauseSummarySerializer(read_only=True)
    isAnonymous = serializers.BooleanField(source="is_anonymous", read_only=True)
    donatedAt = serializers.DateTimeField(source="donated_at", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    payment = serializers.SerializerMethodField()

    class Meta:
        model = Donation
        fields = (
            "id",
            "amount",
            "currency",
            "message",
            "isAnonymous",
            "status",
            "cause",
            "payment",
            "donatedAt",
            "createdAt",
        )

    def get_payment(self, obj):
        # Latest attempt only; a donation normally has a single payment
        payments = list(obj.payments.all())
        if not payments:
            return None
        payment = max(payments, key=lambda p: p.created_at)
        return {
            "reference": payment.reference,
            "paymentMethod": payment.payment_method,
            "provider": payment.provider,
            "status": payment.status,
        }


class AdminDonationSerializer(DonationSerializer):
    donor = serializers.SerializerMethodField()

    class Meta(DonationSerializer.Meta):
        fields = DonationSerializer.Meta.fields + ("donor",)

    def get_donor(self, obj):
        return {"id": obj.user_id, "name": obj.user.name, "email": obj.user.email}


class PublicDonationSerializer(serializers.ModelSerializer):
    """
    What anyone may see about a donation on a cause page.
    """
    donorName = serializers.CharField(source="donor_display_name", read_only=True)
    donatedAt = serializers.DateTimeField(source="donated_at", read_only=True)

    class Meta:
        model = Donation
        fields = ("id", "amount", "currency", "message", "donorName", "donatedAt")
