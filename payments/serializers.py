from decimal import Decimal

from django.conf import settings
from rest_framework import serializers

from .models import Payment

MISSING_FIELDS = {"required": "Missing required fields", "null": "Missing required fields"}


class BankDetailsSerializer(serializers.Serializer):
    accountNumber = serializers.CharField(source="account_number", max_length=34)
    accountName = serializers.CharField(source="account_name", max_length=150)
    bankName = serializers.CharField(source="bank_name", max_length=150)


class CardDetailsSerializer(serializers.Serializer):
    cardNumber = serializers.RegexField(
        r"^[\d ]{12,23}$",
        source="card_number",
        error_messages={"invalid": "Invalid card number"},
    )
    expiryDate = serializers.RegexField(
        r"^\d{2}/\d{2,4}$",
        source="expiry_date",
        error_messages={"invalid": "Expiry date must be MM/YY"},
    )
    cvv = serializers.RegexField(r"^\d{3,4}$", error_messages={"invalid": "Invalid CVV"})
    cardHolderName = serializers.CharField(source="card_holder_name", max_length=150)


# =========================
# Payment intake
# =========================
class PaymentRequestSerializer(serializers.Serializer):
    amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0.01"),
        error_messages={**MISSING_FIELDS, "min_value": "Amount must be a positive number"},
    )
    currency = serializers.CharField(max_length=3, required=False)
    paymentMethod = serializers.ChoiceField(
        source="payment_method",
        choices=Payment.METHOD_CHOICES,
        error_messages={**MISSING_FIELDS, "invalid_choice": "Invalid payment method"},
    )
    provider = serializers.CharField(max_length=50, error_messages=MISSING_FIELDS)
    userId = serializers.IntegerField(source="user_id", error_messages=MISSING_FIELDS)
    causeId = serializers.IntegerField(source="cause_id", error_messages=MISSING_FIELDS)
    message = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    isAnonymous = serializers.BooleanField(source="is_anonymous", required=False, default=False)

    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    bankDetails = BankDetailsSerializer(source="bank_details", required=False)
    cardDetails = CardDetailsSerializer(source="card_details", required=False)

    def validate_currency(self, value):
        return value.upper()

    def validate(self, attrs):
        method = attrs["payment_method"]

        if method == "MOBILE_MONEY" and not attrs.get("phone"):
            raise serializers.ValidationError(
                {"phone": "Phone number is required for mobile money payments"}
            )
        if method == "BANK_TRANSFER" and not attrs.get("bank_details"):
            raise serializers.ValidationError(
                {"bankDetails": "Bank details are required for bank transfer payments"}
            )
        if method == "DEBIT_CARD" and not attrs.get("card_details"):
            raise serializers.ValidationError(
                {"cardDetails": "Card details are required for debit card payments"}
            )

        attrs.setdefault("currency", settings.DEFAULT_CURRENCY)
        return attrs


class BankTransferVerificationSerializer(serializers.Serializer):
    reference = serializers.CharField(
        max_length=64,
        error_messages={"required": "Reference and transaction ID are required"},
    )
    transactionId = serializers.CharField(
        source="transaction_id",
        max_length=100,
        error_messages={"required": "Reference and transaction ID are required"},
    )


class PaystackPaymentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        error_messages={"required": "Missing required fields", "invalid": "Invalid amount. Must be a positive number."},
    )
    currency = serializers.CharField(max_length=3, error_messages=MISSING_FIELDS)
    causeId = serializers.IntegerField(source="cause_id", error_messages=MISSING_FIELDS)
    isAnonymous = serializers.BooleanField(source="is_anonymous", required=False, default=False)
    message = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Invalid amount. Must be a positive number.")
        return value

    def validate_currency(self, value):
        return value.upper()


# =========================
# Output
# =========================
class PaymentSerializer(serializers.ModelSerializer):
    paymentMethod = serializers.CharField(source="payment_method")
    transactionId = serializers.CharField(source="transaction_id")
    processedAt = serializers.DateTimeField(source="processed_at")
    createdAt = serializers.DateTimeField(source="created_at")
    donationId = serializers.IntegerField(source="donation_id")
    cause = serializers.SerializerMethodField()
    user = serializers.SerializerMethodField()

    class Meta:
        model = Payment
        fields = (
            "id",
            "reference",
            "amount",
            "currency",
            "paymentMethod",
            "provider",
            "status",
            "transactionId",
            "metadata",
            "processedAt",
            "createdAt",
            "donationId",
            "cause",
            "user",
        )

    def get_cause(self, obj):
        cause = obj.donation.cause
        return {"id": cause.id, "title": cause.title}

    def get_user(self, obj):
        return {"id": obj.user_id, "name": obj.user.name, "email": obj.user.email}
