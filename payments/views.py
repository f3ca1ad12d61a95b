# payments/views.py
import json
import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Count
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminOnly, IsDonorOrAdmin
from accounts.utils.responses import error_response, validation_error_response
from causes.models import Cause
from donations.models import Donation
from .exceptions import (
    PaymentAlreadyProcessed,
    PaymentError,
    PaymentNotFound,
    PaymentProcessingError,
    PaystackError,
)
from .models import Payment
from .serializers import (
    BankTransferVerificationSerializer,
    PaymentRequestSerializer,
    PaymentSerializer,
    PaystackPaymentSerializer,
)
from .services import paystack
from .services.processors import get_processor
from .services.reference import generate_reference
from .services.status import fail_payment, get_payment_status, verify_bank_transfer
from .services.webhooks import (
    SUPPORTED_EVENTS,
    complete_from_verification,
    handle_paystack_event,
)

User = get_user_model()
logger = logging.getLogger(__name__)


# ====================================================
# PAYMENT INTAKE
# ====================================================
class PaymentView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = PaymentRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer)

        data = serializer.validated_data

        user = User.objects.filter(pk=data["user_id"], is_active=True).first()
        if not user:
            return error_response("User not found", status.HTTP_404_NOT_FOUND)

        cause = Cause.objects.filter(pk=data["cause_id"]).first()
        if not cause:
            return error_response("Cause not found", status.HTTP_404_NOT_FOUND)
        if not cause.is_accepting_donations:
            return error_response("This cause is not accepting donations")

        try:
            result = get_processor(data["payment_method"]).process(user, cause, data)
        except PaymentProcessingError as e:
            return error_response(str(e), status.HTTP_500_INTERNAL_SERVER_ERROR)
        except PaymentError as e:
            return error_response(str(e))

        return Response(result, status=status.HTTP_200_OK)

    def get(self, request):
        reference = request.query_params.get("reference")
        if not reference:
            return error_response("Payment reference is required")

        try:
            return Response(get_payment_status(reference))
        except PaymentNotFound:
            return error_response("Payment not found", status.HTTP_404_NOT_FOUND)


# ====================================================
# ADMIN: OFFLINE PAYMENT VERIFICATION
# ====================================================
class VerifyBankTransferView(APIView):
    permission_classes = [IsAdminOnly]

    def post(self, request):
        serializer = BankTransferVerificationSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer)

        reference = serializer.validated_data["reference"]
        transaction_id = serializer.validated_data["transaction_id"]

        try:
            payment = verify_bank_transfer(reference, transaction_id)
        except PaymentNotFound:
            return error_response("Payment not found", status.HTTP_404_NOT_FOUND)
        except PaymentAlreadyProcessed as e:
            return error_response(str(e), status.HTTP_409_CONFLICT)
        except PaymentError as e:
            return error_response(str(e))

        logger.info(f"Payment {reference} verified by {request.user.email}")

        return Response(
            {
                "success": True,
                "reference": payment.reference,
                "message": "Bank transfer verified successfully",
                "transactionId": payment.transaction_id,
                "status": payment.status,
            }
        )


# ====================================================
# ADMIN: PAYMENT LIST
# ====================================================
class AdminPaymentListView(APIView):
    permission_classes = [IsAdminOnly]

    def get(self, request):
        queryset = Payment.objects.select_related("user", "donation", "donation__cause")

        payment_status = request.query_params.get("status")
        if payment_status:
            queryset = queryset.filter(status=payment_status.upper())

        method = request.query_params.get("paymentMethod")
        if method:
            queryset = queryset.filter(payment_method=method.upper())

        counts = {key: 0 for key, _ in Payment.STATUS_CHOICES}
        for row in Payment.objects.values("status").annotate(count=Count("id")):
            counts[row["status"]] = row["count"]

        return Response(
            {
                "payments": PaymentSerializer(queryset, many=True).data,
                "counts": counts,
            }
        )


# ====================================================
# PAYSTACK CHECKOUT
# ====================================================
class PaystackPaymentView(APIView):
    permission_classes = [IsDonorOrAdmin]

    def post(self, request):
        serializer = PaystackPaymentSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer)

        data = serializer.validated_data
        user = request.user

        cause = Cause.objects.filter(pk=data["cause_id"]).first()
        if not cause:
            return error_response("Cause not found", status.HTTP_404_NOT_FOUND)
        if not cause.is_accepting_donations:
            return error_response("This cause is not accepting donations")

        with transaction.atomic():
            donation = Donation.objects.create(
                user=user,
                cause=cause,
                amount=data["amount"],
                currency=data["currency"],
                message=data["message"],
                is_anonymous=data["is_anonymous"],
                status="PENDING",
            )
            payment = Payment.objects.create(
                user=user,
                donation=donation,
                amount=data["amount"],
                currency=data["currency"],
                # Paystack mostly settles cards
                payment_method="DEBIT_CARD",
                provider="PAYSTACK",
                reference=generate_reference(prefix="DON", separator="_", length=13),
                status="PENDING",
            )

        donor_name = "Anonymous" if donation.is_anonymous else user.name
        metadata = {
            "custom_fields": [
                {"display_name": "Cause ID", "variable_name": "cause_id", "value": cause.id},
                {"display_name": "Cause Title", "variable_name": "cause_title", "value": cause.title},
                {"display_name": "Donor Name", "variable_name": "donor_name", "value": donor_name},
                {
                    "display_name": "Anonymous",
                    "variable_name": "is_anonymous",
                    "value": "true" if donation.is_anonymous else "false",
                },
                {"display_name": "Message", "variable_name": "message", "value": donation.message},
            ],
            "cause_id": cause.id,
            "cause_title": cause.title,
            "donor_name": donor_name,
            "is_anonymous": donation.is_anonymous,
            "message": donation.message,
        }

        try:
            response = paystack.initialize_payment(
                amount=payment.amount,
                email=user.email,
                reference=payment.reference,
                callback_url=settings.PAYSTACK_CALLBACK_URL,
                currency=payment.currency,
                metadata=metadata,
            )
            if not response.get("status"):
                raise PaystackError(response.get("message") or "Payment initialization failed", response=response)
        except PaystackError as e:
            fail_payment(payment.reference, reason=str(e))
            logger.warning(f"Paystack initialization failed for {payment.reference}: {e}")
            return error_response(
                "Payment initialization failed",
                status.HTTP_400_BAD_REQUEST,
                error=str(e),
            )

        gateway_data = response.get("data") or {}
        payment.transaction_id = gateway_data.get("reference") or payment.reference
        payment.save(update_fields=["transaction_id", "updated_at"])

        logger.info(f"Paystack payment initialized: {payment.reference} for {user.email}")

        return Response(
            {
                "success": True,
                "message": "Payment initialized successfully",
                "donation": {
                    "id": donation.id,
                    "amount": donation.amount,
                    "currency": donation.currency,
                    "status": donation.status,
                    "reference": payment.reference,
                    "transactionId": payment.transaction_id,
                    "cause": cause.title,
                    "donatedAt": donation.donated_at,
                },
                "payment": {
                    "authorizationUrl": gateway_data.get("authorization_url"),
                    "reference": gateway_data.get("reference") or payment.reference,
                    "message": response.get("message"),
                },
                "instructions": [
                    "Click the payment link to complete your donation",
                    "Choose your preferred payment method (card, bank transfer, mobile money)",
                    "Complete the payment on Paystack's secure platform",
                    "You will be redirected back after payment completion",
                ],
            }
        )

    def get(self, request):
        donation_id = request.query_params.get("donationId")
        if not donation_id:
            return error_response("Missing donation ID")

        donation = (
            Donation.objects.select_related("cause")
            .filter(pk=donation_id)
            .first()
            if str(donation_id).isdigit()
            else None
        )
        if not donation or (donation.user_id != request.user.id and not request.user.is_admin):
            return error_response("Donation not found", status.HTTP_404_NOT_FOUND)

        payment = donation.payments.order_by("-created_at").first()

        return Response(
            {
                "success": True,
                "donation": {
                    "id": donation.id,
                    "amount": donation.amount,
                    "currency": donation.currency,
                    "status": donation.status,
                    "reference": payment.reference if payment else None,
                    "transactionId": payment.transaction_id if payment else None,
                    "cause": donation.cause.title,
                    "donatedAt": donation.donated_at,
                },
            }
        )


class PaystackVerifyView(APIView):
    """
    Polled by the checkout callback page until the charge settles.
    """
    permission_classes = [IsDonorOrAdmin]

    def get(self, request):
        reference = request.query_params.get("reference")
        if not reference:
            return error_response("Payment reference is required")

        payment = Payment.objects.filter(reference=reference).first()
        if not payment or (payment.user_id != request.user.id and not request.user.is_admin):
            return error_response("Payment not found", status.HTTP_404_NOT_FOUND)

        if not payment.is_terminal:
            try:
                verification = paystack.verify_payment(reference)
            except PaystackError as e:
                return error_response(str(e))

            data = verification.get("data") or {}
            gateway_status = data.get("status")
            # abandoned, ongoing, pending and queued checkouts stay PENDING
            if gateway_status == "success":
                payment, _ = complete_from_verification(reference, data)
            elif gateway_status == "failed":
                payment, _ = fail_payment(
                    reference, reason=data.get("gateway_response") or gateway_status
                )

        return Response(
            {
                "success": payment.status == "COMPLETED",
                "reference": payment.reference,
                "status": payment.status,
                "amount": payment.amount,
                "currency": payment.currency,
                "transactionId": payment.transaction_id,
            }
        )


# ====================================================
# PAYSTACK WEBHOOK
# ====================================================
@csrf_exempt
def paystack_webhook(request):
    if request.method == "GET":
        return JsonResponse(
            {
                "message": "Paystack Webhook Endpoint",
                "status": "active",
                "timestamp": timezone.now().isoformat(),
                "supportedEvents": list(SUPPORTED_EVENTS),
            }
        )

    if request.method != "POST":
        return JsonResponse({"message": "Method not allowed"}, status=405)

    body = request.body
    signature = request.headers.get("x-paystack-signature")

    if not paystack.verify_webhook_signature(body, signature, settings.PAYSTACK_WEBHOOK_SECRET):
        logger.warning("Paystack webhook signature verification failed")
        return JsonResponse({"message": "Unauthorized"}, status=401)

    try:
        event = json.loads(body)
    except ValueError:
        logger.error("Paystack webhook body is not valid JSON")
        return JsonResponse({"message": "Invalid JSON payload"}, status=400)

    if not isinstance(event, dict):
        return JsonResponse({"message": "Invalid JSON payload"}, status=400)

    try:
        handle_paystack_event(event)
    except Exception as e:
        # 500 makes Paystack redeliver
        logger.exception(f"Error processing Paystack webhook: {e}")
        return JsonResponse(
            {"message": "Webhook processing failed", "error": "Internal server error"},
            status=500,
        )

    return JsonResponse({"success": True, "message": "Webhook processed successfully"})
