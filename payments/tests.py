import hashlib
import hmac
import json
from decimal import Decimal
from unittest.mock import MagicMock, patch

import requests
from django.core import mail
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase
from rest_framework_simplejwt.tokens import RefreshToken

from accounts.models import User
from causes.models import Cause
from donations.models import Donation
from .exceptions import PaymentNotFound, PaystackError
from .models import Payment
from .services import paystack
from .services.gateways import ChargeResult, SimulatedChargeGateway
from .services.processors import detect_card_type, get_processor
from .services.reference import generate_reference
from .services.status import complete_payment, fail_payment, transition_payment

WEBHOOK_SECRET = "sk_test_webhook_secret"


def make_user(email="donor@example.com", role="DONOR"):
    return User.objects.create_user(
        email=email,
        password="DonorPass123",
        name="Kofi Mensah",
        role=role,
    )


def make_cause(**kwargs):
    defaults = {
        "title": "School Library",
        "description": "Books for a rural school",
        "target_amount": Decimal("100.00"),
        "category": "Education",
        "location": "Tamale",
    }
    defaults.update(kwargs)
    return Cause.objects.create(**defaults)


def make_pending_payment(user, cause, amount="30.00", method="BANK_TRANSFER", reference=None):
    donation = Donation.objects.create(user=user, cause=cause, amount=Decimal(amount))
    return Payment.objects.create(
        user=user,
        donation=donation,
        amount=Decimal(amount),
        payment_method=method,
        provider="PAYSTACK",
        reference=reference or generate_reference(),
    )


def sign(body, secret=WEBHOOK_SECRET):
    return hmac.new(secret.encode(), body, hashlib.sha512).hexdigest()


class FixedGateway:
    def __init__(self, success):
        self.success = success

    def charge(self, payment):
        if self.success:
            return ChargeResult(success=True, transaction_id="MM1700000000000")
        return ChargeResult(success=False, reason="Mobile money payment failed")


# -------------------------
# Reference generator
# -------------------------
class ReferenceTests(TestCase):
    def test_consecutive_references_are_distinct(self):
        references = {generate_reference() for _ in range(500)}
        self.assertEqual(len(references), 500)

    def test_default_reference_shape(self):
        reference = generate_reference()
        self.assertTrue(reference.startswith("GH"))
        self.assertEqual(reference, reference.upper())
        self.assertEqual(len(reference), 2 + 13 + 6)

    def test_paystack_reference_shape(self):
        reference = generate_reference(prefix="DON", separator="_", length=13)
        prefix, millis, fragment = reference.split("_")
        self.assertEqual(prefix, "DON")
        self.assertTrue(millis.isdigit())
        self.assertEqual(len(fragment), 13)


# -------------------------
# Paystack adapter
# -------------------------
@override_settings(
    PAYSTACK_SECRET_KEY="sk_test_123",
    PAYSTACK_BASE_URL="https://api.paystack.test",
    PAYSTACK_TIMEOUT=5,
)
class PaystackAdapterTests(TestCase):
    def test_convert_to_kobo(self):
        self.assertEqual(paystack.convert_to_kobo(10, "GHS"), 1000)
        self.assertEqual(paystack.convert_to_kobo(0.5, "USD"), 50)
        self.assertEqual(paystack.convert_to_kobo(Decimal("12.345"), "NGN"), 1235)
        self.assertEqual(paystack.convert_to_kobo(3, "XOF"), 300)

    @patch("payments.services.paystack.requests.request")
    def test_initialize_payment_sends_minor_units_with_timeout(self, mock_request):
        mock_request.return_value = MagicMock(
            ok=True,
            json=MagicMock(return_value={"status": True, "data": {"authorization_url": "https://checkout"}}),
        )

        response = paystack.initialize_payment(
            amount=Decimal("25.50"),
            email="donor@example.com",
            reference="DON_1_ABC",
            callback_url="http://localhost:3000/payment/verify",
            currency="ghs",
        )

        self.assertEqual(response["data"]["authorization_url"], "https://checkout")
        args, kwargs = mock_request.call_args
        self.assertEqual(args, ("POST", "https://api.paystack.test/transaction/initialize"))
        self.assertEqual(kwargs["json"]["amount"], 2550)
        self.assertEqual(kwargs["json"]["currency"], "GHS")
        self.assertEqual(kwargs["timeout"], 5)
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer sk_test_123")

    @patch("payments.services.paystack.requests.request")
    def test_create_customer_posts_names_when_given(self, mock_request):
        mock_request.return_value = MagicMock(
            ok=True,
            json=MagicMock(return_value={"status": True, "data": {"customer_code": "CUS_abc"}}),
        )

        response = paystack.create_customer("donor@example.com", first_name="Ama")

        self.assertEqual(response["data"]["customer_code"], "CUS_abc")
        args, kwargs = mock_request.call_args
        self.assertEqual(args, ("POST", "https://api.paystack.test/customer"))
        self.assertEqual(kwargs["json"], {"email": "donor@example.com", "first_name": "Ama"})
        self.assertEqual(kwargs["timeout"], 5)

    @patch("payments.services.paystack.requests.request")
    def test_non_2xx_raises_with_gateway_message(self, mock_request):
        mock_request.return_value = MagicMock(
            ok=False,
            status_code=401,
            reason="Unauthorized",
            json=MagicMock(return_value={"status": False, "message": "Invalid key"}),
        )

        with self.assertRaises(PaystackError) as ctx:
            paystack.verify_payment("DON_1_ABC")

        self.assertIn("Invalid key", str(ctx.exception))
        self.assertEqual(ctx.exception.status_code, 401)

    @patch("payments.services.paystack.requests.request")
    def test_network_failure_raises(self, mock_request):
        mock_request.side_effect = requests.ConnectionError("boom")
        with self.assertRaises(PaystackError):
            paystack.verify_payment("DON_1_ABC")

    @override_settings(PAYSTACK_SECRET_KEY="")
    def test_missing_secret_key_raises(self):
        with self.assertRaises(PaystackError):
            paystack.verify_payment("DON_1_ABC")

    @patch("payments.services.paystack.requests.request")
    def test_test_connection_never_raises(self, mock_request):
        mock_request.side_effect = requests.Timeout("slow")
        result = paystack.test_connection()
        self.assertFalse(result["success"])

    def test_webhook_signature(self):
        body = b'{"event":"charge.success"}'
        self.assertTrue(paystack.verify_webhook_signature(body, sign(body), WEBHOOK_SECRET))
        self.assertFalse(paystack.verify_webhook_signature(body + b" ", sign(body), WEBHOOK_SECRET))
        self.assertFalse(paystack.verify_webhook_signature(body, None, WEBHOOK_SECRET))
        self.assertFalse(paystack.verify_webhook_signature(body, sign(body), ""))


# -------------------------
# Status updater
# -------------------------
class StatusUpdaterTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.cause = make_cause()

    def test_two_completions_add_up_once_each(self):
        first = make_pending_payment(self.user, self.cause)
        second = make_pending_payment(self.user, self.cause)

        complete_payment(first.reference, transaction_id="T1")
        complete_payment(second.reference, transaction_id="T2")
        # Replay of the first one
        _, applied = complete_payment(first.reference, transaction_id="T1")

        self.assertFalse(applied)
        self.cause.refresh_from_db()
        self.assertEqual(self.cause.raised_amount, Decimal("60.00"))

    def test_completion_mirrors_donation_status(self):
        payment = make_pending_payment(self.user, self.cause)

        complete_payment(payment.reference, transaction_id="T1", metadata={"fees": 0.5})

        payment.refresh_from_db()
        payment.donation.refresh_from_db()
        self.assertEqual(payment.status, "COMPLETED")
        self.assertEqual(payment.donation.status, "COMPLETED")
        self.assertEqual(payment.transaction_id, "T1")
        self.assertIsNotNone(payment.processed_at)
        self.assertEqual(payment.metadata["fees"], 0.5)
        self.assertIn("processedAt", payment.metadata)

    def test_failed_payment_cannot_be_completed(self):
        payment = make_pending_payment(self.user, self.cause)

        fail_payment(payment.reference, reason="Declined")
        _, applied = complete_payment(payment.reference)

        self.assertFalse(applied)
        payment.refresh_from_db()
        self.cause.refresh_from_db()
        self.assertEqual(payment.status, "FAILED")
        self.assertEqual(payment.metadata["reason"], "Declined")
        self.assertEqual(self.cause.raised_amount, Decimal("0.00"))

    def test_unknown_reference_raises(self):
        with self.assertRaises(PaymentNotFound):
            transition_payment("GH_MISSING", "COMPLETED")

    def test_completion_emails_opted_in_donor(self):
        payment = make_pending_payment(self.user, self.cause)

        with self.captureOnCommitCallbacks(execute=True):
            complete_payment(payment.reference)

        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(self.cause.title, mail.outbox[0].subject)

    def test_no_email_when_notifications_disabled(self):
        self.user.preferences.email_notifications = False
        self.user.preferences.save()
        payment = make_pending_payment(self.user, self.cause)

        with self.captureOnCommitCallbacks(execute=True):
            fail_payment(payment.reference, reason="Declined")

        self.assertEqual(len(mail.outbox), 0)


# -------------------------
# Processors
# -------------------------
class ProcessorTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.cause = make_cause()

    def _data(self, **extra):
        data = {
            "amount": Decimal("30.00"),
            "currency": "GHS",
            "provider": "MTN_MOMO",
            "message": "",
            "is_anonymous": False,
        }
        data.update(extra)
        return data

    def test_mobile_money_success_completes_everything(self):
        processor = get_processor("MOBILE_MONEY", gateway=FixedGateway(success=True))

        result = processor.process(self.user, self.cause, self._data(phone="0241234567"))

        self.assertTrue(result["success"])
        self.assertEqual(result["status"], "COMPLETED")
        self.assertEqual(Donation.objects.count(), 1)
        payment = Payment.objects.get()
        self.assertEqual(payment.status, "COMPLETED")
        self.assertEqual(payment.donation.status, "COMPLETED")
        self.assertEqual(payment.metadata["phone"], "0241234567")
        self.cause.refresh_from_db()
        self.assertEqual(self.cause.raised_amount, Decimal("30.00"))

    def test_mobile_money_failure_fails_both_rows(self):
        processor = get_processor("MOBILE_MONEY", gateway=FixedGateway(success=False))

        result = processor.process(self.user, self.cause, self._data(phone="0241234567"))

        self.assertFalse(result["success"])
        payment = Payment.objects.get()
        self.assertEqual(payment.status, "FAILED")
        self.assertEqual(payment.donation.status, "FAILED")
        self.assertEqual(payment.metadata["reason"], "Mobile money payment failed")
        self.cause.refresh_from_db()
        self.assertEqual(self.cause.raised_amount, Decimal("0.00"))

    def test_card_metadata_keeps_only_last_four_and_brand(self):
        processor = get_processor("DEBIT_CARD", gateway=FixedGateway(success=True))
        card = {
            "card_number": "4111 1111 1111 1234",
            "expiry_date": "12/29",
            "cvv": "123",
            "card_holder_name": "Kofi Mensah",
        }

        processor.process(self.user, self.cause, self._data(card_details=card))

        payment = Payment.objects.get()
        self.assertEqual(payment.metadata["cardLast4"], "1234")
        self.assertEqual(payment.metadata["cardType"], "VISA")
        self.assertEqual(set(payment.metadata), {"provider", "cardLast4", "cardType"})

    def test_bank_transfer_stays_pending(self):
        processor = get_processor("BANK_TRANSFER")
        bank = {"account_number": "0012345678", "account_name": "Kofi", "bank_name": "GCB"}

        result = processor.process(self.user, self.cause, self._data(bank_details=bank))

        self.assertEqual(result["status"], "PENDING")
        payment = Payment.objects.get()
        self.assertEqual(payment.status, "PENDING")
        self.assertEqual(payment.donation.status, "PENDING")
        self.assertEqual(payment.metadata["bankDetails"]["bankName"], "GCB")
        self.cause.refresh_from_db()
        self.assertEqual(self.cause.raised_amount, Decimal("0.00"))

    def test_cash_uses_cash_provider(self):
        get_processor("CASH").process(self.user, self.cause, self._data())

        payment = Payment.objects.get()
        self.assertEqual(payment.provider, "CASH")
        self.assertEqual(payment.status, "PENDING")

    def test_detect_card_type(self):
        self.assertEqual(detect_card_type("4000"), "VISA")
        self.assertEqual(detect_card_type("5100"), "MASTERCARD")
        self.assertEqual(detect_card_type("6011"), "DISCOVER")
        self.assertEqual(detect_card_type("3714"), "AMEX")
        self.assertEqual(detect_card_type("9999"), "UNKNOWN")

    @patch("payments.services.gateways.random.random", return_value=0.5)
    def test_simulated_gateway_uses_configured_rate(self, _mock_random):
        payment = make_pending_payment(self.user, self.cause, method="MOBILE_MONEY")

        self.assertTrue(SimulatedChargeGateway({"MOBILE_MONEY": 0.9}).charge(payment).success)
        self.assertFalse(SimulatedChargeGateway({"MOBILE_MONEY": 0.1}).charge(payment).success)


# -------------------------
# Payment routes
# -------------------------
class PaymentApiTests(APITestCase):
    def setUp(self):
        self.user = make_user()
        self.admin = make_user(email="admin@example.com", role="ADMIN")
        self.cause = make_cause()
        self.url = reverse("payments")

    def _authenticate(self, user):
        refresh = RefreshToken.for_user(user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")

    @patch("payments.services.gateways.random.random", return_value=0.0)
    def test_mobile_money_submission_creates_matching_rows(self, _mock_random):
        payload = {
            "amount": "30.00",
            "paymentMethod": "MOBILE_MONEY",
            "provider": "MTN_MOMO",
            "userId": self.user.id,
            "causeId": self.cause.id,
            "phone": "0241234567",
        }

        response = self.client.post(self.url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "COMPLETED")
        self.assertTrue(response.data["transactionId"].startswith("MM"))
        payment = Payment.objects.get(reference=response.data["reference"])
        self.assertEqual(payment.status, payment.donation.status)
        self.assertEqual(payment.currency, "GHS")

    def test_missing_phone_is_rejected(self):
        payload = {
            "amount": "30.00",
            "paymentMethod": "MOBILE_MONEY",
            "provider": "MTN_MOMO",
            "userId": self.user.id,
            "causeId": self.cause.id,
        }

        response = self.client.post(self.url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "Phone number is required for mobile money payments")
        self.assertEqual(Payment.objects.count(), 0)

    def test_unknown_cause_returns_404(self):
        payload = {
            "amount": "30.00",
            "paymentMethod": "CASH",
            "provider": "CASH",
            "userId": self.user.id,
            "causeId": 9999,
        }
        response = self.client.post(self.url, payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_paused_cause_is_rejected(self):
        paused = make_cause(title="Paused", status="PAUSED")
        payload = {
            "amount": "30.00",
            "paymentMethod": "CASH",
            "provider": "CASH",
            "userId": self.user.id,
            "causeId": paused.id,
        }
        response = self.client.post(self.url, payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @patch("payments.services.processors.Donation.objects.create", side_effect=RuntimeError("db down"))
    def test_unexpected_error_returns_generic_500(self, _mock_create):
        payload = {
            "amount": "30.00",
            "paymentMethod": "CASH",
            "provider": "CASH",
            "userId": self.user.id,
            "causeId": self.cause.id,
        }
        response = self.client.post(self.url, payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["message"], "Failed to process cash payment")

    def test_status_lookup(self):
        payment = make_pending_payment(self.user, self.cause)

        response = self.client.get(self.url, {"reference": payment.reference})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["donation"]["cause"]["title"], self.cause.title)
        self.assertEqual(response.data["user"]["email"], self.user.email)

        self.assertEqual(self.client.get(self.url).status_code, status.HTTP_400_BAD_REQUEST)
        missing = self.client.get(self.url, {"reference": "NOPE"})
        self.assertEqual(missing.status_code, status.HTTP_404_NOT_FOUND)

    def test_admin_verifies_bank_transfer_once(self):
        payment = make_pending_payment(self.user, self.cause)
        self._authenticate(self.admin)
        url = reverse("payments-verify")
        payload = {"reference": payment.reference, "transactionId": "BANK-001"}

        first = self.client.post(url, payload, format="json")
        second = self.client.post(url, payload, format="json")

        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(first.data["status"], "COMPLETED")
        self.assertEqual(second.status_code, status.HTTP_409_CONFLICT)
        self.cause.refresh_from_db()
        self.assertEqual(self.cause.raised_amount, Decimal("30.00"))

    def test_verify_rejects_charged_methods(self):
        payment = make_pending_payment(self.user, self.cause, method="MOBILE_MONEY")
        self._authenticate(self.admin)

        response = self.client.post(
            reverse("payments-verify"),
            {"reference": payment.reference, "transactionId": "X"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_donor_cannot_verify(self):
        payment = make_pending_payment(self.user, self.cause)
        self._authenticate(self.user)

        response = self.client.post(
            reverse("payments-verify"),
            {"reference": payment.reference, "transactionId": "X"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_payment_list_counts(self):
        make_pending_payment(self.user, self.cause)
        done = make_pending_payment(self.user, self.cause)
        complete_payment(done.reference)
        self._authenticate(self.admin)

        response = self.client.get(reverse("payments-admin"), {"status": "pending"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["payments"]), 1)
        self.assertEqual(response.data["counts"]["PENDING"], 1)
        self.assertEqual(response.data["counts"]["COMPLETED"], 1)


# -------------------------
# Paystack checkout
# -------------------------
@override_settings(PAYSTACK_CALLBACK_URL="http://localhost:3000/payment/verify")
class PaystackCheckoutTests(APITestCase):
    def setUp(self):
        self.user = make_user()
        self.cause = make_cause()
        refresh = RefreshToken.for_user(self.user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
        self.url = reverse("paystack-payment")

    @patch("payments.views.paystack.initialize_payment")
    def test_initialize_returns_authorization_url(self, mock_init):
        mock_init.side_effect = lambda **kwargs: {
            "status": True,
            "message": "Authorization URL created",
            "data": {
                "authorization_url": "https://checkout.paystack.com/abc",
                "reference": kwargs["reference"],
            },
        }

        response = self.client.post(
            self.url,
            {"amount": "50", "currency": "ghs", "causeId": self.cause.id, "isAnonymous": True},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["payment"]["authorizationUrl"], "https://checkout.paystack.com/abc")
        payment = Payment.objects.get()
        self.assertTrue(payment.reference.startswith("DON_"))
        self.assertEqual(payment.provider, "PAYSTACK")
        self.assertEqual(payment.transaction_id, payment.reference)
        self.assertEqual(payment.currency, "GHS")
        self.assertEqual(mock_init.call_args.kwargs["metadata"]["donor_name"], "Anonymous")

    @patch("payments.views.paystack.initialize_payment")
    def test_gateway_refusal_marks_rows_failed(self, mock_init):
        mock_init.side_effect = PaystackError("Paystack API error: Invalid key")

        response = self.client.post(
            self.url,
            {"amount": "50", "currency": "GHS", "causeId": self.cause.id},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("Invalid key", response.data["error"])
        payment = Payment.objects.get()
        self.assertEqual(payment.status, "FAILED")
        self.assertEqual(payment.donation.status, "FAILED")

    def test_missing_fields(self):
        response = self.client.post(self.url, {"amount": "50"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_requires_authentication(self):
        self.client.credentials()
        response = self.client.post(
            self.url, {"amount": "50", "currency": "GHS", "causeId": self.cause.id}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_donation_status_only_for_owner(self):
        payment = make_pending_payment(self.user, self.cause)
        other = make_user(email="other@example.com")

        response = self.client.get(self.url, {"donationId": payment.donation_id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["donation"]["reference"], payment.reference)

        refresh = RefreshToken.for_user(other)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
        response = self.client.get(self.url, {"donationId": payment.donation_id})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    @patch("payments.views.paystack.verify_payment")
    def test_polling_verification_completes_payment(self, mock_verify):
        payment = make_pending_payment(self.user, self.cause, method="DEBIT_CARD")
        mock_verify.return_value = {
            "status": True,
            "data": {
                "id": 5150,
                "status": "success",
                "paid_at": "2024-06-01T10:00:00.000Z",
                "channel": "card",
                "fees": 150,
            },
        }

        response = self.client.get(reverse("paystack-verify"), {"reference": payment.reference})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "COMPLETED")
        self.assertEqual(response.data["transactionId"], "5150")
        payment.refresh_from_db()
        self.assertEqual(payment.provider, "card")
        self.assertEqual(payment.metadata["fees"], 1.5)
        self.assertEqual(payment.transaction_id, "5150")
        self.assertEqual(payment.processed_at.isoformat(), "2024-06-01T10:00:00+00:00")

    @patch("payments.views.paystack.verify_payment")
    def test_polling_leaves_unfinished_checkout_pending(self, mock_verify):
        payment = make_pending_payment(self.user, self.cause, method="DEBIT_CARD")

        for gateway_status in ("abandoned", "ongoing", "pending", "queued"):
            mock_verify.return_value = {"status": True, "data": {"status": gateway_status}}
            response = self.client.get(reverse("paystack-verify"), {"reference": payment.reference})
            self.assertEqual(response.data["status"], "PENDING")

        payment.refresh_from_db()
        self.assertEqual(payment.status, "PENDING")
        self.assertEqual(payment.donation.status, "PENDING")

    @override_settings(PAYSTACK_WEBHOOK_SECRET=WEBHOOK_SECRET)
    @patch("payments.services.paystack.verify_payment")
    def test_webhook_completes_payment_polled_while_abandoned(self, mock_verify):
        payment = make_pending_payment(self.user, self.cause, amount="40.00", method="DEBIT_CARD")
        mock_verify.side_effect = [
            {"status": True, "data": {"status": "abandoned"}},
            {"status": True, "data": {"id": 9, "status": "success"}},
        ]

        poll = self.client.get(reverse("paystack-verify"), {"reference": payment.reference})
        self.assertEqual(poll.data["status"], "PENDING")

        body = json.dumps(
            {"event": "charge.success", "data": {"reference": payment.reference, "status": "success"}}
        ).encode()
        response = self.client.post(
            reverse("paystack-webhook"),
            data=body,
            content_type="application/json",
            HTTP_X_PAYSTACK_SIGNATURE=sign(body),
        )

        self.assertEqual(response.status_code, 200)
        payment.refresh_from_db()
        self.cause.refresh_from_db()
        self.assertEqual(payment.status, "COMPLETED")
        self.assertEqual(payment.donation.status, "COMPLETED")
        self.assertEqual(payment.transaction_id, "9")
        self.assertEqual(self.cause.raised_amount, Decimal("40.00"))


# -------------------------
# Paystack webhook
# -------------------------
@override_settings(PAYSTACK_WEBHOOK_SECRET=WEBHOOK_SECRET)
class PaystackWebhookTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.cause = make_cause()
        self.payment = make_pending_payment(
            self.user, self.cause, method="DEBIT_CARD", reference="DON_1700000000000_ABCDEFGHIJKLM"
        )
        self.url = reverse("paystack-webhook")

    def _post(self, event, signature=None, raw=None):
        body = raw if raw is not None else json.dumps(event).encode()
        return self.client.post(
            self.url,
            data=body,
            content_type="application/json",
            HTTP_X_PAYSTACK_SIGNATURE=signature if signature is not None else sign(body),
        )

    def _success_event(self, reference=None):
        return {
            "event": "charge.success",
            "data": {"reference": reference or self.payment.reference, "status": "success"},
        }

    def _verified(self):
        return {
            "status": True,
            "data": {
                "id": 424242,
                "status": "success",
                "paid_at": "2024-06-01T10:00:00.000Z",
                "channel": "mobile_money",
                "fees": 45,
            },
        }

    @patch("payments.services.webhooks.paystack.verify_payment")
    def test_tampered_body_is_rejected_without_changes(self, mock_verify):
        body = json.dumps(self._success_event()).encode()
        signature = sign(body)
        tampered = body.replace(b"success", b"succeSS", 1)

        response = self._post(None, signature=signature, raw=tampered)

        self.assertEqual(response.status_code, 401)
        mock_verify.assert_not_called()
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, "PENDING")

    def test_missing_signature_is_rejected(self):
        response = self._post(self._success_event(), signature="")
        self.assertEqual(response.status_code, 401)

    def test_invalid_json_after_valid_signature(self):
        response = self._post(None, raw=b"not json")
        self.assertEqual(response.status_code, 400)

    @patch("payments.services.webhooks.paystack.verify_payment")
    def test_charge_success_completes_once_on_redelivery(self, mock_verify):
        mock_verify.return_value = self._verified()
        other = make_pending_payment(self.user, self.cause)
        complete_payment(other.reference)

        first = self._post(self._success_event())
        second = self._post(self._success_event())

        self.assertEqual(first.status_code, 200)
        self.assertEqual(second.status_code, 200)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, "COMPLETED")
        self.assertEqual(self.payment.provider, "mobile_money")
        self.assertEqual(self.payment.metadata["fees"], 0.45)
        self.assertEqual(self.payment.processed_at.year, 2024)
        self.cause.refresh_from_db()
        self.assertEqual(self.cause.raised_amount, Decimal("60.00"))

    @patch("payments.services.webhooks.paystack.verify_payment")
    def test_unverified_charge_is_not_trusted(self, mock_verify):
        mock_verify.return_value = {"status": True, "data": {"status": "abandoned"}}

        response = self._post(self._success_event())

        self.assertEqual(response.status_code, 200)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, "PENDING")

    def test_charge_failed_fails_payment(self):
        event = {
            "event": "charge.failed",
            "data": {
                "reference": self.payment.reference,
                "status": "failed",
                "gateway_response": "Insufficient funds",
            },
        }

        response = self._post(event)

        self.assertEqual(response.status_code, 200)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, "FAILED")
        self.assertEqual(self.payment.metadata["reason"], "Insufficient funds")

    @patch("payments.services.webhooks.paystack.verify_payment")
    def test_unknown_reference_is_acknowledged(self, mock_verify):
        mock_verify.return_value = self._verified()
        response = self._post(self._success_event(reference="DON_UNKNOWN"))
        self.assertEqual(response.status_code, 200)

    @patch("payments.services.webhooks.paystack.verify_payment")
    def test_gateway_error_returns_500_for_redelivery(self, mock_verify):
        mock_verify.side_effect = PaystackError("Could not reach Paystack")

        response = self._post(self._success_event())

        self.assertEqual(response.status_code, 500)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, "PENDING")

    def test_transfer_events_are_only_logged(self):
        response = self._post({"event": "transfer.success", "data": {"reference": "TRF_1"}})
        self.assertEqual(response.status_code, 200)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, "PENDING")

    def test_get_describes_endpoint(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 200)
        self.assertIn("charge.success", response.json()["supportedEvents"])
