"""
One processor per payment method. Each creates the Donation and Payment
rows, then either settles straight away through the charge gateway or
leaves the payment PENDING for offline confirmation.
"""
import logging

from django.db import transaction

from donations.models import Donation
from payments.exceptions import PaymentError, PaymentProcessingError
from payments.models import Payment
from .gateways import get_charge_gateway
from .reference import generate_reference
from .status import complete_payment, fail_payment

logger = logging.getLogger(__name__)


def detect_card_type(card_number):
    number = (card_number or "").replace(" ", "")
    if number.startswith(("34", "37")):
        return "AMEX"
    if number.startswith("4"):
        return "VISA"
    if number.startswith("5"):
        return "MASTERCARD"
    if number.startswith("6"):
        return "DISCOVER"
    return "UNKNOWN"


class BasePaymentProcessor:
    payment_method = None
    label = None
    success_message = None
    failure_message = None

    def __init__(self, gateway=None):
        self._gateway = gateway

    @property
    def gateway(self):
        if self._gateway is None:
            self._gateway = get_charge_gateway()
        return self._gateway

    def get_provider(self, data):
        return data.get("provider") or ""

    def build_metadata(self, data):
        return {"provider": self.get_provider(data)}

    def create_records(self, user, cause, data):
        with transaction.atomic():
            donation = Donation.objects.create(
                user=user,
                cause=cause,
                amount=data["amount"],
                currency=data["currency"],
                message=data.get("message") or "",
                is_anonymous=data.get("is_anonymous", False),
                status="PENDING",
            )
            payment = Payment.objects.create(
                user=user,
                donation=donation,
                amount=data["amount"],
                currency=data["currency"],
                payment_method=self.payment_method,
                provider=self.get_provider(data),
                reference=generate_reference(),
                status="PENDING",
                metadata=self.build_metadata(data),
            )
        return donation, payment

    def process(self, user, cause, data):
        try:
            _, payment = self.create_records(user, cause, data)
            logger.info(
                f"{self.payment_method} payment {payment.reference} created for "
                f"{user.email}: {payment.currency} {payment.amount}"
            )
            return self.settle(payment)
        except PaymentError:
            raise
        except Exception as e:
            logger.exception(f"{self.label} payment error: {e}")
            raise PaymentProcessingError(f"Failed to process {self.label} payment") from e

    def settle(self, payment):
        raise NotImplementedError


class ChargedPaymentProcessor(BasePaymentProcessor):
    """
    Settles inside the request through the charge gateway.
    """

    def settle(self, payment):
        result = self.gateway.charge(payment)

        if result.success:
            complete_payment(payment.reference, transaction_id=result.transaction_id)
            return {
                "success": True,
                "reference": payment.reference,
                "message": self.success_message,
                "transactionId": result.transaction_id,
                "status": "COMPLETED",
            }

        fail_payment(payment.reference, reason=result.reason)
        return {
            "success": False,
            "reference": payment.reference,
            "message": self.failure_message,
            "status": "FAILED",
        }


class OfflinePaymentProcessor(BasePaymentProcessor):
    """
    Left PENDING until an admin confirms the money arrived.
    """
    pending_message = None

    def settle(self, payment):
        return {
            "success": True,
            "reference": payment.reference,
            "message": self.pending_message,
            "status": "PENDING",
        }


class MobileMoneyProcessor(ChargedPaymentProcessor):
    payment_method = "MOBILE_MONEY"
    label = "mobile money"
    success_message = "Payment processed successfully via mobile money"
    failure_message = "Mobile money payment failed. Please try again."

    def build_metadata(self, data):
        return {**super().build_metadata(data), "phone": data["phone"]}


class DebitCardProcessor(ChargedPaymentProcessor):
    payment_method = "DEBIT_CARD"
    label = "debit card"
    success_message = "Payment processed successfully via debit card"
    failure_message = "Debit card payment failed. Please check your card details and try again."

    def build_metadata(self, data):
        # Never persist the full card number or CVV
        card_number = data["card_details"]["card_number"].replace(" ", "")
        return {
            **super().build_metadata(data),
            "cardLast4": card_number[-4:],
            "cardType": detect_card_type(card_number),
        }


class BankTransferProcessor(OfflinePaymentProcessor):
    payment_method = "BANK_TRANSFER"
    label = "bank transfer"
    pending_message = (
        "Bank transfer initiated. Please complete the transfer and contact us for verification."
    )

    def build_metadata(self, data):
        bank = data["bank_details"]
        return {
            **super().build_metadata(data),
            "bankDetails": {
                "accountNumber": bank["account_number"],
                "accountName": bank["account_name"],
                "bankName": bank["bank_name"],
            },
        }


class CashProcessor(OfflinePaymentProcessor):
    payment_method = "CASH"
    label = "cash"
    pending_message = "Cash payment request created. Please contact us to complete the payment."

    def get_provider(self, data):
        return "CASH"

    def build_metadata(self, data):
        return {
            "paymentType": "CASH",
            "instructions": "Please visit our office or contact us to complete cash payment",
        }


PROCESSORS = {
    processor.payment_method: processor
    for processor in (
        MobileMoneyProcessor,
        BankTransferProcessor,
        DebitCardProcessor,
        CashProcessor,
    )
}


def get_processor(payment_method, gateway=None):
    try:
        processor_class = PROCESSORS[payment_method]
    except KeyError:
        raise PaymentError(f"Unsupported payment method: {payment_method}")
    return processor_class(gateway=gateway)
