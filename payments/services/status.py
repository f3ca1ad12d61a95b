"""
Payment status transitions.

Every write that moves a payment out of PENDING goes through
transition_payment so the Payment, its Donation and the Cause total
change together, and only once per reference.
"""
import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from causes.models import Cause
from payments.exceptions import PaymentAlreadyProcessed, PaymentError, PaymentNotFound
from payments.models import Payment
from payments.signals import payment_status_changed

logger = logging.getLogger(__name__)

# Metadata key stamped for each target status
STATUS_TIMESTAMP_KEYS = {
    "COMPLETED": "processedAt",
    "FAILED": "failedAt",
}


def transition_payment(
    reference,
    status,
    transaction_id=None,
    metadata=None,
    provider=None,
    processed_at=None,
):
    """
    Move a PENDING payment to COMPLETED or FAILED.

    Returns (payment, applied). applied is False when the payment had
    already reached a terminal status, in which case nothing changes.
    Raises PaymentNotFound for an unknown reference.
    """
    if status not in Payment.TERMINAL_STATUSES:
        raise PaymentError(f"Cannot transition payment to {status}")

    now = timezone.now()

    with transaction.atomic():
        try:
            payment = (
                Payment.objects.select_for_update()
                .select_related("donation")
                .get(reference=reference)
            )
        except Payment.DoesNotExist:
            raise PaymentNotFound(f"Payment {reference} not found")

        if payment.is_terminal:
            logger.info(
                f"Payment {reference} already {payment.status}; ignoring {status}"
            )
            return payment, False

        payment.status = status
        payment.metadata = {
            **(payment.metadata or {}),
            **(metadata or {}),
            STATUS_TIMESTAMP_KEYS[status]: now.isoformat(),
        }
        if transaction_id:
            payment.transaction_id = transaction_id
        if provider:
            payment.provider = provider
        if status == "COMPLETED":
            payment.processed_at = processed_at or now
        payment.save()

        donation = payment.donation
        donation.status = status
        if status == "COMPLETED":
            donation.donated_at = now
        donation.save(update_fields=["status", "donated_at", "updated_at"])

        if status == "COMPLETED":
            Cause.objects.filter(pk=donation.cause_id).update(
                raised_amount=F("raised_amount") + payment.amount
            )

        transaction.on_commit(
            lambda: payment_status_changed.send(
                sender=Payment, payment=payment, status=status
            )
        )

    logger.info(f"Payment {reference} -> {status}")
    return payment, True


def complete_payment(reference, transaction_id=None, metadata=None, provider=None, processed_at=None):
    return transition_payment(
        reference,
        "COMPLETED",
        transaction_id=transaction_id,
        metadata=metadata,
        provider=provider,
        processed_at=processed_at,
    )


def fail_payment(reference, reason=None, metadata=None):
    metadata = dict(metadata or {})
    if reason:
        metadata["reason"] = reason
    return transition_payment(reference, "FAILED", metadata=metadata)


def verify_bank_transfer(reference, transaction_id):
    """
    Admin confirmation that an offline payment (bank transfer or cash)
    has arrived.
    """
    payment = Payment.objects.filter(reference=reference).first()
    if not payment:
        raise PaymentNotFound(f"Payment {reference} not found")

    if payment.payment_method not in ("BANK_TRANSFER", "CASH"):
        raise PaymentError("Only bank transfer and cash payments can be verified manually")

    if payment.is_terminal:
        raise PaymentAlreadyProcessed(f"Payment {reference} has already been processed")

    payment, applied = complete_payment(
        reference,
        transaction_id=transaction_id,
        metadata={"verifiedAt": timezone.now().isoformat()},
    )
    # Lost a race with another confirmation
    if not applied:
        raise PaymentAlreadyProcessed(f"Payment {reference} has already been processed")

    return payment


def get_payment_status(reference):
    try:
        payment = Payment.objects.select_related(
            "donation", "donation__cause", "user"
        ).get(reference=reference)
    except Payment.DoesNotExist:
        raise PaymentNotFound(f"Payment {reference} not found")

    donation = payment.donation
    return {
        "reference": payment.reference,
        "status": payment.status,
        "amount": payment.amount,
        "currency": payment.currency,
        "paymentMethod": payment.payment_method,
        "provider": payment.provider,
        "transactionId": payment.transaction_id,
        "metadata": payment.metadata,
        "processedAt": payment.processed_at,
        "createdAt": payment.created_at,
        "donation": {
            "id": donation.id,
            "amount": donation.amount,
            "currency": donation.currency,
            "status": donation.status,
            "isAnonymous": donation.is_anonymous,
            "message": donation.message,
            "donatedAt": donation.donated_at,
            "cause": {"id": donation.cause_id, "title": donation.cause.title},
        },
        "user": {"name": payment.user.name, "email": payment.user.email},
    }
