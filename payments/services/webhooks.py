import logging
from datetime import datetime

from django.utils.dateparse import parse_datetime

from payments.exceptions import PaymentNotFound
from . import paystack
from .status import complete_payment, fail_payment

logger = logging.getLogger(__name__)

SUPPORTED_EVENTS = ("charge.success", "charge.failed", "transfer.success", "transfer.failed")


def _gateway_details(data):
    """
    Pull processed_at, provider and fee metadata from a verified charge.
    """
    details = {"metadata": {}}

    paid_at = data.get("paid_at") or data.get("paidAt")
    if isinstance(paid_at, str):
        parsed = parse_datetime(paid_at.replace("Z", "+00:00"))
        if isinstance(parsed, datetime):
            details["processed_at"] = parsed

    channel = data.get("channel")
    if isinstance(channel, str) and channel:
        details["provider"] = channel

    fees = data.get("fees")
    if isinstance(fees, (int, float)) and not isinstance(fees, bool):
        details["metadata"]["fees"] = fees / 100

    return details


def complete_from_verification(reference, verified):
    """
    Complete a payment from the data of a successful verify call.
    """
    details = _gateway_details(verified)
    return complete_payment(
        reference,
        transaction_id=str(verified["id"]) if verified.get("id") else None,
        metadata=details["metadata"],
        provider=details.get("provider"),
        processed_at=details.get("processed_at"),
    )


def handle_charge_success(data):
    reference = data.get("reference")
    if data.get("status") != "success" or not isinstance(reference, str) or not reference:
        logger.warning(f"Ignoring charge.success without a successful reference: {reference}")
        return

    # Trust the gateway's own record over the webhook body
    verification = paystack.verify_payment(reference)
    verified = verification.get("data") or {}
    if not verification.get("status") or verified.get("status") != "success":
        logger.warning(f"Payment verification failed for: {reference}")
        return

    _, applied = complete_from_verification(reference, verified)
    if applied:
        logger.info(f"Payment completed successfully: {reference}")


def handle_charge_failed(data):
    reference = data.get("reference")
    if data.get("status") != "failed" or not isinstance(reference, str) or not reference:
        logger.warning(f"Ignoring charge.failed without a failed reference: {reference}")
        return

    reason = data.get("gateway_response") or "Payment failed"
    _, applied = fail_payment(reference, reason=reason)
    if applied:
        logger.info(f"Payment failed: {reference} - {reason}")


def handle_paystack_event(event):
    """
    Apply a verified Paystack webhook event.

    Unknown references are logged and swallowed so the gateway stops
    redelivering them; everything else propagates.
    """
    name = event.get("event")
    data = event.get("data") or {}

    logger.info(
        f"Paystack webhook received: event={name} reference={data.get('reference')} "
        f"status={data.get('status')} channel={data.get('channel')}"
    )

    try:
        if name == "charge.success":
            handle_charge_success(data)
        elif name == "charge.failed":
            handle_charge_failed(data)
        elif name == "transfer.success":
            logger.info(f"Transfer successful: {data.get('reference')}")
        elif name == "transfer.failed":
            logger.info(f"Transfer failed: {data.get('reference')}")
        else:
            logger.info(f"Unhandled webhook event: {name}")
    except PaymentNotFound:
        logger.warning(f"Webhook for unknown payment reference: {data.get('reference')}")
