import hashlib
import hmac
import logging
from decimal import ROUND_HALF_UP, Decimal

import requests
from django.conf import settings

from payments.exceptions import PaystackError

logger = logging.getLogger(__name__)

# Paystack takes amounts in the currency's smallest unit
MINOR_UNIT_MULTIPLIERS = {
    "GHS": 100,  # pesewas
    "NGN": 100,  # kobo
    "USD": 100,  # cents
    "EUR": 100,  # cents
}


def convert_to_kobo(amount, currency="GHS"):
    multiplier = MINOR_UNIT_MULTIPLIERS.get((currency or "").upper(), 100)
    minor = Decimal(str(amount)) * multiplier
    return int(minor.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _headers():
    secret_key = settings.PAYSTACK_SECRET_KEY
    if not secret_key:
        raise PaystackError("Paystack secret key is not configured")
    return {
        "Authorization": f"Bearer {secret_key}",
        "Content-Type": "application/json",
    }


def _request(method, path, payload=None):
    url = f"{settings.PAYSTACK_BASE_URL.rstrip('/')}{path}"

    try:
        response = requests.request(
            method,
            url,
            json=payload,
            headers=_headers(),
            timeout=settings.PAYSTACK_TIMEOUT,
        )
    except requests.RequestException as e:
        logger.error(f"Paystack request to {path} failed: {e}")
        raise PaystackError(f"Could not reach Paystack: {e}") from e

    try:
        data = response.json()
    except ValueError:
        data = {}

    if not response.ok:
        message = data.get("message") or response.reason or "Unknown error"
        logger.error(f"Paystack {path} returned {response.status_code}: {message}")
        raise PaystackError(
            f"Paystack API error: {message}",
            status_code=response.status_code,
            response=data,
        )

    return data


def initialize_payment(amount, email, reference, callback_url, currency=None, metadata=None):
    """
    Start a hosted checkout. The returned JSON carries
    data.authorization_url for the donor to complete payment.
    """
    currency = (currency or settings.DEFAULT_CURRENCY).upper()
    payload = {
        "amount": convert_to_kobo(amount, currency),
        "email": email,
        "reference": reference,
        "callback_url": callback_url,
        "currency": currency,
        "metadata": metadata or {},
    }

    logger.info(f"Initializing Paystack payment {reference} ({currency} {amount})")
    return _request("POST", "/transaction/initialize", payload)


def verify_payment(reference):
    logger.info(f"Verifying Paystack payment {reference}")
    return _request("GET", f"/transaction/verify/{reference}")


def create_customer(email, first_name=None, last_name=None):
    payload = {"email": email}
    if first_name:
        payload["first_name"] = first_name
    if last_name:
        payload["last_name"] = last_name
    return _request("POST", "/customer", payload)


def test_connection():
    """
    Check credentials against a cheap endpoint. Never raises.
    """
    try:
        response = _request("GET", "/transaction/totals")
    except PaystackError as e:
        return {
            "success": False,
            "message": str(e),
            "details": {"statusCode": e.status_code, "response": e.response},
        }

    return {
        "success": True,
        "message": "Successfully connected to Paystack API",
        "details": response.get("data", {}),
    }


def verify_webhook_signature(payload, signature, secret):
    if not signature or not secret:
        return False
    if isinstance(payload, str):
        payload = payload.encode("utf-8")

    expected = hmac.new(secret.encode("utf-8"), payload, hashlib.sha512).hexdigest()
    return hmac.compare_digest(expected, signature)
