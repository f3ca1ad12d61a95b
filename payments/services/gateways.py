import logging
import random
import time
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


@dataclass
class ChargeResult:
    success: bool
    transaction_id: Optional[str] = None
    reason: Optional[str] = None


class BaseChargeGateway:
    """
    Takes money for payments that settle within the request
    (mobile money, debit card).
    """

    def charge(self, payment) -> ChargeResult:
        raise NotImplementedError


class SimulatedChargeGateway(BaseChargeGateway):
    TRANSACTION_PREFIXES = {
        "MOBILE_MONEY": "MM",
        "DEBIT_CARD": "DC",
    }
    FAILURE_REASONS = {
        "MOBILE_MONEY": "Mobile money payment failed",
        "DEBIT_CARD": "Card payment declined",
    }

    def __init__(self, success_rates=None):
        self.success_rates = success_rates or settings.PAYMENTS_SIMULATED_SUCCESS_RATES

    def charge(self, payment):
        method = payment.payment_method
        rate = self.success_rates.get(method, 0)

        if random.random() < rate:
            prefix = self.TRANSACTION_PREFIXES.get(method, "TX")
            transaction_id = f"{prefix}{int(time.time() * 1000)}"
            logger.info(f"Simulated charge succeeded for {payment.reference}: {transaction_id}")
            return ChargeResult(success=True, transaction_id=transaction_id)

        reason = self.FAILURE_REASONS.get(method, "Payment failed")
        logger.warning(f"Simulated charge failed for {payment.reference}: {reason}")
        return ChargeResult(success=False, reason=reason)


def get_charge_gateway():
    gateway_class = import_string(settings.PAYMENTS_CHARGE_GATEWAY)
    return gateway_class()
