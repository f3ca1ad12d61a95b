import logging

from django.dispatch import Signal, receiver

from accounts.emails import send_donation_status_email
from accounts.models import UserPreferences

logger = logging.getLogger(__name__)

# Sent after commit with payment= and status=
payment_status_changed = Signal()


@receiver(payment_status_changed)
def notify_donor_of_payment_status(sender, payment, status, **kwargs):
    """
    Emails the donor once their payment settles, if they opted in.
    """
    preferences = UserPreferences.objects.filter(user_id=payment.user_id).first()
    if preferences and not preferences.email_notifications:
        return

    try:
        send_donation_status_email(payment.donation, status)
        logger.info(f"Donation status email sent for payment {payment.reference}")
    except Exception:
        logger.exception(f"Failed to send donation status email for {payment.reference}")
