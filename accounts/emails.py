from django.core.mail import send_mail
from django.conf import settings


def send_welcome_email(user):
    subject = "Welcome to Give Hope Foundation"
    message = f"""
Hello {user.name},

Thank you for joining Give Hope Foundation!

You can now browse causes and make donations using mobile money,
bank transfer, debit card, cash or our secure online checkout.

{settings.FRONTEND_URL}/causes

Give Hope Team
"""

    send_mail(
        subject,
        message,
        settings.DEFAULT_FROM_EMAIL,
        [user.email],
        fail_silently=False,
    )


def send_donation_status_email(donation, status):
    """
    Tells the donor how their donation ended up.
    """
    cause_title = donation.cause.title
    amount = f"{donation.currency} {donation.amount}"

    if status == "COMPLETED":
        subject = f"Thank you! Your donation to {cause_title} was received"
        body = (
            f"Your donation of {amount} to \"{cause_title}\" has been completed.\n"
            "Your generosity makes a real difference."
        )
    else:
        subject = f"Your donation to {cause_title} could not be completed"
        body = (
            f"Your donation of {amount} to \"{cause_title}\" was not completed.\n"
            "No funds were taken. You can try again at any time."
        )

    message = f"""
Hello {donation.user.name},

{body}

Donation ID: {donation.id}

Give Hope Team
"""

    send_mail(
        subject=subject,
        message=message,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[donation.user.email],
        fail_silently=False,
    )
