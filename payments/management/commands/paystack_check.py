import json

from django.conf import settings
from django.core.management.base import BaseCommand

from payments.exceptions import PaystackError
from payments.services import paystack


class Command(BaseCommand):
    help = "Check Paystack credentials and optionally verify a transaction"

    def add_arguments(self, parser):
        parser.add_argument(
            "--reference",
            type=str,
            help="Transaction reference to verify after the connection check",
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS("--- Paystack Connection Check ---"))
        self.stdout.write(f"Base URL: {settings.PAYSTACK_BASE_URL}")

        if not settings.PAYSTACK_SECRET_KEY:
            self.stdout.write(self.style.ERROR("PAYSTACK_SECRET_KEY is not set"))
            return

        if not settings.PAYSTACK_WEBHOOK_SECRET:
            self.stdout.write(self.style.WARNING("PAYSTACK_WEBHOOK_SECRET is not set; webhooks will be rejected"))

        result = paystack.test_connection()
        if result["success"]:
            self.stdout.write(self.style.SUCCESS(result["message"]))
        else:
            self.stdout.write(self.style.ERROR(f"Connection failed: {result['message']}"))
            return

        reference = options.get("reference")
        if not reference:
            return

        self.stdout.write(f"Verifying transaction {reference}...")
        try:
            response = paystack.verify_payment(reference)
        except PaystackError as e:
            self.stdout.write(self.style.ERROR(f"Verification failed: {e}"))
            return

        self.stdout.write(json.dumps(response.get("data", {}), indent=4, default=str))
