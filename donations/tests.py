from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import connection
from django.test.utils import CaptureQueriesContext
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase
from rest_framework_simplejwt.tokens import RefreshToken

from causes.models import Cause
from payments.models import Payment
from .models import Donation

User = get_user_model()


class DonationHistoryTests(APITestCase):
    def setUp(self):
        self.donor = User.objects.create_user(
            email="donor@example.com", password="DonorPass123", name="Akosua Mensah"
        )
        self.other = User.objects.create_user(
            email="other@example.com", password="DonorPass123", name="Other Donor"
        )
        self.admin = User.objects.create_user(
            email="admin@example.com", password="AdminPass123", name="Admin", role="ADMIN"
        )
        self.cause = Cause.objects.create(
            title="Flood relief",
            description="Relief packs",
            target_amount=Decimal("500.00"),
            category="Emergency Relief",
            location="Eastern Region",
        )
        self.mine = Donation.objects.create(
            user=self.donor, cause=self.cause, amount=Decimal("20.00"), status="COMPLETED"
        )
        Donation.objects.create(user=self.donor, cause=self.cause, amount=Decimal("5.00"))
        Donation.objects.create(user=self.other, cause=self.cause, amount=Decimal("15.00"))
        Payment.objects.create(
            user=self.donor,
            donation=self.mine,
            amount=Decimal("20.00"),
            payment_method="MOBILE_MONEY",
            provider="MTN_MOMO",
            reference="GH1700000000000ABCDEF",
            status="COMPLETED",
        )
        self.url = reverse("donations")

    def _login(self, user):
        refresh = RefreshToken.for_user(user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")

    def test_donor_sees_only_own_donations(self):
        self._login(self.donor)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 2)

    def test_status_filter_and_payment_summary(self):
        self._login(self.donor)
        response = self.client.get(self.url, {"status": "completed"})
        self.assertEqual(response.data["count"], 1)
        donation = response.data["donations"][0]
        self.assertEqual(donation["payment"]["reference"], "GH1700000000000ABCDEF")
        self.assertEqual(donation["cause"]["title"], "Flood relief")

    def test_payment_summaries_do_not_query_per_row(self):
        self._login(self.admin)
        with CaptureQueriesContext(connection) as few:
            self.client.get(self.url)

        for i in range(3):
            donation = Donation.objects.create(user=self.other, cause=self.cause, amount=Decimal("1.00"))
            Payment.objects.create(
                user=self.other,
                donation=donation,
                amount=Decimal("1.00"),
                payment_method="CASH",
                provider="CASH",
                reference=f"GH170000000000{i}CASHXX",
            )

        with CaptureQueriesContext(connection) as many:
            response = self.client.get(self.url)

        self.assertEqual(response.data["count"], 6)
        self.assertEqual(len(many), len(few))

    def test_admin_sees_all_with_donor(self):
        self._login(self.admin)
        response = self.client.get(self.url)
        self.assertEqual(response.data["count"], 3)
        self.assertIn("donor", response.data["donations"][0])

    def test_requires_authentication(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class DonationStatsTests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(
            email="admin@example.com", password="AdminPass123", name="Admin", role="ADMIN"
        )
        self.donor = User.objects.create_user(
            email="donor@example.com", password="DonorPass123", name="Donor"
        )
        cause = Cause.objects.create(
            title="Clinic",
            description="Rural clinic",
            target_amount=Decimal("900.00"),
            category="Healthcare",
            location="Rural Ghana",
        )
        Donation.objects.create(user=self.donor, cause=cause, amount=Decimal("40.00"), status="COMPLETED")
        Donation.objects.create(user=self.donor, cause=cause, amount=Decimal("60.00"), status="COMPLETED")
        pending = Donation.objects.create(user=self.donor, cause=cause, amount=Decimal("10.00"))
        Payment.objects.create(
            user=self.donor,
            donation=pending,
            amount=Decimal("10.00"),
            payment_method="BANK_TRANSFER",
            provider="GCB",
            reference="GH1700000000001ABCDEF",
        )
        self.url = reverse("donation-stats")

    def test_admin_stats(self):
        refresh = RefreshToken.for_user(self.admin)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        stats = response.data["stats"]
        self.assertEqual(stats["totalRaised"], Decimal("100.00"))
        self.assertEqual(stats["donationsByStatus"]["PENDING"], 1)
        self.assertEqual(stats["totalDonors"], 1)
        self.assertEqual(stats["activeCauses"], 1)
        self.assertEqual(stats["pendingPayments"], {"BANK_TRANSFER": 1})

    def test_donor_is_forbidden(self):
        refresh = RefreshToken.for_user(self.donor)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
