from decimal import Decimal
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase
from rest_framework_simplejwt.tokens import RefreshToken

from donations.models import Donation
from .models import Cause

User = get_user_model()


def create_cause(**kwargs):
    defaults = {
        "title": "Borehole for Bolgatanga",
        "description": "A new borehole for a farming village",
        "target_amount": Decimal("1000.00"),
        "category": "Health & Sanitation",
        "location": "Upper East",
    }
    defaults.update(kwargs)
    return Cause.objects.create(**defaults)


class CauseBrowsingTests(APITestCase):
    def setUp(self):
        self.water = create_cause(featured=True)
        self.school = create_cause(
            title="Desks for Ho Primary",
            description="Classroom furniture",
            category="Education",
            location="Volta",
        )
        self.draft = create_cause(title="Draft cause", status="DRAFT")
        self.list_url = reverse("cause-list")

    def test_public_list_hides_drafts(self):
        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        titles = [cause["title"] for cause in response.data["causes"]]
        self.assertNotIn("Draft cause", titles)
        self.assertEqual(response.data["pagination"]["totalCauses"], 2)

    def test_filters(self):
        by_category = self.client.get(self.list_url, {"category": "Education"})
        self.assertEqual([c["id"] for c in by_category.data["causes"]], [self.school.id])

        all_categories = self.client.get(self.list_url, {"category": "All"})
        self.assertEqual(all_categories.data["pagination"]["totalCauses"], 2)

        featured = self.client.get(self.list_url, {"featured": "true"})
        self.assertEqual([c["id"] for c in featured.data["causes"]], [self.water.id])

        search = self.client.get(self.list_url, {"search": "furniture"})
        self.assertEqual([c["id"] for c in search.data["causes"]], [self.school.id])

    def test_pagination(self):
        for i in range(3):
            create_cause(title=f"Extra {i}")

        response = self.client.get(self.list_url, {"page": 2, "limit": 2})

        pagination = response.data["pagination"]
        self.assertEqual(len(response.data["causes"]), 2)
        self.assertEqual(pagination["totalCauses"], 5)
        self.assertEqual(pagination["totalPages"], 3)
        self.assertTrue(pagination["hasNextPage"])
        self.assertTrue(pagination["hasPrevPage"])

    def test_page_size_bounds(self):
        capped = self.client.get(self.list_url, {"limit": 500})
        self.assertEqual(capped.data["pagination"]["limit"], 100)

        fallback = self.client.get(self.list_url, {"limit": "abc"})
        self.assertEqual(fallback.data["pagination"]["limit"], 10)
        self.assertFalse(fallback.data["pagination"]["hasNextPage"])

        past_end = self.client.get(self.list_url, {"page": 9})
        self.assertEqual(past_end.status_code, status.HTTP_404_NOT_FOUND)

    def test_progress_is_capped(self):
        self.water.raised_amount = Decimal("1500.00")
        self.water.save()
        response = self.client.get(reverse("cause-detail", args=[self.water.id]))
        self.assertEqual(response.data["progress"], 100.0)

    def test_cause_donations_mask_anonymous_donors(self):
        donor = User.objects.create_user(email="d@example.com", password="GiveHope123", name="Yaw Darko")
        Donation.objects.create(user=donor, cause=self.water, amount=Decimal("20"), status="COMPLETED")
        Donation.objects.create(
            user=donor, cause=self.water, amount=Decimal("10"), status="COMPLETED", is_anonymous=True
        )
        Donation.objects.create(user=donor, cause=self.water, amount=Decimal("5"), status="PENDING")

        response = self.client.get(reverse("cause-donations", args=[self.water.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        names = sorted(d["donorName"] for d in response.data["donations"])
        self.assertEqual(names, ["Anonymous", "Yaw Darko"])


class CauseAdminTests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(
            email="admin@example.com", password="AdminPass123", name="Admin", role="ADMIN"
        )
        self.donor = User.objects.create_user(
            email="donor@example.com", password="DonorPass123", name="Donor"
        )
        self.url = reverse("cause-list")
        self.payload = {
            "title": "Solar lamps",
            "description": "Lamps for evening study",
            "targetAmount": "5000.00",
            "category": "Education",
            "location": "Savannah Region",
            "raisedAmount": "4000.00",
        }

    def _login(self, user):
        refresh = RefreshToken.for_user(user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")

    def test_admin_creates_cause_without_setting_raised_amount(self):
        self._login(self.admin)
        response = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        cause = Cause.objects.get(title="Solar lamps")
        self.assertEqual(cause.raised_amount, Decimal("0.00"))
        self.assertEqual(cause.status, "ACTIVE")

    def test_donor_cannot_create(self):
        self._login(self.donor)
        response = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_anonymous_cannot_create(self):
        response = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_target_must_be_positive(self):
        self._login(self.admin)
        response = self.client.post(self.url, {**self.payload, "targetAmount": "0"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_sees_drafts_and_can_pause(self):
        draft = create_cause(status="DRAFT")
        self._login(self.admin)

        response = self.client.get(self.url)
        self.assertEqual(response.data["pagination"]["totalCauses"], 1)

        response = self.client.patch(
            reverse("cause-detail", args=[draft.id]), {"status": "PAUSED"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        draft.refresh_from_db()
        self.assertEqual(draft.status, "PAUSED")


class SeedDataCommandTests(TestCase):
    def test_seed_is_idempotent(self):
        call_command("seed_data", stdout=StringIO())
        call_command("seed_data", stdout=StringIO())

        self.assertEqual(Cause.objects.count(), 4)
        self.assertEqual(User.objects.count(), 3)
        admin = User.objects.get(email="admin@givehopegh.org")
        self.assertTrue(admin.is_admin)
        self.assertTrue(admin.check_password("admin123"))

    def test_dry_run_writes_nothing(self):
        out = StringIO()
        call_command("seed_data", "--dry-run", stdout=out)
        self.assertEqual(Cause.objects.count(), 0)
        self.assertIn("DRY-RUN", out.getvalue())
