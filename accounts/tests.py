from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import override_settings
from django.urls import reverse
from unittest.mock import patch
from rest_framework import status
from rest_framework.test import APITestCase
from rest_framework_simplejwt.tokens import RefreshToken

from .models import UserPreferences, UserSettings
from .throttles import VerifyEmailAddressThrottle

User = get_user_model()


def auth_header(user):
    refresh = RefreshToken.for_user(user)
    return {"HTTP_AUTHORIZATION": f"Bearer {refresh.access_token}"}


# -------------------------
# Registration Tests
# -------------------------
class RegistrationTests(APITestCase):

    def test_registration_creates_donor_with_profile_records(self):
        url = reverse("register")
        data = {
            "email": "Ama.Owusu@Example.com",
            "password": "GiveHope123",
            "name": "Ama Owusu",
            "phone": "+233241234567",
        }
        response = self.client.post(url, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn("accessToken", response.data)
        self.assertIn("refreshToken", response.data)

        user = User.objects.get(email="ama.owusu@example.com")
        self.assertEqual(user.role, "DONOR")
        self.assertTrue(UserPreferences.objects.filter(user=user).exists())
        self.assertEqual(user.settings.refresh_token, response.data["refreshToken"])

    def test_role_cannot_be_chosen_at_registration(self):
        url = reverse("register")
        data = {
            "email": "sneaky@example.com",
            "password": "GiveHope123",
            "name": "Sneaky",
            "role": "ADMIN",
        }
        response = self.client.post(url, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(User.objects.get(email="sneaky@example.com").role, "DONOR")

    def test_duplicate_email_returns_conflict(self):
        User.objects.create_user(email="taken@example.com", password="GiveHope123", name="Taken")
        url = reverse("register")
        data = {"email": "TAKEN@example.com", "password": "GiveHope123", "name": "Again"}
        response = self.client.post(url, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_weak_password_is_rejected(self):
        url = reverse("register")
        data = {"email": "weak@example.com", "password": "alllowercase", "name": "Weak"}
        response = self.client.post(url, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("message", response.data)
        self.assertFalse(User.objects.filter(email="weak@example.com").exists())

    @patch("accounts.views.send_welcome_email", side_effect=ConnectionRefusedError("smtp down"))
    def test_registration_survives_email_failure(self, _mock_send):
        url = reverse("register")
        data = {"email": "nomail@example.com", "password": "GiveHope123", "name": "No Mail"}
        response = self.client.post(url, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)


# -------------------------
# Login / Token Tests
# -------------------------
class LoginTests(APITestCase):

    def setUp(self):
        self.user = User.objects.create_user(
            email="donor@example.com",
            password="GiveHope123",
            name="Kwame Boateng",
        )

    def test_login_returns_tokens(self):
        url = reverse("login")
        response = self.client.post(
            url, {"email": "donor@example.com", "password": "GiveHope123"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["user"]["email"], "donor@example.com")
        self.assertEqual(response.data["expiresIn"], 15 * 60)

    def test_login_ignores_email_case(self):
        url = reverse("login")
        response = self.client.post(
            url, {"email": " Donor@Example.COM", "password": "GiveHope123"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_login_with_wrong_password(self):
        url = reverse("login")
        response = self.client.post(
            url, {"email": "donor@example.com", "password": "WrongPass123"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_login_requires_both_fields(self):
        url = reverse("login")
        response = self.client.post(url, {"email": "donor@example.com"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_inactive_user_cannot_login(self):
        self.user.is_active = False
        self.user.save()
        url = reverse("login")
        response = self.client.post(
            url, {"email": "donor@example.com", "password": "GiveHope123"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh_rotates_and_rejects_old_token(self):
        login = self.client.post(
            reverse("login"),
            {"email": "donor@example.com", "password": "GiveHope123"},
            format="json",
        )
        old_refresh = login.data["refreshToken"]

        response = self.client.post(
            reverse("token-refresh"), {"refreshToken": old_refresh}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotEqual(response.data["refreshToken"], old_refresh)

        replay = self.client.post(
            reverse("token-refresh"), {"refreshToken": old_refresh}, format="json"
        )
        self.assertEqual(replay.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh_requires_token(self):
        response = self.client.post(reverse("token-refresh"), {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_refresh_with_garbage_token(self):
        response = self.client.post(
            reverse("token-refresh"), {"refreshToken": "not-a-token"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_logout_clears_stored_token(self):
        login = self.client.post(
            reverse("login"),
            {"email": "donor@example.com", "password": "GiveHope123"},
            format="json",
        )
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['accessToken']}")

        response = self.client.post(
            reverse("logout"), {"refreshToken": login.data["refreshToken"]}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        user_settings = UserSettings.objects.get(user=self.user)
        self.assertIsNone(user_settings.refresh_token)
        self.assertIsNotNone(user_settings.last_logout)

        self.client.credentials()
        replay = self.client.post(
            reverse("token-refresh"), {"refreshToken": login.data["refreshToken"]}, format="json"
        )
        self.assertEqual(replay.status_code, status.HTTP_401_UNAUTHORIZED)


# -------------------------
# Profile Tests
# -------------------------
class ProfileTests(APITestCase):

    def setUp(self):
        self.user = User.objects.create_user(
            email="profile@example.com",
            password="GiveHope123",
            name="Efua Asante",
        )

    def test_me_requires_authentication(self):
        response = self.client.get(reverse("me"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_includes_preferences(self):
        response = self.client.get(reverse("me"), **auth_header(self.user))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["preferences"]["currency"], "GHS")
        self.assertNotIn("refreshToken", response.data["settings"])

    def test_patch_me_updates_name_but_not_role(self):
        response = self.client.patch(
            reverse("me"), {"name": "Efua A.", "role": "ADMIN"}, format="json", **auth_header(self.user)
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.name, "Efua A.")
        self.assertEqual(self.user.role, "DONOR")

    def test_update_preferences(self):
        url = reverse("user-preferences")
        response = self.client.put(
            url, {"emailNotifications": False, "currency": "usd"}, format="json", **auth_header(self.user)
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data["preferences"]["emailNotifications"])

        preferences = UserPreferences.objects.get(user=self.user)
        self.assertFalse(preferences.email_notifications)
        self.assertEqual(preferences.currency, "USD")

    def test_update_settings(self):
        url = reverse("user-settings")
        response = self.client.put(url, {"theme": "dark"}, format="json", **auth_header(self.user))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["settings"]["theme"], "dark")

    def test_invalid_theme_is_rejected(self):
        url = reverse("user-settings")
        response = self.client.put(url, {"theme": "neon"}, format="json", **auth_header(self.user))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


# -------------------------
# Email Verification Tests
# -------------------------
@override_settings(EMAIL_VERIFICATION_DELAY_SECONDS=0)
class EmailVerificationTests(APITestCase):

    def setUp(self):
        cache.clear()
        User.objects.create_user(
            email="known@example.com",
            password="GiveHope123",
            name="Known User",
        )
        self.url = reverse("verify-email")

    def tearDown(self):
        cache.clear()

    def test_known_and_unknown_email(self):
        known = self.client.post(self.url, {"email": "known@example.com"}, format="json")
        unknown = self.client.post(self.url, {"email": "nobody@example.com"}, format="json")
        self.assertEqual(known.status_code, status.HTTP_200_OK)
        self.assertEqual(unknown.status_code, status.HTTP_404_NOT_FOUND)

    def test_bad_input(self):
        response = self.client.post(self.url, {"email": "not-an-email"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_per_email_limit(self):
        for _ in range(3):
            response = self.client.post(self.url, {"email": "known@example.com"}, format="json")
            self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.post(self.url, {"email": "Known@Example.com"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertEqual(
            response.data,
            {"success": False, "message": "Too many attempts for this email. Please try again later."},
        )
        self.assertIn("Retry-After", response)

    def test_per_ip_limit(self):
        for i in range(10):
            self.client.post(self.url, {"email": f"visitor{i}@example.com"}, format="json")

        response = self.client.post(self.url, {"email": "known@example.com"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)

    def test_malformed_email_is_not_counted_per_address(self):
        for _ in range(4):
            response = self.client.post(self.url, {"email": "not-an-email"}, format="json")
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @override_settings(EMAIL_VERIFICATION_EMAIL_LIMIT=1, EMAIL_VERIFICATION_WINDOW_SECONDS=60)
    def test_address_limit_resets_after_window(self):
        with patch.object(VerifyEmailAddressThrottle, "timer", return_value=1000.0):
            first = self.client.post(self.url, {"email": "known@example.com"}, format="json")
            second = self.client.post(self.url, {"email": "known@example.com"}, format="json")

        with patch.object(VerifyEmailAddressThrottle, "timer", return_value=1061.0):
            later = self.client.post(self.url, {"email": "known@example.com"}, format="json")

        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(second.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertEqual(later.status_code, status.HTTP_200_OK)
