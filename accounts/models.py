from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone
from .managers import UserManager


class User(AbstractUser):
    username = None  # email is the login identifier
    first_name = None
    last_name = None

    email = models.EmailField(unique=True)
    name = models.CharField(max_length=150)
    phone = models.CharField(max_length=20, blank=True, null=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["name"]

    ROLE_CHOICES = (
        ("ADMIN", "Admin"),
        ("DONOR", "Donor"),
    )

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default="DONOR")
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    @property
    def is_admin(self):
        return self.is_superuser or self.role == "ADMIN"

    def get_full_name(self):
        return self.name

    def get_short_name(self):
        return self.name.split(" ")[0] if self.name else self.email

    def __str__(self):
        return self.email


class UserPreferences(models.Model):
    VISIBILITY_CHOICES = (
        ("PUBLIC", "Public"),
        ("PRIVATE", "Private"),
        ("DONORS_ONLY", "Donors only"),
    )

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name="preferences",
    )

    # Notifications
    email_notifications = models.BooleanField(default=True)
    sms_notifications = models.BooleanField(default=False)
    push_notifications = models.BooleanField(default=True)

    # Donations
    anonymous_donations = models.BooleanField(default=False)
    recurring_donations = models.BooleanField(default=False)
    donation_reminders = models.BooleanField(default=True)

    # Privacy
    profile_visibility = models.CharField(
        max_length=20, choices=VISIBILITY_CHOICES, default="PUBLIC"
    )
    show_donation_history = models.BooleanField(default=True)
    show_email_in_directory = models.BooleanField(default=False)

    # Communication
    newsletter_subscribed = models.BooleanField(default=True)
    impact_updates = models.BooleanField(default=True)
    cause_recommendations = models.BooleanField(default=True)

    # Locale
    preferred_language = models.CharField(max_length=10, default="en")
    timezone = models.CharField(max_length=50, default="Africa/Accra")
    currency = models.CharField(max_length=3, default="GHS")

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "User preferences"
        verbose_name_plural = "User preferences"

    def __str__(self):
        return f"UserPreferences({self.user})"


class UserSettings(models.Model):
    THEME_CHOICES = (
        ("light", "Light"),
        ("dark", "Dark"),
        ("system", "System"),
    )
    FONT_SIZE_CHOICES = (
        ("small", "Small"),
        ("medium", "Medium"),
        ("large", "Large"),
    )

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name="settings",
    )

    # Security
    two_factor_enabled = models.BooleanField(default=False)
    login_notifications = models.BooleanField(default=True)
    session_timeout = models.PositiveIntegerField(default=3600)
    auto_logout = models.BooleanField(default=True)
    remember_login = models.BooleanField(default=True)
    last_password_change = models.DateTimeField(default=timezone.now)

    # Display & accessibility
    theme = models.CharField(max_length=10, choices=THEME_CHOICES, default="light")
    font_size = models.CharField(
        max_length=10, choices=FONT_SIZE_CHOICES, default="medium"
    )
    compact_mode = models.BooleanField(default=False)
    high_contrast = models.BooleanField(default=False)
    screen_reader = models.BooleanField(default=False)
    reduced_motion = models.BooleanField(default=False)

    # Session continuity: the last refresh token handed out
    refresh_token = models.TextField(blank=True, null=True)
    last_login = models.DateTimeField(null=True, blank=True)
    last_logout = models.DateTimeField(null=True, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "User settings"
        verbose_name_plural = "User settings"

    def __str__(self):
        return f"UserSettings({self.user})"
