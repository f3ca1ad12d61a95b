from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from rest_framework import serializers

from .models import UserPreferences, UserSettings
from .validators import validate_phone_number

User = get_user_model()


# ====================================================
# PREFERENCES / SETTINGS
# ====================================================
class UserPreferencesSerializer(serializers.ModelSerializer):
    emailNotifications = serializers.BooleanField(source="email_notifications", required=False)
    smsNotifications = serializers.BooleanField(source="sms_notifications", required=False)
    pushNotifications = serializers.BooleanField(source="push_notifications", required=False)
    anonymousDonations = serializers.BooleanField(source="anonymous_donations", required=False)
    recurringDonations = serializers.BooleanField(source="recurring_donations", required=False)
    donationReminders = serializers.BooleanField(source="donation_reminders", required=False)
    profileVisibility = serializers.ChoiceField(
        source="profile_visibility",
        choices=UserPreferences.VISIBILITY_CHOICES,
        required=False,
    )
    showDonationHistory = serializers.BooleanField(source="show_donation_history", required=False)
    showEmailInDirectory = serializers.BooleanField(source="show_email_in_directory", required=False)
    newsletterSubscribed = serializers.BooleanField(source="newsletter_subscribed", required=False)
    impactUpdates = serializers.BooleanField(source="impact_updates", required=False)
    causeRecommendations = serializers.BooleanField(source="cause_recommendations", required=False)
    preferredLanguage = serializers.CharField(source="preferred_language", max_length=10, required=False)
    currency = serializers.CharField(max_length=3, required=False)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = UserPreferences
        fields = (
            "emailNotifications",
            "smsNotifications",
            "pushNotifications",
            "anonymousDonations",
            "recurringDonations",
            "donationReminders",
            "profileVisibility",
            "showDonationHistory",
            "showEmailInDirectory",
            "newsletterSubscribed",
            "impactUpdates",
            "causeRecommendations",
            "preferredLanguage",
            "timezone",
            "currency",
            "updatedAt",
        )

    def validate_currency(self, value):
        return value.upper()


class UserSettingsSerializer(serializers.ModelSerializer):
    twoFactorEnabled = serializers.BooleanField(source="two_factor_enabled", required=False)
    loginNotifications = serializers.BooleanField(source="login_notifications", required=False)
    sessionTimeout = serializers.IntegerField(source="session_timeout", min_value=60, required=False)
    autoLogout = serializers.BooleanField(source="auto_logout", required=False)
    rememberLogin = serializers.BooleanField(source="remember_login", required=False)
    lastPasswordChange = serializers.DateTimeField(source="last_password_change", read_only=True)
    theme = serializers.ChoiceField(choices=UserSettings.THEME_CHOICES, required=False)
    fontSize = serializers.ChoiceField(
        source="font_size",
        choices=UserSettings.FONT_SIZE_CHOICES,
        required=False,
    )
    compactMode = serializers.BooleanField(source="compact_mode", required=False)
    highContrast = serializers.BooleanField(source="high_contrast", required=False)
    screenReader = serializers.BooleanField(source="screen_reader", required=False)
    reducedMotion = serializers.BooleanField(source="reduced_motion", required=False)
    lastLogin = serializers.DateTimeField(source="last_login", read_only=True)
    lastLogout = serializers.DateTimeField(source="last_logout", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = UserSettings
        # refresh_token is never serialized
        fields = (
            "twoFactorEnabled",
            "loginNotifications",
            "sessionTimeout",
            "autoLogout",
            "rememberLogin",
            "lastPasswordChange",
            "theme",
            "fontSize",
            "compactMode",
            "highContrast",
            "screenReader",
            "reducedMotion",
            "lastLogin",
            "lastLogout",
            "updatedAt",
        )


# ====================================================
# USER PROFILE
# ====================================================
class UserSerializer(serializers.ModelSerializer):
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = User
        fields = (
            "id",
            "email",
            "name",
            "phone",
            "role",
            "createdAt",
            "updatedAt",
        )
        read_only_fields = (
            "id",
            "email",
            "role",
        )

    def validate_name(self, value):
        value = value.strip()
        if len(value) < 2:
            raise serializers.ValidationError("Name must be at least 2 characters long")
        return value

    def validate_phone(self, value):
        try:
            validate_phone_number(value)
        except DjangoValidationError as e:
            raise serializers.ValidationError(list(e.messages))
        return value.strip() if value else None


class UserDetailSerializer(UserSerializer):
    preferences = UserPreferencesSerializer(read_only=True)
    settings = UserSettingsSerializer(read_only=True)

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ("preferences", "settings")


# ====================================================
# REGISTRATION
# ====================================================
class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField(
        error_messages={"invalid": "Please enter a valid email address"}
    )
    password = serializers.CharField(write_only=True)
    name = serializers.CharField(max_length=150)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)

    def validate_email(self, value):
        return value.strip().lower()

    def validate_name(self, value):
        value = value.strip()
        if len(value) < 2:
            raise serializers.ValidationError("Name must be at least 2 characters long")
        return value

    def validate_phone(self, value):
        try:
            validate_phone_number(value)
        except DjangoValidationError as e:
            raise serializers.ValidationError(list(e.messages))
        return value.strip() if value else None

    def validate_password(self, value):
        try:
            validate_password(value)
        except DjangoValidationError as e:
            raise serializers.ValidationError(list(e.messages))
        return value

    def create(self, validated_data):
        # Preferences and settings rows are created by the post_save signal
        with transaction.atomic():
            user = User.objects.create_user(
                email=validated_data["email"],
                password=validated_data["password"],
                name=validated_data["name"],
                phone=validated_data.get("phone") or None,
                role="DONOR",
            )
        return user


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField(
        error_messages={"invalid": "Please enter a valid email address"}
    )
    password = serializers.CharField(write_only=True, min_length=6)

    def validate_email(self, value):
        return value.strip().lower()


class EmailVerificationSerializer(serializers.Serializer):
    email = serializers.EmailField(error_messages={"invalid": "Invalid email format"})

    def validate_email(self, value):
        return value.strip().lower()
