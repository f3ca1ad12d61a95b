import accounts.managers
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("is_superuser", models.BooleanField(default=False, help_text="Designates that this user has all permissions without explicitly assigning them.", verbose_name="superuser status")),
                ("is_staff", models.BooleanField(default=False, help_text="Designates whether the user can log into this admin site.", verbose_name="staff status")),
                ("is_active", models.BooleanField(default=True, help_text="Designates whether this user should be treated as active. Unselect this instead of deleting accounts.", verbose_name="active")),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                ("email", models.EmailField(max_length=254, unique=True)),
                ("name", models.CharField(max_length=150)),
                ("phone", models.CharField(blank=True, max_length=20, null=True)),
                ("role", models.CharField(choices=[("ADMIN", "Admin"), ("DONOR", "Donor")], default="DONOR", max_length=20)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("groups", models.ManyToManyField(blank=True, help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.", related_name="user_set", related_query_name="user", to="auth.group", verbose_name="groups")),
                ("user_permissions", models.ManyToManyField(blank=True, help_text="Specific permissions for this user.", related_name="user_set", related_query_name="user", to="auth.permission", verbose_name="user permissions")),
            ],
            options={
                "verbose_name": "user",
                "verbose_name_plural": "users",
                "abstract": False,
            },
            managers=[
                ("objects", accounts.managers.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name="UserPreferences",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("email_notifications", models.BooleanField(default=True)),
                ("sms_notifications", models.BooleanField(default=False)),
                ("push_notifications", models.BooleanField(default=True)),
                ("anonymous_donations", models.BooleanField(default=False)),
                ("recurring_donations", models.BooleanField(default=False)),
                ("donation_reminders", models.BooleanField(default=True)),
                ("profile_visibility", models.CharField(choices=[("PUBLIC", "Public"), ("PRIVATE", "Private"), ("DONORS_ONLY", "Donors only")], default="PUBLIC", max_length=20)),
                ("show_donation_history", models.BooleanField(default=True)),
                ("show_email_in_directory", models.BooleanField(default=False)),
                ("newsletter_subscribed", models.BooleanField(default=True)),
                ("impact_updates", models.BooleanField(default=True)),
                ("cause_recommendations", models.BooleanField(default=True)),
                ("preferred_language", models.CharField(default="en", max_length=10)),
                ("timezone", models.CharField(default="Africa/Accra", max_length=50)),
                ("currency", models.CharField(default="GHS", max_length=3)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="preferences", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "User preferences",
                "verbose_name_plural": "User preferences",
            },
        ),
        migrations.CreateModel(
            name="UserSettings",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("two_factor_enabled", models.BooleanField(default=False)),
                ("login_notifications", models.BooleanField(default=True)),
                ("session_timeout", models.PositiveIntegerField(default=3600)),
                ("auto_logout", models.BooleanField(default=True)),
                ("remember_login", models.BooleanField(default=True)),
                ("last_password_change", models.DateTimeField(default=django.utils.timezone.now)),
                ("theme", models.CharField(choices=[("light", "Light"), ("dark", "Dark"), ("system", "System")], default="light", max_length=10)),
                ("font_size", models.CharField(choices=[("small", "Small"), ("medium", "Medium"), ("large", "Large")], default="medium", max_length=10)),
                ("compact_mode", models.BooleanField(default=False)),
                ("high_contrast", models.BooleanField(default=False)),
                ("screen_reader", models.BooleanField(default=False)),
                ("reduced_motion", models.BooleanField(default=False)),
                ("refresh_token", models.TextField(blank=True, null=True)),
                ("last_login", models.DateTimeField(blank=True, null=True)),
                ("last_logout", models.DateTimeField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="settings", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "User settings",
                "verbose_name_plural": "User settings",
            },
        ),
    ]
