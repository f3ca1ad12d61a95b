# accounts/signals.py
from django.db.models.signals import post_save
from django.dispatch import receiver
from django.contrib.auth import get_user_model

from .models import UserPreferences, UserSettings

User = get_user_model()


@receiver(post_save, sender=User)
def create_user_profile_records(sender, instance, created, **kwargs):
    """
    Every account gets default preferences and settings rows.
    """
    if created:
        UserPreferences.objects.get_or_create(user=instance)
        UserSettings.objects.get_or_create(user=instance)
