"""
Signals: create a Profile for each new User and keep cached display names fresh.
"""
from django.contrib.auth import get_user_model
from django.db.models.signals import post_save
from django.dispatch import receiver

from .display_names import invalidate_display_name
from .models import Profile

User = get_user_model()


@receiver(post_save, sender=User)
def create_user_profile(sender, instance, created, **kwargs):
    """Create a Profile when a new User is created."""
    if created:
        Profile.objects.get_or_create(user=instance)
    invalidate_display_name(instance.pk)


@receiver(post_save, sender=Profile)
def profile_saved(sender, instance, **kwargs):
    invalidate_display_name(instance.user_id)
