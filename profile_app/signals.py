from django.contrib.auth.models import User
from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Profile


@receiver(post_save, sender=User)
def create_user_profile(sender, instance, created, **kwargs):
    """
    Creates the linked Profile whenever a new User is saved for the first time.

    Every other part of the API relies on `user.profile` being present, so the profile is
    created here rather than by the registration flow.
    """
    if created:
        Profile.objects.get_or_create(user=instance)
