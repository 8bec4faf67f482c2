from django.contrib.auth.models import User
from django.test import TestCase

from profile_app.models import Profile


class ProfileSignalTests(TestCase):
    """
    Tests for the automatic creation of a Profile for every new User.

    The rest of the API reads the user's role from `user.profile`, so a user without a profile
    would break permission checks.
    """

    def test_signal_creates_profile(self):
        """
        Tests that the post_save signal handler automatically creates a linked Profile object
        whenever a new User is created.
        """
        user_count = User.objects.count()
        profile_count = Profile.objects.count()

        new_user = User.objects.create_user(username='signaltestuser', password='password')

        # Check that the number of users and profiles has increased by one.
        self.assertEqual(User.objects.count(), user_count + 1)
        self.assertEqual(Profile.objects.count(), profile_count + 1)
        self.assertEqual(new_user.profile.user, new_user)

    def test_new_profile_defaults_to_customer(self):
        user = User.objects.create_user(username='newcomer', password='password')

        self.assertEqual(user.profile.type, Profile.UserType.CUSTOMER)
        self.assertTrue(user.profile.is_customer)
        self.assertFalse(user.profile.is_seller)

    def test_updating_user_does_not_create_second_profile(self):
        """Saving an existing user again must not create another profile."""
        user = User.objects.create_user(username='repeat', password='password')
        user.first_name = 'Re'
        user.save()

        self.assertEqual(Profile.objects.filter(user=user).count(), 1)

    def test_role_can_be_switched_to_seller(self):
        user = User.objects.create_user(username='vendor', password='password')
        user.profile.type = Profile.UserType.SELLER
        user.profile.save()

        user.refresh_from_db()
        self.assertTrue(user.profile.is_seller)
        self.assertEqual(str(user.profile), "Profile of vendor (seller)")
