from django.db import models
from django.contrib.auth.models import User


class Profile(models.Model):
    """
    Extends the built-in Django User model with the user's role on the marketplace.

    This model uses a OneToOneField to maintain a strict one-to-one relationship with a User. The
    role decides which parts of the API a user may use: customers write reviews, sellers answer
    them and see their store analytics. Platform administrators are regular users with
    `is_staff` set and do not need a dedicated role.
    """
    # A one-to-one link to Django's built-in User model.
    # related_name='profile' allows easy reverse access from a User instance (`user.profile`).
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')

    class UserType(models.TextChoices):
        """An enumeration for the user's role within the marketplace."""
        CUSTOMER = 'customer', 'Customer'
        SELLER = 'seller', 'Seller'

    # The type of user, chosen from the UserType enumeration.
    type = models.CharField(max_length=10, choices=UserType.choices,
                            default=UserType.CUSTOMER, verbose_name="User type")

    # Set once, when the profile is first created.
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        """Returns a human-readable representation used in the Django admin."""
        return f"Profile of {self.user.username} ({self.type})"

    @property
    def is_seller(self):
        return self.type == self.UserType.SELLER

    @property
    def is_customer(self):
        return self.type == self.UserType.CUSTOMER
