from rest_framework import permissions
from profile_app.models import Profile


def profile_type(user):
    """Returns the user's profile type, or None for anonymous users and users without a profile."""
    if not user or not user.is_authenticated:
        return None
    try:
        return user.profile.type
    except Profile.DoesNotExist:
        return None


class IsCustomerUser(permissions.BasePermission):
    """
    Custom permission to only allow users with a 'customer' profile to perform an action.

    This permission implements role-based access control by checking the `type` field on the user's
    associated `Profile`. Anonymous users are refused before the profile is looked at, which makes
    DRF answer with 401 instead of 403.
    """
    # A custom error message that will be sent in the response if permission is denied.
    message = "Only users with a customer profile can write reviews."

    def has_permission(self, request, view):
        return profile_type(request.user) == Profile.UserType.CUSTOMER


class IsSellerUser(permissions.BasePermission):
    """Allows access only to users with a 'seller' profile."""
    message = "Only sellers can access this resource."

    def has_permission(self, request, view):
        return profile_type(request.user) == Profile.UserType.SELLER


class IsStaffOrSeller(permissions.BasePermission):
    """Allows access to platform staff and to sellers; customers are refused."""
    message = "Only sellers and administrators can access this resource."

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return user.is_staff or profile_type(user) == Profile.UserType.SELLER


class IsOwnerOrReadOnly(permissions.BasePermission):
    """
    Custom permission to only allow the author of a review to edit or delete it, while allowing
    read-only access for others.

    It assumes that the object instance being checked has a `reviewer` attribute.
    """

    def has_object_permission(self, request, view, obj):
        # `SAFE_METHODS` is a tuple containing ('GET', 'HEAD', 'OPTIONS').
        if request.method in permissions.SAFE_METHODS:
            return True

        # For write methods, permission is granted only to the review's author.
        return obj.reviewer == request.user


class IsProductSeller(permissions.BasePermission):
    """
    Object-level permission granting access only to the seller of the reviewed product.

    Used for the seller's public answer to a review.
    """
    message = "Only the seller of this product can respond to its reviews."

    def has_object_permission(self, request, view, obj):
        return obj.product.seller_id == request.user.pk
