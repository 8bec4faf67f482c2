"""
Review eligibility.

Decides whether a user may submit a new review for a product and whether that review would be
marked as a verified purchase. Nothing is stored: the decision is recomputed from purchase
history and existing reviews every time it is asked for.
"""
from dataclasses import dataclass
from typing import Optional, Tuple

from django.conf import settings

from orders_app.models import OrderItem
from .models import Review

LOGIN_REQUIRED = "Please login to write a review."
OWN_PRODUCT = "You cannot review your own product."
ALREADY_REVIEWED = "You have already reviewed this product."
NO_PURCHASE = "No completed purchase found for this product."


@dataclass(frozen=True)
class ReviewPolicy:
    """
    Platform rules for reviewing, built from the `REVIEWS` settings block.

    Attributes:
        auto_approve: New reviews start as approved instead of pending.
        require_verified_purchase: Only buyers with a completed order may review.
        completed_order_statuses: Order statuses that count as a completed purchase.
    """
    auto_approve: bool = False
    require_verified_purchase: bool = False
    completed_order_statuses: Tuple[str, ...] = ('delivered', 'completed')

    @classmethod
    def from_settings(cls):
        config = getattr(settings, 'REVIEWS', {})
        return cls(
            auto_approve=bool(config.get('AUTO_APPROVE', cls.auto_approve)),
            require_verified_purchase=bool(
                config.get('REQUIRE_VERIFIED_PURCHASE', cls.require_verified_purchase)
            ),
            completed_order_statuses=tuple(
                config.get('COMPLETED_ORDER_STATUSES', cls.completed_order_statuses)
            ),
        )

    @property
    def initial_status(self):
        """The status a freshly created review starts in."""
        return Review.Status.APPROVED if self.auto_approve else Review.Status.PENDING


@dataclass(frozen=True)
class ReviewEligibility:
    can_review: bool
    is_verified_purchase: bool = False
    reason: Optional[str] = None

    def as_dict(self):
        data = {
            'canReview': self.can_review,
            'isVerifiedPurchase': self.is_verified_purchase,
        }
        if self.reason:
            data['reason'] = self.reason
        return data


def has_completed_purchase(user, product, policy: ReviewPolicy) -> bool:
    """True if `user` has an order line for exactly this product in a completed order."""
    if user is None or not user.is_authenticated:
        return False
    return OrderItem.objects.filter(
        order__customer=user,
        order__status__in=policy.completed_order_statuses,
        product=product,
    ).exists()


def has_live_review(user, product) -> bool:
    return Review.objects.filter(
        reviewer=user, product=product
    ).exclude(status=Review.Status.DELETED).exists()


def check_eligibility(user, product, policy: ReviewPolicy) -> ReviewEligibility:
    """
    Decides whether `user` may review `product` right now.

    The first matching rule wins: anonymous users, the product's own seller, users who already
    hold a non-deleted review for the product and, when the policy requires it, users without a
    completed purchase are refused. `is_verified_purchase` is reported for every authenticated
    user so the client can tell them their review will carry the badge.
    """
    if user is None or not user.is_authenticated:
        return ReviewEligibility(can_review=False, reason=LOGIN_REQUIRED)

    verified = has_completed_purchase(user, product, policy)

    if product.seller_id == user.pk:
        return ReviewEligibility(can_review=False, is_verified_purchase=verified, reason=OWN_PRODUCT)

    if has_live_review(user, product):
        return ReviewEligibility(
            can_review=False, is_verified_purchase=verified, reason=ALREADY_REVIEWED
        )

    if policy.require_verified_purchase and not verified:
        return ReviewEligibility(can_review=False, is_verified_purchase=False, reason=NO_PURCHASE)

    return ReviewEligibility(can_review=True, is_verified_purchase=verified)
