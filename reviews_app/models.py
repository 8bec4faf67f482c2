import logging

from django.db import models
from django.db.models import Q
from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator

logger = logging.getLogger(__name__)


class InvalidStatusTransition(ValueError):
    """Raised when a review is asked to move to a status its current status does not allow."""

    def __init__(self, current, requested):
        self.current = current
        self.requested = requested
        super().__init__(f"A review cannot move from '{current}' to '{requested}'.")


class Review(models.Model):
    """
    Represents a customer's evaluation of a product.

    A review carries a 1-5 star rating, an optional title and comment, and a moderation status.
    The `is_verified_purchase` flag records whether the author had a completed order for the
    product when the review was submitted. It is written once at creation time and never
    re-evaluated, even if the order is later cancelled or refunded.

    A customer may hold at most one non-deleted review per product. Deleting a review is a soft
    delete (status `deleted`), which removes it from every aggregate and listing and allows the
    customer to review the product again.

    Attributes:
        product (ForeignKey): The product being reviewed.
        reviewer (ForeignKey): The customer who wrote the review.
        rating (PositiveSmallIntegerField): A star rating from 1 to 5.
        title (CharField): A short summary of the review.
        comment (TextField): The free-form text of the review.
        is_verified_purchase (BooleanField): Set at creation, immutable afterwards.
        status (CharField): The moderation status, see `Review.Status`.
        report_reason (TextField): Why the review was flagged, if it was.
        seller_response (TextField): The seller's public answer, if any.
        responded_at (DateTimeField): When the seller answered.
        helpful_count (PositiveIntegerField): Number of "helpful" votes.
        created_at (DateTimeField): Set once on creation.
        updated_at (DateTimeField): Updated on every save.
    """
    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        APPROVED = 'approved', 'Approved'
        REJECTED = 'rejected', 'Rejected'
        REPORTED = 'reported', 'Reported'
        DELETED = 'deleted', 'Deleted'

    # Allowed moderation transitions. `deleted` is terminal.
    TRANSITIONS = {
        Status.PENDING: {Status.APPROVED, Status.REJECTED, Status.REPORTED, Status.DELETED},
        Status.APPROVED: {Status.REPORTED, Status.DELETED},
        Status.REJECTED: {Status.REPORTED, Status.DELETED},
        Status.REPORTED: {Status.APPROVED, Status.DELETED},
        Status.DELETED: set(),
    }

    # The product being reviewed. Reviews go away with their product.
    product = models.ForeignKey(
        'products_app.Product',
        related_name='reviews',
        on_delete=models.CASCADE,
        help_text="The product being reviewed."
    )

    # The customer who wrote the review.
    reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name='reviews_given',
        on_delete=models.CASCADE,
        help_text="The user who wrote the review."
    )

    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
        help_text="The rating given, from 1 to 5."
    )
    title = models.CharField(max_length=200, blank=True, default='')
    comment = models.TextField(blank=True, default='')

    is_verified_purchase = models.BooleanField(
        default=False,
        help_text="True if the author had a completed order for this product when reviewing."
    )

    # Required, with an explicit value chosen by the review policy at creation time.
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.PENDING,
        help_text="The moderation status of the review."
    )
    report_reason = models.TextField(blank=True, default='')

    seller_response = models.TextField(blank=True, default='')
    responded_at = models.DateTimeField(null=True, blank=True)

    helpful_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Metadata options for the Review model."""
        # Default ordering for querysets: newest reviews first.
        ordering = ['-created_at']
        constraints = [
            # One live review per customer and product; withdrawn reviews do not count.
            models.UniqueConstraint(
                fields=['product', 'reviewer'],
                condition=~Q(status='deleted'),
                name='unique_live_review_per_product',
            ),
        ]
        indexes = [
            models.Index(fields=['product', 'status', 'rating']),
            models.Index(fields=['reviewer', 'created_at']),
        ]
        verbose_name = "Review"
        verbose_name_plural = "Reviews"

    def __str__(self):
        return f"Review by {self.reviewer.username} for {self.product.title} ({self.rating} stars)"

    @property
    def is_deleted(self):
        return self.status == self.Status.DELETED

    def can_transition_to(self, new_status):
        return new_status in self.TRANSITIONS.get(self.status, set())

    def transition_to(self, new_status, reason=None, save=True):
        """
        Moves the review to `new_status`, enforcing the moderation state machine.

        Args:
            new_status (str): One of `Review.Status`.
            reason (str, optional): Stored as `report_reason` when the review is reported.
            save (bool): Persist the change immediately.

        Raises:
            InvalidStatusTransition: If the transition is not allowed. The review is left
                unchanged.
        """
        if not self.can_transition_to(new_status):
            logger.warning(
                "Rejected review status change %s -> %s (review %s)",
                self.status, new_status, self.pk
            )
            raise InvalidStatusTransition(self.status, new_status)

        previous = self.status
        self.status = new_status
        if new_status == self.Status.REPORTED:
            self.report_reason = reason or ''

        if save:
            self.save(update_fields=['status', 'report_reason', 'updated_at'])
        logger.info("Review %s moved from %s to %s", self.pk, previous, new_status)
        return self
