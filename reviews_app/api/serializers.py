from rest_framework import serializers
from ..models import Review


class ReviewReadSerializer(serializers.ModelSerializer):
    """
    Serializer for the `Review` model, intended for read-only operations.

    Foreign keys (`product`, `reviewer`) are represented by their primary keys, with the
    product title and reviewer username added alongside so list pages do not need extra
    requests.
    """
    product_title = serializers.CharField(source='product.title', read_only=True)
    reviewer_username = serializers.CharField(source='reviewer.username', read_only=True)

    class Meta:
        model = Review
        fields = [
            'id',
            'product',
            'product_title',
            'reviewer',
            'reviewer_username',
            'rating',
            'title',
            'comment',
            'is_verified_purchase',
            'status',
            'report_reason',
            'seller_response',
            'responded_at',
            'helpful_count',
            'created_at',
            'updated_at'
        ]


class ReviewCreateSerializer(serializers.ModelSerializer):
    """
    Handles the creation of a new Review instance.

    'reviewer', 'is_verified_purchase' and 'status' are intentionally excluded: the view sets
    them on the server side from the authenticated user and the eligibility decision.
    Whether the user may review the product at all is decided by the eligibility check in the
    view, which answers with 403 rather than a validation error.
    """
    class Meta:
        model = Review
        fields = ['product', 'rating', 'title', 'comment']


class ReviewUpdateSerializer(serializers.ModelSerializer):
    """
    Handles updating an existing Review instance.

    Only the author's own content can change. The product, the author, the verified-purchase
    flag and the moderation status are ignored if they are sent.
    """
    class Meta:
        model = Review
        fields = ['rating', 'title', 'comment']


class ReviewReportSerializer(serializers.Serializer):
    """Payload for flagging a review."""
    reason = serializers.CharField(max_length=500)


class ReviewModerationSerializer(serializers.Serializer):
    """Payload for a moderator decision."""
    status = serializers.ChoiceField(choices=[
        Review.Status.APPROVED,
        Review.Status.REJECTED,
        Review.Status.DELETED,
    ])


class SellerResponseSerializer(serializers.Serializer):
    """Payload for the seller's public answer to a review."""
    response = serializers.CharField(max_length=2000)
