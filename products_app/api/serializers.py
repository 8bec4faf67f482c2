from rest_framework import serializers

from reviews_app.aggregation import round_average
from ..models import Product


class ProductSerializer(serializers.ModelSerializer):
    """
    Read serializer for products, including their live rating figures.

    `average_rating` and `review_count` are not model fields; they are annotations added by
    `ProductViewSet.get_queryset()` and are computed over non-deleted reviews only.
    """
    seller_username = serializers.CharField(source='seller.username', read_only=True)
    average_rating = serializers.SerializerMethodField()
    review_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Product
        fields = [
            'id',
            'seller',
            'seller_username',
            'title',
            'category',
            'description',
            'price',
            'average_rating',
            'review_count',
            'created_at',
            'updated_at',
        ]

    def get_average_rating(self, obj):
        """Rounds the annotated average half-up to one decimal, reporting 0 for unreviewed products."""
        return round_average(getattr(obj, 'average_rating', None))
