import django_filters
from ..models import Review


class ReviewFilter(django_filters.FilterSet):
    """
    A FilterSet for the Review model to handle custom query parameter filtering.
    """
    # Renames the filter parameter from 'product' to 'product_id' for API clarity
    product_id = django_filters.NumberFilter(field_name="product__id")

    # Renames the filter parameter from 'reviewer' to 'reviewer_id' for API clarity
    reviewer_id = django_filters.NumberFilter(field_name="reviewer__id")

    # All reviews on the products of one seller
    seller_id = django_filters.NumberFilter(field_name="product__seller__id")

    rating = django_filters.NumberFilter(field_name="rating")
    status = django_filters.ChoiceFilter(field_name="status", choices=Review.Status.choices)
    verified = django_filters.BooleanFilter(field_name="is_verified_purchase")

    # true: the seller has answered; false: still waiting for an answer
    responded = django_filters.BooleanFilter(method="filter_responded")

    class Meta:
        model = Review
        # The list of filter names exposed in the API
        fields = [
            'product_id', 'reviewer_id', 'seller_id', 'rating', 'status', 'verified', 'responded'
        ]

    def filter_responded(self, queryset, name, value):
        if value:
            return queryset.exclude(seller_response="")
        return queryset.filter(seller_response="")
