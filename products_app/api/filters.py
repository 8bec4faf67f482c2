import django_filters
from products_app.models import Product


class ProductFilter(django_filters.FilterSet):
    """
    A `FilterSet` for the `Product` model.

    Attributes:
        seller_id (NumberFilter): Filters products by the ID of the selling user.
        category (CharFilter): Case-insensitive exact match on the category.
        min_rating (NumberFilter): Filters on the annotated `average_rating` (gte).
    """
    # Renames the filter from the model's `seller` field to the more explicit `seller_id`.
    seller_id = django_filters.NumberFilter(field_name="seller__id")

    category = django_filters.CharFilter(field_name="category", lookup_expr='iexact')

    # Targets the annotation created in the ViewSet's `get_queryset` method.
    min_rating = django_filters.NumberFilter(field_name="average_rating", lookup_expr='gte')

    class Meta:
        model = Product
        fields = ['seller_id', 'category', 'min_rating']
