from django.db.models import Avg, Count, Q
from rest_framework import viewsets
from rest_framework.filters import SearchFilter, OrderingFilter
from rest_framework.permissions import AllowAny
from django_filters.rest_framework import DjangoFilterBackend

from products_app.models import Product
from reviews_app.models import Review
from .serializers import ProductSerializer
from .filters import ProductFilter
from .pagination import ProductPagination


class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Public, read-only catalogue endpoints.

    - `GET /api/products/`: Lists products with pagination, filtering, searching and ordering.
    - `GET /api/products/{id}/`: Retrieves a single product.

    Products are created and edited by the catalogue service; this API only exposes them as
    review targets together with their current rating figures.
    """
    serializer_class = ProductSerializer
    permission_classes = [AllowAny]
    pagination_class = ProductPagination
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_class = ProductFilter
    search_fields = ['title', 'description']
    ordering_fields = ['updated_at', 'price', 'average_rating']

    def get_queryset(self):
        """
        Builds the base queryset with the rating annotations.

        `average_rating` and `review_count` are calculated in the database. Deleted reviews are
        excluded from both so the figures match the rating summary endpoints.
        """
        visible_reviews = ~Q(reviews__status=Review.Status.DELETED)
        return Product.objects.annotate(
            average_rating=Avg('reviews__rating', filter=visible_reviews),
            review_count=Count('reviews', filter=visible_reviews),
        ).select_related('seller').order_by('-updated_at')
