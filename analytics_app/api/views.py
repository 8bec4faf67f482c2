from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.views import APIView
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.response import Response

from reviews_app.aggregation import aggregate_queryset
from reviews_app.api.permissions import IsSellerUser
from products_app.models import Product
from profile_app.models import Profile
from .. import services


class BaseInfoView(APIView):
    """
    Provides a public, read-only endpoint for platform-wide statistics.

    This view is a summary endpoint that is not tied to any single model. It aggregates data from
    the reviews, products and profiles to present a high-level overview of the platform's
    activity. It is accessible without authentication.

    Endpoint:
        GET /api/base-info/
    """
    # This permission class makes the endpoint public and accessible to anyone,
    # including unauthenticated users.
    permission_classes = [AllowAny]

    def get(self, request, format=None):
        """
        Handles GET requests to calculate and return the platform's key statistics.

        Only non-deleted reviews are counted. The average rating is reported as 0 when there are
        no reviews, so clients never have to deal with a null value.

        Returns:
            A DRF Response object containing the aggregated statistics and a 200 OK status.
        """
        # 1. Rating figures over the non-deleted reviews, computed in the database.
        aggregate = aggregate_queryset()

        # 2. Plain counts; .count() executes a `SELECT COUNT(*)` without loading any rows.
        seller_count = Profile.objects.filter(type=Profile.UserType.SELLER).count()
        product_count = Product.objects.count()

        data = {
            'review_count': aggregate.total_reviews,
            'average_rating': aggregate.avg_rating,
            'seller_count': seller_count,
            'product_count': product_count,
        }
        return Response(data, status=status.HTTP_200_OK)


class ReviewAnalyticsView(APIView):
    """
    Platform review analytics for administrators.

    Endpoint:
        GET /api/analytics/reviews/?type=products|vendors|general

    - `products` (default): one row per product.
    - `vendors`: one row per seller, across all of the seller's products.
    - `general`: the platform aggregate plus the number of reviews per status.
    """
    permission_classes = [IsAdminUser]

    def get(self, request, format=None):
        report_type = request.query_params.get('type', 'products')
        if report_type == 'products':
            data = services.product_rating_rows()
        elif report_type == 'vendors':
            data = services.vendor_rating_rows()
        elif report_type == 'general':
            data = services.general_review_stats()
        else:
            raise ValidationError(
                {'type': "Unknown analytics type. Use 'products', 'vendors' or 'general'."}
            )
        return Response(data, status=status.HTTP_200_OK)


class StoreReviewStatsView(APIView):
    """
    Review figures for the requesting seller's store.

    Endpoint:
        GET /api/analytics/store-reviews/
    """
    permission_classes = [IsAuthenticated, IsSellerUser]

    def get(self, request, format=None):
        return Response(services.store_review_stats(request.user), status=status.HTTP_200_OK)


class SellerProductReviewsView(APIView):
    """
    Per-product review overview for the requesting seller.

    Endpoint:
        GET /api/analytics/product-reviews/?sort=reviews|rating-high|rating-low|recent
    """
    permission_classes = [IsAuthenticated, IsSellerUser]

    def get(self, request, format=None):
        sort = request.query_params.get('sort', 'reviews')
        try:
            rows = services.seller_product_reviews(request.user, sort=sort)
        except ValueError as exc:
            raise ValidationError({'sort': str(exc)})
        return Response(rows, status=status.HTTP_200_OK)


class StoreReviewListView(APIView):
    """
    The reviews on the requesting seller's products, newest first.

    Endpoint:
        GET /api/analytics/store-reviews/list/?filter=all|positive|negative|awaiting-response|responded
    """
    permission_classes = [IsAuthenticated, IsSellerUser]

    def get(self, request, format=None):
        review_filter = request.query_params.get('filter', 'all')
        try:
            rows = services.seller_reviews(request.user, review_filter=review_filter)
        except ValueError as exc:
            raise ValidationError({'filter': str(exc)})
        return Response(rows, status=status.HTTP_200_OK)


class ResponseQueueView(APIView):
    """
    Reviews still waiting for the requesting seller's answer, oldest first.

    Endpoint:
        GET /api/analytics/response-queue/
    """
    permission_classes = [IsAuthenticated, IsSellerUser]

    def get(self, request, format=None):
        return Response(services.response_queue(request.user), status=status.HTTP_200_OK)


class ReviewRequestsView(APIView):
    """
    Completed purchases of the requesting seller's products that are not reviewed yet, with
    the conversion from purchases to reviews.

    Endpoint:
        GET /api/analytics/review-requests/
    """
    permission_classes = [IsAuthenticated, IsSellerUser]

    def get(self, request, format=None):
        return Response(services.review_requests(request.user), status=status.HTTP_200_OK)


class RatingInsightsView(APIView):
    """
    Rating insights for the requesting seller.

    Endpoint:
        GET /api/analytics/rating-insights/?period=1month|3months|6months|1year
    """
    permission_classes = [IsAuthenticated, IsSellerUser]

    def get(self, request, format=None):
        period = request.query_params.get('period', '6months')
        try:
            data = services.rating_insights(request.user, period=period)
        except ValueError as exc:
            raise ValidationError({'period': str(exc)})
        return Response(data, status=status.HTTP_200_OK)
