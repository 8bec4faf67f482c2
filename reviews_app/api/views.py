import logging

from django.contrib.auth.models import User
from django.db import IntegrityError, transaction
from django.db.models import F, Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from django_filters.rest_framework import DjangoFilterBackend

from products_app.models import Product
from ..aggregation import aggregate_queryset
from ..eligibility import ALREADY_REVIEWED, ReviewPolicy, check_eligibility
from ..models import InvalidStatusTransition, Review
from .serializers import (
    ReviewReadSerializer,
    ReviewCreateSerializer,
    ReviewUpdateSerializer,
    ReviewReportSerializer,
    ReviewModerationSerializer,
    SellerResponseSerializer,
)
from .filters import ReviewFilter
from .permissions import IsCustomerUser, IsOwnerOrReadOnly, IsProductSeller

logger = logging.getLogger(__name__)


class ReviewViewSet(viewsets.ModelViewSet):
    """
    Manages reviews and their moderation workflow.

    This ViewSet provides the following endpoints:
    - `GET /api/reviews/`: Lists reviews with filtering and ordering.
    - `POST /api/reviews/`: Creates a new review (customers, subject to eligibility).
    - `GET /api/reviews/{id}/`: Retrieves a single review.
    - `PATCH /api/reviews/{id}/`: Updates the author's own review.
    - `DELETE /api/reviews/{id}/`: Withdraws the author's own review (soft delete).
    - `POST /api/reviews/{id}/report/`: Flags a review for moderation.
    - `POST /api/reviews/{id}/moderate/`: Moderator decision (staff only).
    - `POST /api/reviews/{id}/respond/`: The product seller's public answer.
    - `POST /api/reviews/{id}/helpful/`: Counts a "helpful" vote.

    Deleted reviews are never returned. Staff see every other review; everybody else sees
    approved reviews, their own reviews and the reviews on products they sell.
    """
    serializer_class = ReviewReadSerializer

    # Pagination is disabled for this view; all results will be returned in a single response.
    pagination_class = None

    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = ReviewFilter
    ordering_fields = ['updated_at', 'created_at', 'rating']

    def get_queryset(self):
        queryset = Review.objects.exclude(
            status=Review.Status.DELETED
        ).select_related('reviewer', 'product')

        user = self.request.user
        if user.is_staff:
            return queryset
        return queryset.filter(
            Q(status=Review.Status.APPROVED) | Q(reviewer=user) | Q(product__seller=user)
        )

    def get_permissions(self):
        """
        Dynamically assigns permissions based on the current action.

        - 'create': Only authenticated customers can create reviews.
        - 'update', 'destroy': Only the author can modify or withdraw a review.
        - 'moderate': Staff only.
        - 'respond': Only the seller of the reviewed product.
        - everything else: any authenticated user.
        """
        if self.action == 'create':
            permission_classes = [IsAuthenticated, IsCustomerUser]
        elif self.action in ['update', 'partial_update', 'destroy']:
            permission_classes = [IsAuthenticated, IsOwnerOrReadOnly]
        elif self.action == 'moderate':
            permission_classes = [IsAdminUser]
        elif self.action == 'respond':
            permission_classes = [IsAuthenticated, IsProductSeller]
        else:
            permission_classes = [IsAuthenticated]
        return [permission() for permission in permission_classes]

    def get_serializer_class(self):
        if self.action == 'create':
            return ReviewCreateSerializer
        if self.action in ['update', 'partial_update']:
            return ReviewUpdateSerializer
        if self.action == 'report':
            return ReviewReportSerializer
        if self.action == 'moderate':
            return ReviewModerationSerializer
        if self.action == 'respond':
            return SellerResponseSerializer
        return ReviewReadSerializer

    def read_response(self, instance, status_code=status.HTTP_200_OK):
        serializer = ReviewReadSerializer(instance, context=self.get_serializer_context())
        return Response(serializer.data, status=status_code)

    def create(self, request, *args, **kwargs):
        """
        Creates a review after checking the user's eligibility for the product.

        The reviewer, the verified-purchase flag and the initial status are all decided on the
        server: the flag comes from the eligibility check and the status from the review policy.
        An ineligible user receives 403 with the reason.
        """
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product = serializer.validated_data['product']

        policy = ReviewPolicy.from_settings()
        eligibility = check_eligibility(request.user, product, policy)
        if not eligibility.can_review:
            raise PermissionDenied(eligibility.reason)

        try:
            with transaction.atomic():
                review = serializer.save(
                    reviewer=request.user,
                    is_verified_purchase=eligibility.is_verified_purchase,
                    status=policy.initial_status,
                )
        except IntegrityError:
            # A concurrent request created the review between the check and the insert.
            raise PermissionDenied(ALREADY_REVIEWED)

        logger.info(
            "Review %s created for product %s (verified=%s, status=%s)",
            review.pk, product.pk, review.is_verified_purchase, review.status
        )
        read_serializer = ReviewReadSerializer(review, context=self.get_serializer_context())
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    def update(self, request, *args, **kwargs):
        """
        Overrides the default update behavior to return the full, updated object.
        """
        partial = kwargs.pop('partial', False)
        instance = self.get_object()

        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        self.perform_update(serializer)

        return self.read_response(instance)

    def perform_destroy(self, instance):
        """Withdrawing a review is a soft delete; the row is kept with status 'deleted'."""
        instance.transition_to(Review.Status.DELETED)

    @action(detail=True, methods=['post'])
    def report(self, request, pk=None):
        review = self.get_object()
        if review.reviewer_id == request.user.pk:
            raise ValidationError({'detail': "You cannot report your own review."})

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self._transition(review, Review.Status.REPORTED, serializer.validated_data['reason'])
        return self.read_response(review)

    @action(detail=True, methods=['post'])
    def moderate(self, request, pk=None):
        review = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self._transition(review, serializer.validated_data['status'])
        return self.read_response(review)

    @action(detail=True, methods=['post'])
    def respond(self, request, pk=None):
        review = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        review.seller_response = serializer.validated_data['response']
        review.responded_at = timezone.now()
        review.save(update_fields=['seller_response', 'responded_at', 'updated_at'])
        return self.read_response(review)

    @action(detail=True, methods=['post'])
    def helpful(self, request, pk=None):
        review = self.get_object()
        Review.objects.filter(pk=review.pk).update(helpful_count=F('helpful_count') + 1)
        review.refresh_from_db()
        return self.read_response(review)

    def _transition(self, review, new_status, reason=None):
        try:
            review.transition_to(new_status, reason=reason)
        except InvalidStatusTransition as exc:
            raise ValidationError({'detail': str(exc)})


class ProductRatingSummaryView(APIView):
    """
    Public rating summary of a single product.

    Endpoint:
        GET /api/products/{product_id}/rating-summary/

    Returns `{avgRating, totalReviews, ratingBreakdown, verifiedPurchases}` computed over the
    product's non-deleted reviews. A product without reviews reports zeros, never null.
    """
    permission_classes = [AllowAny]

    def get(self, request, product_id, format=None):
        product = get_object_or_404(Product, pk=product_id)
        aggregate = aggregate_queryset(Review.objects.filter(product=product))
        return Response(aggregate.as_dict(), status=status.HTTP_200_OK)


class SellerRatingSummaryView(APIView):
    """
    Public rating summary across all products of a seller.

    Endpoint:
        GET /api/sellers/{seller_id}/rating-summary/
    """
    permission_classes = [AllowAny]

    def get(self, request, seller_id, format=None):
        seller = get_object_or_404(User, pk=seller_id)
        aggregate = aggregate_queryset(Review.objects.filter(product__seller=seller))
        return Response(aggregate.as_dict(), status=status.HTTP_200_OK)


class ReviewEligibilityView(APIView):
    """
    Tells the requesting user whether they may review a product.

    Endpoint:
        GET /api/products/{product_id}/review-eligibility/

    Public, so that anonymous visitors get a well-formed answer (`canReview: false` with the
    login reason) instead of an authentication error.
    """
    permission_classes = [AllowAny]

    def get(self, request, product_id, format=None):
        product = get_object_or_404(Product, pk=product_id)
        eligibility = check_eligibility(request.user, product, ReviewPolicy.from_settings())
        return Response(eligibility.as_dict(), status=status.HTTP_200_OK)
