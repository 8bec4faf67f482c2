from django.contrib.auth.models import User
from django.db.models import Q
from rest_framework import viewsets, status
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from reviews_app.eligibility import ReviewPolicy
from ..models import Order
from .serializers import OrderSerializer


def orders_for_seller(seller_id):
    """Orders that contain at least one line sold by the given seller."""
    return Order.objects.filter(items__seller_id=seller_id).distinct()


class OrderViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Read-only access to purchase history.

    - Customers see the orders they placed.
    - Sellers see the orders that contain at least one of their items.
    - Staff users see every order.
    """
    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated]
    # Pagination is disabled for this ViewSet. All results will be returned in a single response.
    pagination_class = None

    def get_queryset(self):
        user = self.request.user
        queryset = Order.objects.prefetch_related('items')
        if user.is_staff:
            return queryset.all()
        return queryset.filter(
            Q(customer=user) | Q(items__seller=user)
        ).distinct()


class OrderCountView(APIView):
    """
    Returns the number of open (not yet delivered, not cancelled) orders for a seller.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, seller_id, format=None):
        """
        Args:
            seller_id (int): The primary key of the seller whose orders are to be counted.

        Returns:
            Response: `{'order_count': n}` or a 404 if the user doesn't exist.
        """
        if not User.objects.filter(pk=seller_id).exists():
            return Response(status=status.HTTP_404_NOT_FOUND)

        count = orders_for_seller(seller_id).filter(status__in=Order.OPEN_STATUSES).count()
        return Response({'order_count': count}, status=status.HTTP_200_OK)


class CompletedOrderCountView(APIView):
    """
    Returns the number of completed orders for a seller.

    "Completed" uses the same order statuses that qualify a verified purchase.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, seller_id, format=None):
        if not User.objects.filter(pk=seller_id).exists():
            return Response(status=status.HTTP_404_NOT_FOUND)

        policy = ReviewPolicy.from_settings()
        count = orders_for_seller(seller_id).filter(
            status__in=policy.completed_order_statuses
        ).count()
        return Response({'completed_order_count': count}, status=status.HTTP_200_OK)
