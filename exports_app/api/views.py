from django.db.models import Count
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.views import APIView

from analytics_app.services import product_rating_rows, vendor_rating_rows
from orders_app.api.views import orders_for_seller
from orders_app.models import Order
from products_app.models import Product
from reviews_app.aggregation import visible_reviews
from reviews_app.api.permissions import IsStaffOrSeller
from ..csv_export import (
    NoDataError,
    ORDER_EXPORT_COLUMNS,
    REVIEW_EXPORT_COLUMNS,
    csv_response,
    export_to_csv,
)


class NoDataToExport(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "No data to export."
    default_code = 'no_data'


class CSVExportView(APIView):
    """
    Base view for CSV downloads.

    Subclasses provide `base_filename`, optionally `columns`, and implement `get_records()`
    returning a list of dicts. The response is a `text/csv` attachment named
    `{base_filename}_{YYYY-MM-DD}.csv`. An empty record set answers 404 with
    `{"detail": "No data to export."}` and no file.
    """
    permission_classes = [IsAuthenticated, IsStaffOrSeller]
    base_filename = None
    columns = None

    def get_records(self):
        raise NotImplementedError

    def get(self, request, format=None):
        try:
            export = export_to_csv(self.get_records(), self.base_filename, columns=self.columns)
        except NoDataError:
            raise NoDataToExport()
        return csv_response(export)


class ReviewExportView(CSVExportView):
    """
    Endpoint:
        GET /api/exports/reviews/

    Staff export every non-deleted review, sellers the reviews on their own products.
    """
    base_filename = 'customer_reviews'
    columns = REVIEW_EXPORT_COLUMNS

    def get_records(self):
        reviews = visible_reviews().select_related('reviewer', 'product').order_by('-created_at')
        if not self.request.user.is_staff:
            reviews = reviews.filter(product__seller=self.request.user)
        return [
            {
                'customer': review.reviewer.username,
                'product': review.product.title,
                'rating': review.rating,
                'title': review.title,
                'comment': review.comment,
                'status': review.status,
                'is_verified_purchase': review.is_verified_purchase,
                'seller_response': review.seller_response,
                'created_at': review.created_at,
            }
            for review in reviews
        ]


class OrderExportView(CSVExportView):
    """
    Endpoint:
        GET /api/exports/orders/

    Staff export every order, sellers the orders that contain their items.
    """
    base_filename = 'orders'
    columns = ORDER_EXPORT_COLUMNS

    def get_records(self):
        if self.request.user.is_staff:
            orders = Order.objects.all()
        else:
            # Subquery, so the item count below is not limited to this seller's lines.
            orders = Order.objects.filter(
                pk__in=orders_for_seller(self.request.user.pk).values('pk')
            )
        orders = orders.select_related('customer').annotate(
            items_count=Count('items', distinct=True)
        ).order_by('-placed_at')
        return [
            {
                'id': order.id,
                'customer': order.customer.username,
                'status': order.status,
                'items_count': order.items_count,
                'total_amount': order.total_amount,
                'placed_at': order.placed_at,
            }
            for order in orders
        ]


class ProductRatingsExportView(CSVExportView):
    """
    Endpoint:
        GET /api/exports/product-ratings/

    Columns follow the analytics rows; the rating breakdown is written as a JSON cell.
    """
    base_filename = 'product_ratings'

    def get_records(self):
        products = Product.objects.all()
        if not self.request.user.is_staff:
            products = products.filter(seller=self.request.user)
        return product_rating_rows(products)


class VendorPerformanceExportView(CSVExportView):
    """
    Endpoint:
        GET /api/exports/vendor-performance/
    """
    permission_classes = [IsAdminUser]
    base_filename = 'vendor_performance'

    def get_records(self):
        return vendor_rating_rows()
