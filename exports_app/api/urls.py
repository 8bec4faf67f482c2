from django.urls import path
from .views import (
    ReviewExportView,
    OrderExportView,
    ProductRatingsExportView,
    VendorPerformanceExportView,
)

urlpatterns = [
    path('exports/reviews/', ReviewExportView.as_view(), name='export-reviews'),
    path('exports/orders/', OrderExportView.as_view(), name='export-orders'),
    path('exports/product-ratings/', ProductRatingsExportView.as_view(), name='export-product-ratings'),
    path('exports/vendor-performance/', VendorPerformanceExportView.as_view(),
         name='export-vendor-performance'),
]
