from django.urls import path, include
from .views import (
    ReviewViewSet,
    ProductRatingSummaryView,
    SellerRatingSummaryView,
    ReviewEligibilityView,
)
from rest_framework.routers import DefaultRouter

router = DefaultRouter()
router.register(r'reviews', ReviewViewSet, basename='review')

urlpatterns = [
    path('', include(router.urls)),
    path('products/<int:product_id>/rating-summary/', ProductRatingSummaryView.as_view(),
         name='product-rating-summary'),
    path('products/<int:product_id>/review-eligibility/', ReviewEligibilityView.as_view(),
         name='review-eligibility'),
    path('sellers/<int:seller_id>/rating-summary/', SellerRatingSummaryView.as_view(),
         name='seller-rating-summary'),
]
