from django.urls import path
from .views import (
    BaseInfoView,
    ReviewAnalyticsView,
    StoreReviewStatsView,
    StoreReviewListView,
    SellerProductReviewsView,
    ResponseQueueView,
    ReviewRequestsView,
    RatingInsightsView,
)

urlpatterns = [
    path('base-info/', BaseInfoView.as_view(), name='base-info'),
    path('analytics/reviews/', ReviewAnalyticsView.as_view(), name='review-analytics'),
    path('analytics/store-reviews/', StoreReviewStatsView.as_view(), name='store-reviews'),
    path('analytics/store-reviews/list/', StoreReviewListView.as_view(), name='store-review-list'),
    path('analytics/product-reviews/', SellerProductReviewsView.as_view(), name='product-reviews'),
    path('analytics/response-queue/', ResponseQueueView.as_view(), name='response-queue'),
    path('analytics/review-requests/', ReviewRequestsView.as_view(), name='review-requests'),
    path('analytics/rating-insights/', RatingInsightsView.as_view(), name='rating-insights'),
]
