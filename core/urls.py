"""
URL configuration for the marketplace backend.

Every app exposes its endpoints from its own `api/urls.py`; they are all mounted
under the `/api/` prefix.
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('products_app.api.urls')),
    path('api/', include('orders_app.api.urls')),
    path('api/', include('reviews_app.api.urls')),
    path('api/', include('analytics_app.api.urls')),
    path('api/', include('exports_app.api.urls')),
]
