from django.contrib import admin
from .models import Review


class ReviewAdmin(admin.ModelAdmin):
    list_display = ('id', 'product', 'reviewer', 'rating', 'status',
                    'is_verified_purchase', 'created_at')
    list_filter = ('status', 'is_verified_purchase', 'rating')
    search_fields = ('title', 'comment', 'reviewer__username', 'product__title')
    # The verified-purchase flag is fixed when the review is written.
    readonly_fields = ('is_verified_purchase', 'created_at', 'updated_at')


admin.site.register(Review, ReviewAdmin)
