from django.contrib import admin
from .models import Product


class ProductAdmin(admin.ModelAdmin):
    list_display = ('id', 'title', 'seller', 'category', 'price', 'updated_at')
    list_filter = ('category',)
    search_fields = ('title', 'description', 'seller__username')


admin.site.register(Product, ProductAdmin)
