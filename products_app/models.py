from django.db import models
from django.conf import settings


class Product(models.Model):
    """
    Represents an item listed on the marketplace by a seller.

    Products are the subject of customer reviews. Their rating figures are never stored on the
    product itself; they are derived from the related reviews whenever they are requested.

    Attributes:
        seller (ForeignKey): The user who lists and sells this product.
        title (CharField): The customer-facing name of the product.
        category (CharField): A free-text category used for grouping in analytics.
        description (TextField): A detailed description of the product.
        price (DecimalField): The current list price.
        created_at (DateTimeField): Timestamp of when the product was created.
        updated_at (DateTimeField): Timestamp of the last update.
    """
    # The seller who owns this product.
    # on_delete=CASCADE means if the seller is deleted, their products are deleted too.
    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="products",
        help_text="The seller who lists this product."
    )

    title = models.CharField(max_length=255)
    category = models.CharField(max_length=100, blank=True, default='')
    description = models.TextField(blank=True)

    # DecimalField avoids floating-point inaccuracies with currency.
    price = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        # Default ordering for querysets: most recently updated products first.
        ordering = ['-updated_at']
        verbose_name = "Product"
        verbose_name_plural = "Products"

    def __str__(self):
        """Returns the string representation of the Product model."""
        return self.title
