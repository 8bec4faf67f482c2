from django.db import models
from django.conf import settings


class Order(models.Model):
    """
    A customer's purchase, as recorded by the checkout service.

    Orders are read-only from the point of view of this API. They matter here because a completed
    order line is what qualifies a review as a "verified purchase".

    Attributes:
        customer (ForeignKey): The user who placed the order.
        status (CharField): The current state of the order.
        total_amount (DecimalField): The total charged for the order.
        placed_at (DateTimeField): Timestamp of when the order was placed.
        updated_at (DateTimeField): Timestamp of the last update.
    """
    # --- Enumerations ---
    class OrderStatus(models.TextChoices):
        """
        Provides a controlled set of choices for the status field.

        Each choice is a tuple: (`database_value`, `human_readable_label`).
        """
        PENDING = 'pending', 'Pending'
        PROCESSING = 'processing', 'Processing'
        SHIPPED = 'shipped', 'Shipped'
        DELIVERED = 'delivered', 'Delivered'
        COMPLETED = 'completed', 'Completed'
        CANCELLED = 'cancelled', 'Cancelled'

    # Orders that are still moving through fulfilment.
    OPEN_STATUSES = (OrderStatus.PENDING, OrderStatus.PROCESSING, OrderStatus.SHIPPED)

    # --- Relationships ---
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        # e.g., `user.orders.all()` will get all orders placed by a user.
        related_name='orders',
        on_delete=models.CASCADE,
        help_text="The user who placed the order."
    )

    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
        help_text="The current status of the order."
    )
    total_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=0,
        help_text="The total price of the order."
    )

    # --- Timestamps ---
    placed_at = models.DateTimeField(
        auto_now_add=True,
        help_text="Timestamp for when the order was placed."
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="Timestamp for when the record was last updated."
    )

    class Meta:
        ordering = ['-placed_at']
        verbose_name = "Order"
        verbose_name_plural = "Orders"

    def __str__(self):
        return f"Order {self.id} ({self.status})"


class OrderItem(models.Model):
    """
    A single product line of an order.

    The seller is copied onto the line at checkout time so that a multi-vendor order can be split
    per seller without joining through the product.
    """
    order = models.ForeignKey(Order, related_name='items', on_delete=models.CASCADE)
    product = models.ForeignKey(
        'products_app.Product',
        related_name='order_items',
        on_delete=models.CASCADE
    )
    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name='sold_items',
        on_delete=models.CASCADE
    )
    name = models.CharField(max_length=255, blank=True, default='')
    quantity = models.PositiveIntegerField(default=1)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    class Meta:
        verbose_name = "Order item"
        verbose_name_plural = "Order items"

    def __str__(self):
        return f"{self.quantity} x {self.name or self.product_id} (order {self.order_id})"
