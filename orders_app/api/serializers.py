from rest_framework import serializers
from ..models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    """Serializes a single order line."""

    class Meta:
        model = OrderItem
        fields = ['id', 'product', 'seller', 'name', 'quantity', 'price']


class OrderSerializer(serializers.ModelSerializer):
    """
    Read-only representation of an Order with its lines.

    Timestamps are formatted to a consistent ISO 8601 format.
    """
    placed_at = serializers.DateTimeField(format="%Y-%m-%dT%H:%M:%SZ", read_only=True)
    updated_at = serializers.DateTimeField(format="%Y-%m-%dT%H:%M:%SZ", read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            'id',
            'customer',
            'status',
            'total_amount',
            'items',
            'placed_at',
            'updated_at',
        ]
        read_only_fields = fields
