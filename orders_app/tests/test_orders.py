from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase
from django.contrib.auth.models import User

from ..models import Order, OrderItem
from products_app.models import Product


# ====================================================================
# CLASS 1: Tests on an empty database
# ====================================================================
class OrderAPINoDataTests(APITestCase):
    """
    Tests for the Order API endpoints when the database contains no Order data.
    These tests ensure the API behaves correctly for new or empty systems.
    """

    def setUp(self):
        """Set up a single user for authentication purposes."""
        self.user = User.objects.create_user(username='testuser', password='password123')

    def test_unauthenticated_user_cannot_access_orders(self):
        """Ensures that unauthenticated users receive a 401 Unauthorized error."""
        url = reverse('order-list')
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_authenticated_user_gets_empty_list_from_db(self):
        """
        Ensures an authenticated user receives a 200 OK with an empty list if no orders exist.
        """
        url = reverse('order-list')
        self.client.force_authenticate(user=self.user)
        response = self.client.get(url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [])


# ====================================================================
# CLASS 2: Tests on a populated database
# ====================================================================
class OrderAPIWithDataTests(APITestCase):
    """
    Tests for the Order API endpoints with pre-existing orders.

    The scenario:
    - `seller1` sells a chair, `seller2` sells a table.
    - `customer1` has a delivered order with both items and a pending order for the chair.
    - `customer2` has a cancelled order for the table.
    """

    def setUp(self):
        self.seller1 = User.objects.create_user(username='seller1', password='password123')
        self.seller2 = User.objects.create_user(username='seller2', password='password123')
        self.customer1 = User.objects.create_user(username='customer1', password='password123')
        self.customer2 = User.objects.create_user(username='customer2', password='password123')
        self.staff = User.objects.create_user(
            username='admin', password='password123', is_staff=True
        )

        self.chair = Product.objects.create(seller=self.seller1, title='Chair', price='50.00')
        self.table = Product.objects.create(seller=self.seller2, title='Table', price='200.00')

        self.delivered = self.create_order(
            self.customer1, Order.OrderStatus.DELIVERED, [self.chair, self.table]
        )
        self.pending = self.create_order(self.customer1, Order.OrderStatus.PENDING, [self.chair])
        self.cancelled = self.create_order(
            self.customer2, Order.OrderStatus.CANCELLED, [self.table]
        )

    def create_order(self, customer, order_status, products):
        order = Order.objects.create(
            customer=customer,
            status=order_status,
            total_amount=sum(Decimal(product.price) for product in products),
        )
        for product in products:
            OrderItem.objects.create(
                order=order, product=product, seller=product.seller,
                name=product.title, quantity=1, price=product.price
            )
        return order

    def ids(self, response):
        return {item['id'] for item in response.data}

    def test_customer_sees_own_orders(self):
        self.client.force_authenticate(user=self.customer1)
        response = self.client.get(reverse('order-list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.ids(response), {self.delivered.id, self.pending.id})

    def test_seller_sees_orders_with_own_items(self):
        self.client.force_authenticate(user=self.seller2)
        response = self.client.get(reverse('order-list'))

        # The delivered order contains two lines but must only be listed once.
        self.assertEqual(len(response.data), 2)
        self.assertEqual(self.ids(response), {self.delivered.id, self.cancelled.id})

    def test_staff_sees_all_orders(self):
        self.client.force_authenticate(user=self.staff)
        response = self.client.get(reverse('order-list'))

        self.assertEqual(len(response.data), 3)

    def test_order_detail_contains_items(self):
        self.client.force_authenticate(user=self.customer1)
        url = reverse('order-detail', kwargs={'pk': self.delivered.pk})
        response = self.client.get(url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual({item['name'] for item in response.data['items']}, {'Chair', 'Table'})

    def test_other_customer_cannot_see_order(self):
        self.client.force_authenticate(user=self.customer2)
        url = reverse('order-detail', kwargs={'pk': self.delivered.pk})
        response = self.client.get(url)

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_orders_are_read_only(self):
        self.client.force_authenticate(user=self.customer1)
        response = self.client.post(reverse('order-list'), {'status': 'pending'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)

    def test_open_order_count(self):
        self.client.force_authenticate(user=self.customer1)
        url = reverse('order-count', kwargs={'seller_id': self.seller1.id})
        response = self.client.get(url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'order_count': 1})

    def test_completed_order_count(self):
        self.client.force_authenticate(user=self.customer1)
        url = reverse('completed-order-count', kwargs={'seller_id': self.seller2.id})
        response = self.client.get(url)

        # The cancelled order does not count.
        self.assertEqual(response.data, {'completed_order_count': 1})

    def test_order_count_for_unknown_user_returns_404(self):
        self.client.force_authenticate(user=self.customer1)
        url = reverse('order-count', kwargs={'seller_id': 9999})
        response = self.client.get(url)

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
