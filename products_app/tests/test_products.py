from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase
from django.contrib.auth.models import User

from ..models import Product
from reviews_app.models import Review


class ProductAPITests(APITestCase):
    """
    Test suite for the public product catalogue at `/api/products/`.

    Two sellers list three products between them. The rating annotations are checked against
    reviews in several statuses, including a deleted one that must be ignored.
    """

    def setUp(self):
        self.seller1 = User.objects.create_user(username='seller1', password='password123')
        self.seller2 = User.objects.create_user(username='seller2', password='password123')
        customers = [
            User.objects.create_user(username=f'customer{i}', password='password123')
            for i in range(3)
        ]

        self.lamp = Product.objects.create(
            seller=self.seller1, title='Desk lamp', category='Lighting',
            description='LED lamp with dimmer', price='25.00'
        )
        self.rug = Product.objects.create(
            seller=self.seller1, title='Wool rug', category='Textiles', price='150.00'
        )
        self.kettle = Product.objects.create(
            seller=self.seller2, title='Kettle', category='Kitchen', price='40.00'
        )

        Review.objects.create(product=self.lamp, reviewer=customers[0], rating=5,
                              status=Review.Status.APPROVED)
        Review.objects.create(product=self.lamp, reviewer=customers[1], rating=4,
                              status=Review.Status.PENDING)
        Review.objects.create(product=self.lamp, reviewer=customers[2], rating=1,
                              status=Review.Status.DELETED)
        Review.objects.create(product=self.kettle, reviewer=customers[0], rating=2,
                              status=Review.Status.APPROVED)

        self.url = reverse('product-list')

    def by_id(self, response):
        return {item['id']: item for item in response.data['results']}

    def test_list_is_public_and_paginated(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 3)
        self.assertIn('results', response.data)

    def test_page_size_parameter(self):
        response = self.client.get(self.url, {'page_size': 2})

        self.assertEqual(len(response.data['results']), 2)
        self.assertIsNotNone(response.data['next'])

    def test_rating_annotations_ignore_deleted_reviews(self):
        products = self.by_id(self.client.get(self.url))

        self.assertEqual(products[self.lamp.id]['average_rating'], 4.5)
        self.assertEqual(products[self.lamp.id]['review_count'], 2)
        self.assertEqual(products[self.rug.id]['average_rating'], 0)
        self.assertEqual(products[self.rug.id]['review_count'], 0)

    def test_filter_by_seller(self):
        response = self.client.get(self.url, {'seller_id': self.seller2.id})

        self.assertEqual(set(self.by_id(response)), {self.kettle.id})

    def test_filter_by_category_is_case_insensitive(self):
        response = self.client.get(self.url, {'category': 'lighting'})

        self.assertEqual(set(self.by_id(response)), {self.lamp.id})

    def test_filter_by_min_rating(self):
        response = self.client.get(self.url, {'min_rating': 3})

        self.assertEqual(set(self.by_id(response)), {self.lamp.id})

    def test_search_in_description(self):
        response = self.client.get(self.url, {'search': 'dimmer'})

        self.assertEqual(set(self.by_id(response)), {self.lamp.id})

    def test_ordering_by_price(self):
        response = self.client.get(self.url, {'ordering': 'price'})
        titles = [item['title'] for item in response.data['results']]

        self.assertEqual(titles, ['Desk lamp', 'Kettle', 'Wool rug'])

    def test_retrieve_single_product(self):
        url = reverse('product-detail', kwargs={'pk': self.kettle.pk})
        response = self.client.get(url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['seller_username'], 'seller2')
        self.assertEqual(response.data['average_rating'], 2.0)

    def test_average_rating_rounds_half_up_like_rating_summary(self):
        # The mean is 4.25; round() would give 4.2 (half to even).
        for index, rating in enumerate([4, 4, 4, 5]):
            reviewer = User.objects.create_user(username=f'rug_buyer{index}', password='password123')
            Review.objects.create(product=self.rug, reviewer=reviewer, rating=rating,
                                  status=Review.Status.APPROVED)

        detail = self.client.get(reverse('product-detail', kwargs={'pk': self.rug.pk}))
        summary = self.client.get(
            reverse('product-rating-summary', kwargs={'product_id': self.rug.pk})
        )

        self.assertEqual(detail.data['average_rating'], 4.3)
        self.assertEqual(summary.data['avgRating'], 4.3)
        self.assertEqual(self.by_id(self.client.get(self.url))[self.rug.id]['average_rating'], 4.3)

    def test_unknown_product_returns_404(self):
        url = reverse('product-detail', kwargs={'pk': 9999})
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
