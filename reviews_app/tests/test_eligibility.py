from django.contrib.auth.models import AnonymousUser, User
from django.test import TestCase, override_settings

from ..eligibility import (
    ALREADY_REVIEWED,
    LOGIN_REQUIRED,
    NO_PURCHASE,
    OWN_PRODUCT,
    ReviewPolicy,
    check_eligibility,
    has_completed_purchase,
)
from ..models import InvalidStatusTransition, Review
from orders_app.models import Order, OrderItem
from products_app.models import Product


class EligibilityTests(TestCase):
    """
    Tests for `check_eligibility`.

    The scenario has one seller with two products and one customer. Orders are created per
    test so that every rule can be triggered in isolation.
    """

    def setUp(self):
        self.seller = User.objects.create_user(username='seller', password='password123')
        self.customer = User.objects.create_user(username='customer', password='password123')
        self.product = Product.objects.create(seller=self.seller, title='Blender', price='70.00')
        self.other_product = Product.objects.create(seller=self.seller, title='Mixer', price='90.00')
        self.policy = ReviewPolicy()

    def order(self, product, status):
        order = Order.objects.create(customer=self.customer, status=status)
        OrderItem.objects.create(
            order=order, product=product, seller=self.seller,
            name=product.title, quantity=1, price=product.price
        )
        return order

    def test_anonymous_user_must_login(self):
        result = check_eligibility(AnonymousUser(), self.product, self.policy)

        self.assertFalse(result.can_review)
        self.assertEqual(result.reason, LOGIN_REQUIRED)
        self.assertFalse(result.is_verified_purchase)

    def test_seller_cannot_review_own_product(self):
        result = check_eligibility(self.seller, self.product, self.policy)

        self.assertFalse(result.can_review)
        self.assertEqual(result.reason, OWN_PRODUCT)

    def test_existing_review_blocks_new_one(self):
        Review.objects.create(product=self.product, reviewer=self.customer, rating=4)
        result = check_eligibility(self.customer, self.product, self.policy)

        self.assertFalse(result.can_review)
        self.assertEqual(result.reason, ALREADY_REVIEWED)

    def test_deleted_review_does_not_block(self):
        Review.objects.create(
            product=self.product, reviewer=self.customer, rating=4, status=Review.Status.DELETED
        )
        result = check_eligibility(self.customer, self.product, self.policy)

        self.assertTrue(result.can_review)

    def test_completed_order_makes_purchase_verified(self):
        self.order(self.product, Order.OrderStatus.COMPLETED)
        result = check_eligibility(self.customer, self.product, self.policy)

        self.assertTrue(result.can_review)
        self.assertTrue(result.is_verified_purchase)
        self.assertEqual(result.as_dict(), {'canReview': True, 'isVerifiedPurchase': True})

    def test_open_order_is_not_a_completed_purchase(self):
        self.order(self.product, Order.OrderStatus.SHIPPED)
        self.assertFalse(has_completed_purchase(self.customer, self.product, self.policy))

    def test_order_for_other_product_does_not_count(self):
        self.order(self.other_product, Order.OrderStatus.DELIVERED)
        self.assertFalse(has_completed_purchase(self.customer, self.product, self.policy))

    def test_purchase_required_without_order(self):
        policy = ReviewPolicy(require_verified_purchase=True)
        result = check_eligibility(self.customer, self.product, policy)

        self.assertFalse(result.can_review)
        self.assertEqual(result.reason, NO_PURCHASE)

    def test_purchase_required_with_order(self):
        self.order(self.product, Order.OrderStatus.DELIVERED)
        policy = ReviewPolicy(require_verified_purchase=True)

        self.assertTrue(check_eligibility(self.customer, self.product, policy).can_review)

    def test_verified_flag_survives_order_cancellation(self):
        order = self.order(self.product, Order.OrderStatus.DELIVERED)
        result = check_eligibility(self.customer, self.product, self.policy)
        review = Review.objects.create(
            product=self.product, reviewer=self.customer, rating=5,
            is_verified_purchase=result.is_verified_purchase
        )

        order.status = Order.OrderStatus.CANCELLED
        order.save()
        review.refresh_from_db()

        self.assertTrue(review.is_verified_purchase)

    @override_settings(REVIEWS={
        'AUTO_APPROVE': True,
        'REQUIRE_VERIFIED_PURCHASE': True,
        'COMPLETED_ORDER_STATUSES': ['completed'],
    })
    def test_policy_from_settings(self):
        policy = ReviewPolicy.from_settings()

        self.assertTrue(policy.auto_approve)
        self.assertTrue(policy.require_verified_purchase)
        self.assertEqual(policy.completed_order_statuses, ('completed',))
        self.assertEqual(policy.initial_status, Review.Status.APPROVED)


class ReviewStatusTransitionTests(TestCase):
    """Tests for the moderation state machine on `Review.transition_to`."""

    def setUp(self):
        seller = User.objects.create_user(username='seller', password='password123')
        customer = User.objects.create_user(username='customer', password='password123')
        product = Product.objects.create(seller=seller, title='Pan', price='25.00')
        self.review = Review.objects.create(product=product, reviewer=customer, rating=2)

    def test_pending_review_can_be_approved(self):
        self.review.transition_to(Review.Status.APPROVED)
        self.review.refresh_from_db()
        self.assertEqual(self.review.status, Review.Status.APPROVED)

    def test_reporting_stores_reason(self):
        self.review.transition_to(Review.Status.REPORTED, reason='Offensive language')
        self.review.refresh_from_db()

        self.assertEqual(self.review.status, Review.Status.REPORTED)
        self.assertEqual(self.review.report_reason, 'Offensive language')

    def test_reported_review_can_be_reinstated(self):
        self.review.transition_to(Review.Status.REPORTED)
        self.review.transition_to(Review.Status.APPROVED)
        self.assertEqual(self.review.status, Review.Status.APPROVED)

    def test_approved_review_cannot_be_rejected(self):
        self.review.transition_to(Review.Status.APPROVED)
        with self.assertRaises(InvalidStatusTransition):
            self.review.transition_to(Review.Status.REJECTED)
        self.assertEqual(self.review.status, Review.Status.APPROVED)

    def test_deleted_is_terminal(self):
        self.review.transition_to(Review.Status.DELETED)
        for target in (Review.Status.PENDING, Review.Status.APPROVED, Review.Status.REPORTED):
            self.assertFalse(self.review.can_transition_to(target))
        with self.assertRaises(InvalidStatusTransition):
            self.review.transition_to(Review.Status.APPROVED)
