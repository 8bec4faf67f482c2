"""
Review analytics.

Builds the rows behind the admin and seller dashboards. Every figure is derived from the
non-deleted reviews at request time; nothing here is stored. The same rows feed the JSON
analytics endpoints and the CSV exports.
"""
import logging
from collections import defaultdict
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.contrib.auth.models import User
from django.db.models import Avg, Count, Sum
from django.utils import timezone

from orders_app.models import OrderItem
from products_app.models import Product
from profile_app.models import Profile
from reviews_app.aggregation import (
    aggregate_queryset, aggregate_reviews, round_rating, visible_reviews,
)
from reviews_app.eligibility import ReviewPolicy
from reviews_app.models import Review

logger = logging.getLogger(__name__)

# Length of each window compared by the store trend.
TREND_WINDOW = timedelta(days=30)

# How many of the newest reviews are attached to each product row.
RECENT_REVIEWS_PER_PRODUCT = 3

PRODUCT_SORTS = ('reviews', 'rating-high', 'rating-low', 'recent')

STORE_REVIEW_FILTERS = ('all', 'positive', 'negative', 'awaiting-response', 'responded')

INSIGHT_PERIODS = {
    '1month': timedelta(days=30),
    '3months': timedelta(days=91),
    '6months': timedelta(days=182),
    '1year': timedelta(days=365),
}

# Products averaging below this many stars are listed as low rated.
LOW_RATING_THRESHOLD = 3

INSIGHT_PRODUCT_LIMIT = 5

REVIEW_REQUEST_LIMIT = 50


def one_decimal(value) -> float:
    return float(Decimal(str(value)).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP))


def percentage(part: int, whole: int) -> int:
    """`part` as a whole-number percentage of `whole`, 0 when `whole` is 0."""
    if not whole:
        return 0
    return int((Decimal(part) * 100 / Decimal(whole)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def _reviews_by(key, queryset=None):
    """Groups the rating fields of visible reviews by `key` (e.g. 'product_id')."""
    grouped = defaultdict(list)
    rows = visible_reviews(queryset).values(key, 'rating', 'is_verified_purchase')
    for row in rows:
        grouped[row[key]].append(row)
    return grouped


def product_rating_rows(products=None):
    """
    One row per product with its rating aggregate.

    Args:
        products (QuerySet, optional): Restricts the rows, e.g. to one seller's products.
            Defaults to every product.

    Returns:
        list[dict]: `{productId, productName, sellerId, category, avgRating, totalReviews,
        ratingBreakdown, verifiedPurchases}` in product id order.
    """
    if products is None:
        products = Product.objects.all()
    products = products.order_by('id')
    grouped = _reviews_by('product_id', Review.objects.filter(product__in=products))

    rows = []
    for product in products:
        row = {
            'productId': product.id,
            'productName': product.title,
            'sellerId': product.seller_id,
            'category': product.category,
        }
        row.update(aggregate_reviews(grouped.get(product.id, [])).as_dict())
        rows.append(row)
    return rows


def vendor_rating_rows(sellers=None):
    """
    One row per seller with the aggregate across all of the seller's products.

    Returns:
        list[dict]: `{sellerId, sellerName, productCount, avgRating, totalReviews,
        ratingBreakdown, verifiedPurchases}` in seller id order.
    """
    if sellers is None:
        sellers = User.objects.filter(profile__type=Profile.UserType.SELLER)
    sellers = sellers.annotate(product_count=Count('products', distinct=True)).order_by('id')
    grouped = _reviews_by('product__seller_id')

    rows = []
    for seller in sellers:
        row = {
            'sellerId': seller.id,
            'sellerName': seller.username,
            'productCount': seller.product_count,
        }
        row.update(aggregate_reviews(grouped.get(seller.id, [])).as_dict())
        rows.append(row)
    return rows


def general_review_stats():
    """Platform-wide aggregate plus the number of reviews in every status, deleted included."""
    counts = dict(
        Review.objects.order_by().values_list('status').annotate(count=Count('id'))
    )
    data = aggregate_queryset().as_dict()
    data['statusCounts'] = {value: counts.get(value, 0) for value in Review.Status.values}
    return data


def _window_average(queryset, start, end=None):
    queryset = queryset.filter(created_at__gte=start)
    if end is not None:
        queryset = queryset.filter(created_at__lt=end)
    value = queryset.aggregate(
        avg=Avg('rating')
    )['avg']
    return value or 0


def store_review_stats(seller, now=None):
    """
    Dashboard figures for one seller's store.

    On top of the rating aggregate this reports how many reviews the seller answered, the
    response and positive (4 stars and more) rates as whole percentages, and `recentTrend`:
    the average rating of the last 30 days minus the average of the 30 days before, where an
    empty window averages to 0.
    """
    now = now or timezone.now()
    reviews = visible_reviews(Review.objects.filter(product__seller=seller))
    aggregate = aggregate_queryset(reviews)
    total = aggregate.total_reviews

    responded = reviews.exclude(seller_response='').count()
    positive = reviews.filter(rating__gte=4).count()

    recent = _window_average(reviews, now - TREND_WINDOW)
    previous = _window_average(reviews, now - 2 * TREND_WINDOW, now - TREND_WINDOW)

    data = aggregate.as_dict()
    data.update({
        'respondedReviews': responded,
        'responseRate': percentage(responded, total),
        'positiveRate': percentage(positive, total),
        'recentTrend': one_decimal(recent - previous),
    })
    return data


def _recent_review_row(review):
    return {
        'id': review.id,
        'rating': review.rating,
        'title': review.title,
        'comment': review.comment,
        'reviewerName': review.reviewer.username,
        'createdAt': review.created_at,
    }


def seller_product_reviews(seller, sort='reviews'):
    """
    Per-product review overview for a seller, each row with its newest reviews.

    Sorting:
        - 'reviews' (default): most reviewed first.
        - 'rating-high' / 'rating-low': by average rating.
        - 'recent': by the date of the newest review; products without reviews last.

    Raises:
        ValueError: For an unknown sort key.
    """
    if sort not in PRODUCT_SORTS:
        raise ValueError(f"Unknown sort '{sort}'. Use one of: {', '.join(PRODUCT_SORTS)}")

    products = Product.objects.filter(seller=seller)
    rows = product_rating_rows(products)

    newest = defaultdict(list)
    reviews = visible_reviews(Review.objects.filter(product__in=products)).select_related(
        'reviewer'
    ).order_by('-created_at')
    for review in reviews:
        if len(newest[review.product_id]) < RECENT_REVIEWS_PER_PRODUCT:
            newest[review.product_id].append(_recent_review_row(review))

    for row in rows:
        row['recentReviews'] = newest.get(row['productId'], [])

    if sort == 'rating-high':
        rows.sort(key=lambda row: row['avgRating'], reverse=True)
    elif sort == 'rating-low':
        rows.sort(key=lambda row: row['avgRating'])
    elif sort == 'recent':
        reviewed = [row for row in rows if row['recentReviews']]
        unreviewed = [row for row in rows if not row['recentReviews']]
        reviewed.sort(key=lambda row: row['recentReviews'][0]['createdAt'], reverse=True)
        rows = reviewed + unreviewed
    else:
        rows.sort(key=lambda row: row['totalReviews'], reverse=True)

    logger.debug("Built %d product review rows for seller %s (sort=%s)", len(rows), seller.pk, sort)
    return rows


def _review_row(review):
    """A seller-facing review row, as listed in the store reviews and the response queue."""
    return {
        'id': review.id,
        'productId': review.product_id,
        'productName': review.product.title,
        'reviewerName': review.reviewer.username,
        'rating': review.rating,
        'title': review.title,
        'comment': review.comment,
        'status': review.status,
        'isVerifiedPurchase': review.is_verified_purchase,
        'sellerResponse': review.seller_response or None,
        'respondedAt': review.responded_at,
        'createdAt': review.created_at,
    }


def _seller_reviews_queryset(seller):
    return visible_reviews(Review.objects.filter(product__seller=seller)).select_related(
        'reviewer', 'product'
    )


def seller_reviews(seller, review_filter='all'):
    """
    The reviews on a seller's products, newest first.

    Filters:
        - 'all' (default): every non-deleted review.
        - 'positive': 4 stars and more.
        - 'negative': 2 stars and less.
        - 'awaiting-response': reviews the seller has not answered yet.
        - 'responded': reviews the seller has answered.

    Raises:
        ValueError: For an unknown filter.
    """
    if review_filter not in STORE_REVIEW_FILTERS:
        raise ValueError(
            f"Unknown filter '{review_filter}'. Use one of: {', '.join(STORE_REVIEW_FILTERS)}"
        )

    reviews = _seller_reviews_queryset(seller)
    if review_filter == 'positive':
        reviews = reviews.filter(rating__gte=4)
    elif review_filter == 'negative':
        reviews = reviews.filter(rating__lte=2)
    elif review_filter == 'awaiting-response':
        reviews = reviews.filter(seller_response='')
    elif review_filter == 'responded':
        reviews = reviews.exclude(seller_response='')

    return [_review_row(review) for review in reviews.order_by('-created_at', '-id')]


def response_queue(seller, now=None):
    """
    Unanswered reviews on a seller's products, oldest first, each with the number of whole days
    it has been waiting.
    """
    now = now or timezone.now()
    reviews = _seller_reviews_queryset(seller).filter(seller_response='')
    rows = []
    for review in reviews.order_by('created_at', 'id'):
        row = _review_row(review)
        row['daysWaiting'] = (now - review.created_at).days
        rows.append(row)
    return rows


def review_requests(seller, policy=None, now=None):
    """
    Completed purchases of a seller's products that the customer has not reviewed yet.

    Each (customer, product) pair counts once, represented by its most recent completed order.
    A purchase counts as reviewed while the customer holds a non-deleted review for the product.

    Returns:
        dict: `orders`, the open requests newest first (at most `REVIEW_REQUEST_LIMIT`), and
        `stats` with `requestsSent` (completed purchases), `reviewsReceived` (those already
        reviewed) and `conversionRate` (received as a whole percentage of sent).
    """
    policy = policy or ReviewPolicy.from_settings()
    now = now or timezone.now()

    lines = OrderItem.objects.filter(
        seller=seller, order__status__in=policy.completed_order_statuses
    ).select_related('order__customer', 'product').order_by('-order__updated_at', '-id')

    reviewed = set(
        visible_reviews(Review.objects.filter(product__seller=seller)).values_list(
            'reviewer_id', 'product_id'
        )
    )

    seen = set()
    pending = []
    received = 0
    for line in lines:
        key = (line.order.customer_id, line.product_id)
        if key in seen:
            continue
        seen.add(key)
        if key in reviewed:
            received += 1
            continue
        pending.append({
            'orderId': line.order_id,
            'productId': line.product_id,
            'productName': line.name or line.product.title,
            'customerId': line.order.customer_id,
            'customerName': line.order.customer.username,
            'completedAt': line.order.updated_at,
            'daysSinceCompletion': (now - line.order.updated_at).days,
        })

    logger.debug(
        "Seller %s has %d open review requests out of %d purchases",
        seller.pk, len(pending), len(seen)
    )
    return {
        'orders': pending[:REVIEW_REQUEST_LIMIT],
        'stats': {
            'requestsSent': len(seen),
            'reviewsReceived': received,
            'conversionRate': percentage(received, len(seen)),
        },
    }


def _product_summary(row):
    return {
        'productId': row['productId'],
        'productName': row['productName'],
        'category': row['category'],
        'avgRating': row['avgRating'],
        'totalReviews': row['totalReviews'],
    }


def rating_insights(seller, period='6months', now=None):
    """
    Rating insights for a seller over a period ('1month', '3months', '6months' or '1year').

    `totalReviews`, `fiveStarRate` and `monthlyTrend` cover the period only. `currentRating`,
    the product lists and the category ratings cover all of the seller's non-deleted reviews.
    `ratingChange` compares the last 30 days with the 30 days before, like the store trend.

    Raises:
        ValueError: For an unknown period.
    """
    if period not in INSIGHT_PERIODS:
        raise ValueError(f"Unknown period '{period}'. Use one of: {', '.join(INSIGHT_PERIODS)}")

    now = now or timezone.now()
    reviews = visible_reviews(Review.objects.filter(product__seller=seller))
    period_reviews = reviews.filter(created_at__gte=now - INSIGHT_PERIODS[period])

    monthly = defaultdict(list)
    rows = period_reviews.order_by('created_at').values_list('created_at', 'rating')
    for created_at, rating in rows:
        monthly[created_at.strftime('%Y-%m')].append(rating)
    monthly_trend = [
        {
            'month': month,
            'avgRating': round_rating(sum(ratings), len(ratings)),
            'count': len(ratings),
        }
        for month, ratings in sorted(monthly.items())
    ]

    period_count = sum(entry['count'] for entry in monthly_trend)
    five_star = period_reviews.filter(rating=5).count()

    recent = _window_average(reviews, now - TREND_WINDOW)
    previous = _window_average(reviews, now - 2 * TREND_WINDOW, now - TREND_WINDOW)

    reviewed = [
        row for row in product_rating_rows(Product.objects.filter(seller=seller))
        if row['totalReviews']
    ]
    top_rated = sorted(reviewed, key=lambda row: row['avgRating'], reverse=True)
    low_rated = sorted(
        (row for row in reviewed if row['avgRating'] < LOW_RATING_THRESHOLD),
        key=lambda row: row['avgRating']
    )

    categories = reviews.exclude(product__category='').order_by().values(
        'product__category'
    ).annotate(total=Sum('rating'), count=Count('id'))
    category_ratings = sorted(
        (
            {
                'category': row['product__category'],
                'avgRating': round_rating(row['total'], row['count']),
                'totalReviews': row['count'],
            }
            for row in categories
        ),
        key=lambda row: (-row['avgRating'], row['category'])
    )

    return {
        'period': period,
        'currentRating': aggregate_queryset(reviews).avg_rating,
        'ratingChange': one_decimal(recent - previous),
        'totalReviews': period_count,
        'fiveStarRate': percentage(five_star, period_count),
        'monthlyTrend': monthly_trend,
        'topRatedProducts': [_product_summary(row) for row in top_rated[:INSIGHT_PRODUCT_LIMIT]],
        'lowRatedProducts': [_product_summary(row) for row in low_rated[:INSIGHT_PRODUCT_LIMIT]],
        'categoryRatings': category_ratings,
    }
