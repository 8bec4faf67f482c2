"""
Rating aggregation.

Turns a set of reviews into the figures every review page shows: the average rating, the number
of reviews, the per-star histogram and the number of verified purchases. The pure function
`aggregate_reviews` works on any iterable of review-like objects; `aggregate_queryset` produces
the same result with grouped database queries.
"""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable

from django.db.models import Count, Q

from .models import Review

STAR_VALUES = (1, 2, 3, 4, 5)


def empty_breakdown() -> Dict[int, int]:
    return {star: 0 for star in STAR_VALUES}


def round_rating(total: int, count: int) -> float:
    """
    Mean of `total` over `count` rounded half-up to one decimal place.

    Returns 0 when there is nothing to average.
    """
    if not count:
        return 0
    return round_average(Decimal(total) / Decimal(count))


def round_average(value) -> float:
    """
    An already computed mean (float, Decimal or None, e.g. from `Avg`) rounded half-up to one
    decimal place. None gives 0.
    """
    if value is None:
        return 0
    # Decimal(str()) reads the float's shortest repr: 4.35 rather than 4.3499999...
    mean = value if isinstance(value, Decimal) else Decimal(str(value))
    return float(mean.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class RatingAggregate:
    """
    Read-only rating figures for a product, a seller or the whole platform.

    `sum(rating_breakdown.values()) == total_reviews` always holds, and `avg_rating` is 0 when
    there are no reviews.
    """
    avg_rating: float = 0
    total_reviews: int = 0
    rating_breakdown: Dict[int, int] = field(default_factory=empty_breakdown)
    verified_purchases: int = 0

    @classmethod
    def from_breakdown(cls, breakdown: Dict[int, int], verified_purchases: int = 0):
        """Builds the aggregate from a star histogram; missing stars count as 0."""
        full = empty_breakdown()
        for star, count in breakdown.items():
            star = int(star)
            if star not in full:
                raise ValueError(f"Invalid rating: {star}. Must be 1-5")
            full[star] += count
        total = sum(full.values())
        weighted = sum(star * count for star, count in full.items())
        return cls(
            avg_rating=round_rating(weighted, total),
            total_reviews=total,
            rating_breakdown=full,
            verified_purchases=verified_purchases,
        )

    def as_dict(self):
        """The JSON shape consumed by the review pages."""
        return {
            'avgRating': self.avg_rating,
            'totalReviews': self.total_reviews,
            'ratingBreakdown': {str(star): self.rating_breakdown[star] for star in STAR_VALUES},
            'verifiedPurchases': self.verified_purchases,
        }


def _read(review, name):
    if isinstance(review, dict):
        return review.get(name)
    return getattr(review, name, None)


def aggregate_reviews(reviews: Iterable) -> RatingAggregate:
    """
    Aggregates an in-memory collection of reviews.

    Each item may be a model instance or a mapping exposing `rating` and
    `is_verified_purchase`. The caller decides which reviews are in scope; deleted reviews
    should already be filtered out.

    Raises:
        ValueError: If a rating is outside 1..5 or is a boolean.
    """
    breakdown = empty_breakdown()
    verified = 0
    for review in reviews:
        rating = _read(review, 'rating')
        # bool is an int subclass; True would otherwise count as one star.
        if isinstance(rating, bool) or rating not in breakdown:
            raise ValueError(f"Invalid rating: {rating}. Must be 1-5")
        breakdown[rating] += 1
        if _read(review, 'is_verified_purchase'):
            verified += 1
    return RatingAggregate.from_breakdown(breakdown, verified_purchases=verified)


def visible_reviews(queryset=None):
    """Reviews that count towards aggregates: everything except deleted ones."""
    if queryset is None:
        queryset = Review.objects.all()
    return queryset.exclude(status=Review.Status.DELETED)


def aggregate_queryset(queryset=None) -> RatingAggregate:
    """
    Aggregates a Review queryset in the database.

    Two queries are issued: one grouped by rating for the histogram and one count of verified
    purchases. Deleted reviews are always excluded.
    """
    queryset = visible_reviews(queryset)
    rows = queryset.order_by().values('rating').annotate(count=Count('id'))
    breakdown = {row['rating']: row['count'] for row in rows}
    verified = queryset.aggregate(
        verified=Count('id', filter=Q(is_verified_purchase=True))
    )['verified']
    return RatingAggregate.from_breakdown(breakdown, verified_purchases=verified or 0)
