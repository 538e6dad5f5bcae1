"""
Ratings Service

Aggregate rating statistics for a recipe.

Statistics are computed from the reviews table on every call rather than
stored on the recipe, so they can never drift from the reviews they
summarize. A single GROUP BY gives the distribution; the total and the
average are derived from it.
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.review import RATING_MAX, RATING_MIN, Review


def empty_distribution() -> dict[int, int]:
    """Distribution with every rating value present and zeroed."""
    return {rating: 0 for rating in range(RATING_MIN, RATING_MAX + 1)}


@dataclass
class RatingStats:
    """Rating summary for one recipe."""

    average_rating: float = 0.0
    total_reviews: int = 0
    distribution: dict[int, int] = field(default_factory=empty_distribution)


def round_average(total_points: int, count: int) -> float:
    """
    Mean rounded to one decimal place, halves rounded up.

    Decimal arithmetic avoids binary float artifacts: 17 / 4 = 4.25 must
    become 4.3, which round(4.25, 1) does not guarantee.

    Example:
        >>> round_average(17, 4)
        4.3
    """
    mean = Decimal(total_points) / Decimal(count)
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def get_recipe_rating_stats(db: Session, recipe_id: str) -> RatingStats:
    """
    Compute rating statistics for a recipe.

    A recipe with no reviews gets an average of 0 and an all-zero
    distribution rather than an error.

    Args:
        db: Database session
        recipe_id: Recipe to summarize

    Returns:
        RatingStats with average, total and per-rating counts
    """
    stmt = (
        select(Review.rating, func.count(Review.id))
        .where(Review.recipe_id == recipe_id)
        .group_by(Review.rating)
    )

    distribution = empty_distribution()
    for rating, count in db.execute(stmt).all():
        distribution[rating] = count

    total_reviews = sum(distribution.values())
    if total_reviews == 0:
        return RatingStats()

    total_points = sum(rating * count for rating, count in distribution.items())

    return RatingStats(
        average_rating=round_average(total_points, total_reviews),
        total_reviews=total_reviews,
        distribution=distribution,
    )
