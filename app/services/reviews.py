"""
Review Service

Business logic for the recipe review lifecycle: create, read, list,
update, delete and flag.

Every function takes the request's database session as its first argument
and plain values for everything else, so routers, scripts and tests call
it the same way. Failed preconditions raise the exceptions in
app.exceptions; nothing here knows about HTTP.

Business Rules:
- A review can only be created for an existing, non-deleted recipe
- One review per user per recipe (pre-checked here, enforced by the
  uq_review_recipe_user constraint)
- Only the author may update or delete a review
- Updates are allowed for review_edit_window_days after creation
- Authors cannot flag their own review, and a review is flagged at most once
"""

import logging
from collections.abc import Mapping
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.config import get_settings
from app.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
)
from app.models.recipe import Recipe
from app.models.review import (
    COMMENT_MAX_LENGTH,
    FLAG_REASON_MAX_LENGTH,
    FLAG_REASON_MIN_LENGTH,
    RATING_MAX,
    RATING_MIN,
    Review,
)
from app.utils.dates import ensure_utc, utcnow

logger = logging.getLogger(__name__)

settings = get_settings()

UPDATABLE_FIELDS = frozenset({"rating", "comment"})


class ReviewSort(str, Enum):
    """Orderings supported by review listings."""

    NEWEST = "newest"
    OLDEST = "oldest"
    HIGHEST = "highest"
    LOWEST = "lowest"


# Secondary keys make ties deterministic across repeated calls
_SORT_ORDER = {
    ReviewSort.NEWEST: (Review.created_at.desc(), Review.id.desc()),
    ReviewSort.OLDEST: (Review.created_at.asc(), Review.id.asc()),
    ReviewSort.HIGHEST: (Review.rating.desc(), Review.created_at.desc(), Review.id.desc()),
    ReviewSort.LOWEST: (Review.rating.asc(), Review.created_at.desc(), Review.id.desc()),
}


# =============================================================================
# Validation Helpers
# =============================================================================


def _validate_rating(rating: Any) -> int:
    # bool is an int subclass; True must not pass as a 1-star rating
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidInputError("Rating must be an integer between 1 and 5")
    if not RATING_MIN <= rating <= RATING_MAX:
        raise InvalidInputError("Rating must be an integer between 1 and 5")
    return rating


def _validate_comment(comment: Any) -> str | None:
    if comment is None:
        return None
    if not isinstance(comment, str):
        raise InvalidInputError("Comment must be a string")
    comment = comment.strip()
    if len(comment) > COMMENT_MAX_LENGTH:
        raise InvalidInputError(
            f"Comment must be at most {COMMENT_MAX_LENGTH} characters"
        )
    return comment or None


def _validate_flag_reason(flag_reason: Any) -> str:
    if not isinstance(flag_reason, str):
        raise InvalidInputError("Flag reason is required")
    flag_reason = flag_reason.strip()
    if not FLAG_REASON_MIN_LENGTH <= len(flag_reason) <= FLAG_REASON_MAX_LENGTH:
        raise InvalidInputError(
            f"Flag reason must be between {FLAG_REASON_MIN_LENGTH} and "
            f"{FLAG_REASON_MAX_LENGTH} characters"
        )
    return flag_reason


def _validate_pagination(page: int, limit: int) -> None:
    if page < 1:
        raise InvalidInputError("Page must be at least 1")
    if not 1 <= limit <= settings.review_list_max_limit:
        raise InvalidInputError(
            f"Limit must be between 1 and {settings.review_list_max_limit}"
        )


def _parse_sort(sort: ReviewSort | str) -> ReviewSort:
    try:
        return ReviewSort(sort)
    except ValueError:
        valid = ", ".join(option.value for option in ReviewSort)
        raise InvalidInputError(f"Sort must be one of: {valid}") from None


# =============================================================================
# Query Helpers
# =============================================================================


def _select_with_author():
    """Select reviews with the author eagerly loaded for the response snapshot."""
    return select(Review).options(selectinload(Review.user))


def _get_review_or_raise(db: Session, review_id: str) -> Review:
    review = db.get(Review, review_id)
    if review is None:
        raise NotFoundError("Review not found")
    return review


def _load_review(db: Session, review_id: str) -> Review:
    stmt = _select_with_author().where(Review.id == review_id)
    return db.execute(stmt).scalar_one()


def _paginate(
    db: Session,
    criteria: list,
    order_by: tuple,
    page: int,
    limit: int,
) -> tuple[list[Review], int]:
    """
    Run the count and item queries for a listing.

    The two queries are not wrapped in a snapshot transaction; a review
    written between them can make total and items disagree by one.
    """
    count_stmt = select(func.count()).select_from(Review).where(*criteria)
    total = db.execute(count_stmt).scalar_one()

    stmt = (
        _select_with_author()
        .where(*criteria)
        .order_by(*order_by)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    items = list(db.execute(stmt).scalars().all())

    return items, total


def is_within_edit_window(review: Review, now: datetime | None = None) -> bool:
    """
    Check whether the review can still be edited by its author.

    The window is inclusive: a review exactly review_edit_window_days old
    can still be edited.
    """
    now = now or utcnow()
    elapsed = now - ensure_utc(review.created_at)
    return elapsed <= timedelta(days=settings.review_edit_window_days)


# =============================================================================
# Review Operations
# =============================================================================


def check_user_review_exists(db: Session, user_id: str, recipe_id: str) -> bool:
    """Return True if the user has already reviewed the recipe."""
    stmt = (
        select(Review.id)
        .where(Review.user_id == user_id, Review.recipe_id == recipe_id)
        .limit(1)
    )
    return db.execute(stmt).first() is not None


def create_review(
    db: Session,
    author_id: str,
    recipe_id: str,
    rating: int,
    comment: str | None = None,
) -> Review:
    """
    Create a review for a recipe.

    Args:
        db: Database session
        author_id: ID of the authenticated user writing the review
        recipe_id: ID of the recipe being reviewed
        rating: 1-5 star rating
        comment: Optional review text (max 500 characters)

    Returns:
        The created review with its author loaded

    Raises:
        InvalidInputError: rating or comment out of range
        NotFoundError: recipe missing or soft-deleted
        ConflictError: the author already reviewed this recipe
    """
    rating = _validate_rating(rating)
    comment = _validate_comment(comment)

    recipe_stmt = select(Recipe.id).where(
        Recipe.id == recipe_id,
        Recipe.is_deleted.is_(False),
    )
    if db.execute(recipe_stmt).scalar_one_or_none() is None:
        raise NotFoundError("Recipe not found")

    if check_user_review_exists(db, author_id, recipe_id):
        logger.info(f"Duplicate review rejected: user {author_id}, recipe {recipe_id}")
        raise ConflictError("You have already reviewed this recipe")

    review = Review(
        user_id=author_id,
        recipe_id=recipe_id,
        rating=rating,
        comment=comment,
    )
    db.add(review)

    try:
        db.commit()
    except IntegrityError:
        # A concurrent request inserted the same (user, recipe) pair
        db.rollback()
        logger.warning(
            f"Unique constraint rejected review: user {author_id}, recipe {recipe_id}"
        )
        raise ConflictError("You have already reviewed this recipe") from None

    logger.info(f"Created review {review.id} for recipe {recipe_id} by user {author_id}")

    return _load_review(db, review.id)


def get_review_by_id(db: Session, review_id: str) -> Review | None:
    """
    Look up a single review with its author.

    Returns:
        The review, or None if it does not exist
    """
    stmt = _select_with_author().where(Review.id == review_id)
    return db.execute(stmt).scalar_one_or_none()


def list_reviews_for_recipe(
    db: Session,
    recipe_id: str,
    page: int = 1,
    limit: int | None = None,
    sort: ReviewSort | str = ReviewSort.NEWEST,
) -> tuple[list[Review], int]:
    """
    List a page of reviews for a recipe.

    Args:
        db: Database session
        recipe_id: Recipe whose reviews to list
        page: 1-indexed page number
        limit: Page size (1-100, defaults to review_list_default_limit)
        sort: newest, oldest, highest or lowest

    Returns:
        (reviews on this page, total reviews for the recipe)
    """
    if limit is None:
        limit = settings.review_list_default_limit
    _validate_pagination(page, limit)
    order = _parse_sort(sort)

    return _paginate(
        db,
        [Review.recipe_id == recipe_id],
        _SORT_ORDER[order],
        page,
        limit,
    )


def list_reviews_by_user(
    db: Session,
    user_id: str,
    page: int = 1,
    limit: int | None = None,
) -> tuple[list[Review], int]:
    """List a page of reviews written by a user, newest first."""
    if limit is None:
        limit = settings.review_list_default_limit
    _validate_pagination(page, limit)

    return _paginate(
        db,
        [Review.user_id == user_id],
        _SORT_ORDER[ReviewSort.NEWEST],
        page,
        limit,
    )


def list_flagged_reviews(
    db: Session,
    page: int = 1,
    limit: int | None = None,
) -> tuple[list[Review], int]:
    """List the moderation queue: flagged reviews, newest first."""
    if limit is None:
        limit = settings.review_list_default_limit
    _validate_pagination(page, limit)

    return _paginate(
        db,
        [Review.is_flagged.is_(True)],
        _SORT_ORDER[ReviewSort.NEWEST],
        page,
        limit,
    )


def update_review(
    db: Session,
    review_id: str,
    requester_id: str,
    changes: Mapping[str, Any],
) -> Review:
    """
    Update the rating and/or comment of a review.

    Preconditions are checked in this order: the review exists, the
    requester wrote it, and the edit window is still open.

    Args:
        db: Database session
        review_id: Review to update
        requester_id: ID of the authenticated user
        changes: Fields to change. Keys not present are left alone; a rating
            of None is rejected and a comment of None clears the comment.

    Returns:
        The updated review with its author loaded

    Raises:
        NotFoundError: review missing
        ForbiddenError: not the author, or edit window expired
        InvalidInputError: no fields, unknown fields, or invalid values
    """
    review = _get_review_or_raise(db, review_id)

    if review.user_id != requester_id:
        raise ForbiddenError("You can only update your own reviews")

    if not is_within_edit_window(review):
        raise ForbiddenError(
            f"Reviews can only be edited within {settings.review_edit_window_days} "
            "days of creation"
        )

    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise InvalidInputError(f"Cannot update fields: {', '.join(sorted(unknown))}")
    if not changes:
        raise InvalidInputError("Provide at least one of rating or comment")

    # A rejected update must not leave the review dirty in the session
    rating = review.rating
    if "rating" in changes:
        if changes["rating"] is None:
            raise InvalidInputError("Rating cannot be null")
        rating = _validate_rating(changes["rating"])
    comment = review.comment
    if "comment" in changes:
        comment = _validate_comment(changes["comment"])

    review.rating = rating
    review.comment = comment

    # Set explicitly: an update with unchanged values would skip onupdate
    review.updated_at = utcnow()
    db.commit()

    logger.info(f"Updated review {review_id} ({', '.join(sorted(changes))})")

    return _load_review(db, review_id)


def delete_review(db: Session, review_id: str, requester_id: str) -> None:
    """
    Permanently delete a review.

    Raises:
        NotFoundError: review missing
        ForbiddenError: requester is not the author
    """
    review = _get_review_or_raise(db, review_id)

    if review.user_id != requester_id:
        raise ForbiddenError("You can only delete your own reviews")

    db.delete(review)
    db.commit()

    logger.info(f"Deleted review {review_id} by user {requester_id}")


def flag_review(
    db: Session,
    review_id: str,
    requester_id: str,
    flag_reason: str,
) -> None:
    """
    Flag someone else's review for moderator attention.

    Flagging is not idempotent: a second attempt fails and the original
    reason is kept.

    Raises:
        NotFoundError: review missing
        ConflictError: requester wrote the review, or it is already flagged
        InvalidInputError: reason shorter than 10 or longer than 200 characters
    """
    review = _get_review_or_raise(db, review_id)

    if review.user_id == requester_id:
        raise ConflictError("You cannot flag your own review")

    if review.is_flagged:
        raise ConflictError("This review has already been flagged")

    review.flag_reason = _validate_flag_reason(flag_reason)
    review.is_flagged = True
    review.updated_at = utcnow()
    db.commit()

    logger.info(f"Review {review_id} flagged by user {requester_id}")
