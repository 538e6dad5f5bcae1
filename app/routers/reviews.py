"""
Reviews Router

HTTP endpoints for recipe reviews.

Endpoints:
- POST /recipes/{recipe_id}/reviews - Create a review (authenticated)
- GET /recipes/{recipe_id}/reviews - List reviews for a recipe
- GET /recipes/{recipe_id}/ratings - Get recipe rating statistics
- GET /reviews/flagged - Moderation queue (superuser)
- GET /reviews/{review_id} - Get a specific review
- PUT /reviews/{review_id} - Update a review (author only, 30-day window)
- DELETE /reviews/{review_id} - Delete a review (author only)
- POST /reviews/{review_id}/flag - Flag a review for moderation
- GET /users/{user_id}/reviews - List reviews by a user

Handlers resolve identity and request shape, then delegate to
app.services.reviews. Domain errors raised there are turned into HTTP
responses by the exception handler registered in app.main.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Request, status

from app.config import get_settings
from app.dependencies import (
    ActiveUser,
    DbSession,
    Pagination,
    PaginationParams,
    ReviewListing,
    SuperUser,
    get_user_or_404,
)
from app.exceptions import NotFoundError
from app.models.review import Review
from app.schemas.review import (
    RecipeRatingStats,
    ReviewCreate,
    ReviewFlag,
    ReviewListResponse,
    ReviewResponse,
    ReviewUpdate,
)
from app.services import reviews as review_service
from app.services.rate_limiter import limiter
from app.services.ratings import get_recipe_rating_stats

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(
    tags=["Reviews"],
    responses={
        404: {"description": "Review or recipe not found"},
    },
)


def _list_response(
    items: list[Review],
    total: int,
    pagination: PaginationParams,
) -> ReviewListResponse:
    return ReviewListResponse(
        items=[ReviewResponse.model_validate(r) for r in items],
        total=total,
        page=pagination.page,
        limit=pagination.limit,
        pages=pagination.page_count(total),
    )


# =============================================================================
# Recipe Review Endpoints
# =============================================================================


@router.post(
    "/recipes/{recipe_id}/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a review",
    description="Create a review for a recipe. Requires authentication. One review per recipe per user.",
    responses={400: {"description": "Duplicate review or invalid input"}},
)
@limiter.limit(settings.rate_limit_write)
def create_review(
    request: Request,
    recipe_id: UUID,
    review_data: ReviewCreate,
    db: DbSession,
    current_user: ActiveUser,
) -> ReviewResponse:
    """
    Create a new review for a recipe.

    Raises:
        404 if the recipe does not exist or was deleted
        400 if the user already reviewed this recipe
    """
    review = review_service.create_review(
        db,
        author_id=current_user.id,
        recipe_id=str(recipe_id),
        rating=review_data.rating,
        comment=review_data.comment,
    )
    return ReviewResponse.model_validate(review)


@router.get(
    "/recipes/{recipe_id}/reviews",
    response_model=ReviewListResponse,
    summary="List reviews for a recipe",
    description="Get a paginated, sorted list of reviews for a recipe.",
)
@limiter.limit(settings.rate_limit_default)
def list_recipe_reviews(
    request: Request,
    recipe_id: UUID,
    db: DbSession,
    listing: ReviewListing,
) -> ReviewListResponse:
    """
    List reviews for a recipe.

    Sort options: newest (default), oldest, highest, lowest.
    """
    items, total = review_service.list_reviews_for_recipe(
        db,
        str(recipe_id),
        page=listing.page,
        limit=listing.limit,
        sort=listing.sort,
    )
    return _list_response(items, total, listing)


@router.get(
    "/recipes/{recipe_id}/ratings",
    response_model=RecipeRatingStats,
    summary="Get recipe rating statistics",
    description="Average rating, review count and per-star distribution for a recipe.",
)
@limiter.limit(settings.rate_limit_default)
def get_recipe_ratings(
    request: Request,
    recipe_id: UUID,
    db: DbSession,
) -> RecipeRatingStats:
    """Get rating statistics for a recipe (zeros when it has no reviews)."""
    stats = get_recipe_rating_stats(db, str(recipe_id))

    return RecipeRatingStats(
        recipe_id=str(recipe_id),
        average_rating=stats.average_rating,
        total_reviews=stats.total_reviews,
        rating_distribution=stats.distribution,
    )


# =============================================================================
# Moderation Queue (must come before /reviews/{review_id})
# =============================================================================


@router.get(
    "/reviews/flagged",
    response_model=ReviewListResponse,
    summary="List flagged reviews",
    description="Get flagged reviews awaiting moderation. Superuser only.",
)
@limiter.limit(settings.rate_limit_default)
def list_flagged_reviews(
    request: Request,
    db: DbSession,
    pagination: Pagination,
    current_user: SuperUser,
) -> ReviewListResponse:
    """List flagged reviews, newest first."""
    items, total = review_service.list_flagged_reviews(
        db,
        page=pagination.page,
        limit=pagination.limit,
    )
    return _list_response(items, total, pagination)


# =============================================================================
# Individual Review Endpoints
# =============================================================================


@router.get(
    "/reviews/{review_id}",
    response_model=ReviewResponse,
    summary="Get a review by ID",
    description="Retrieve a specific review with its author.",
)
@limiter.limit(settings.rate_limit_default)
def get_review(
    request: Request,
    review_id: UUID,
    db: DbSession,
) -> ReviewResponse:
    """Get a single review by ID."""
    review = review_service.get_review_by_id(db, str(review_id))

    if review is None:
        raise NotFoundError("Review not found")
    return ReviewResponse.model_validate(review)


@router.put(
    "/reviews/{review_id}",
    response_model=ReviewResponse,
    summary="Update a review",
    description=(
        "Update your own review's rating and/or comment. "
        "Only allowed within 30 days of creation."
    ),
    responses={403: {"description": "Not the author, or edit window expired"}},
)
@limiter.limit(settings.rate_limit_write)
def update_review(
    request: Request,
    review_id: UUID,
    review_data: ReviewUpdate,
    db: DbSession,
    current_user: ActiveUser,
) -> ReviewResponse:
    """
    Update an existing review.

    Fields not present in the body are left unchanged.
    """
    review = review_service.update_review(
        db,
        str(review_id),
        requester_id=current_user.id,
        changes=review_data.model_dump(exclude_unset=True),
    )
    return ReviewResponse.model_validate(review)


@router.delete(
    "/reviews/{review_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a review",
    description="Permanently delete your own review.",
    responses={403: {"description": "Not the author"}},
)
@limiter.limit(settings.rate_limit_write)
def delete_review(
    request: Request,
    review_id: UUID,
    db: DbSession,
    current_user: ActiveUser,
) -> None:
    """Delete a review."""
    review_service.delete_review(db, str(review_id), requester_id=current_user.id)


@router.post(
    "/reviews/{review_id}/flag",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Flag a review",
    description=(
        "Flag another user's review for moderation. "
        "A review can only be flagged once."
    ),
    responses={400: {"description": "Own review, or already flagged"}},
)
@limiter.limit(settings.rate_limit_write)
def flag_review(
    request: Request,
    review_id: UUID,
    flag_data: ReviewFlag,
    db: DbSession,
    current_user: ActiveUser,
) -> None:
    """Flag a review for moderation."""
    review_service.flag_review(
        db,
        str(review_id),
        requester_id=current_user.id,
        flag_reason=flag_data.flag_reason,
    )


# =============================================================================
# User Review Endpoints
# =============================================================================


@router.get(
    "/users/{user_id}/reviews",
    response_model=ReviewListResponse,
    summary="List reviews by a user",
    description="Get a paginated list of reviews written by a specific user.",
)
@limiter.limit(settings.rate_limit_default)
def list_user_reviews(
    request: Request,
    user_id: UUID,
    db: DbSession,
    pagination: Pagination,
) -> ReviewListResponse:
    """List all reviews by a user, newest first."""
    user = get_user_or_404(db, str(user_id))

    items, total = review_service.list_reviews_by_user(
        db,
        user.id,
        page=pagination.page,
        limit=pagination.limit,
    )
    return _list_response(items, total, pagination)
