"""
Review Pydantic Schemas

Schemas for recipe reviews with ratings.

Schemas:
- ReviewCreate: Create a new review
- ReviewUpdate: Update rating and/or comment (at least one)
- ReviewFlag: Flag a review for moderation
- ReviewResponse: Full review data with the author snapshot
- ReviewListResponse: Paginated list of reviews
- RecipeRatingStats: Aggregated rating statistics

Shape validation happens here; business rules (ownership, edit window,
duplicates) live in app.services.reviews.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.models.review import (
    COMMENT_MAX_LENGTH,
    FLAG_REASON_MAX_LENGTH,
    FLAG_REASON_MIN_LENGTH,
    RATING_MAX,
    RATING_MIN,
)
from app.schemas.user import UserSnapshot
from app.utils.dates import ensure_utc


def _strip_comment(v: str | None) -> str | None:
    """Trim whitespace; a blank comment is stored as no comment."""
    if v is not None:
        v = v.strip()
        if not v:
            return None
    return v


# =============================================================================
# Request Schemas
# =============================================================================


class ReviewCreate(BaseModel):
    """
    Schema for creating a new review.

    Example request body:
    {
        "rating": 5,
        "comment": "Made this twice already, perfect weeknight dinner."
    }
    """

    rating: int = Field(
        ...,
        ge=RATING_MIN,
        le=RATING_MAX,
        strict=True,
        description="Rating from 1 to 5 stars",
        examples=[4, 5],
    )

    comment: str | None = Field(
        default=None,
        max_length=COMMENT_MAX_LENGTH,
        description="Optional review text",
        examples=["Great flavor, a bit too salty for me."],
    )

    @field_validator("comment")
    @classmethod
    def comment_must_not_be_blank(cls, v: str | None) -> str | None:
        return _strip_comment(v)


class ReviewUpdate(BaseModel):
    """
    Schema for updating an existing review.

    Both fields are optional but at least one must be sent. Sending
    "comment": null clears the comment; "rating": null is rejected.
    """

    rating: int | None = Field(
        default=None,
        ge=RATING_MIN,
        le=RATING_MAX,
        strict=True,
        description="Rating from 1 to 5 stars",
    )

    comment: str | None = Field(
        default=None,
        max_length=COMMENT_MAX_LENGTH,
        description="Review text",
    )

    @field_validator("comment")
    @classmethod
    def comment_must_not_be_blank(cls, v: str | None) -> str | None:
        return _strip_comment(v)

    @model_validator(mode="after")
    def at_least_one_field(self) -> "ReviewUpdate":
        """Reject an empty body: {} would be a no-op update."""
        if not self.model_fields_set:
            raise ValueError("Provide at least one of rating or comment")
        if "rating" in self.model_fields_set and self.rating is None:
            raise ValueError("Rating cannot be null")
        return self


class ReviewFlag(BaseModel):
    """Schema for flagging a review for moderation."""

    flag_reason: str = Field(
        ...,
        description="Why the review needs moderator attention (10-200 characters)",
        examples=["Contains spam links to an unrelated website."],
    )

    @field_validator("flag_reason")
    @classmethod
    def flag_reason_length(cls, v: str) -> str:
        """Length is checked after trimming, so padding can't satisfy the minimum."""
        v = v.strip()
        if not FLAG_REASON_MIN_LENGTH <= len(v) <= FLAG_REASON_MAX_LENGTH:
            raise ValueError(
                f"flag_reason must be between {FLAG_REASON_MIN_LENGTH} and "
                f"{FLAG_REASON_MAX_LENGTH} characters"
            )
        return v


# =============================================================================
# Response Schemas
# =============================================================================


class ReviewResponse(BaseModel):
    """
    Schema for review responses.

    Includes the review data, moderation fields and the author snapshot.
    """

    id: str = Field(..., description="Unique review identifier")
    recipe_id: str = Field(..., description="ID of the reviewed recipe")
    user_id: str = Field(..., description="ID of the review author")

    rating: int = Field(..., description="Rating from 1 to 5 stars")
    comment: str | None = Field(default=None, description="Review text")

    helpful_count: int = Field(default=0, description="Number of helpful votes")
    is_flagged: bool = Field(default=False, description="Flagged for moderation")
    flag_reason: str | None = Field(default=None, description="Reason given when flagged")

    created_at: datetime = Field(..., description="When the review was created")
    updated_at: datetime = Field(..., description="When the review was last updated")

    user: UserSnapshot = Field(..., description="Author of the review")

    @field_validator("created_at", "updated_at")
    @classmethod
    def timestamps_in_utc(cls, v: datetime) -> datetime:
        """SQLite returns naive datetimes; always serialize with an offset."""
        return ensure_utc(v)

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "0b8f7d52-1c9e-4d7b-a3f4-5e6d7c8b9a01",
                "recipe_id": "a2d4f6b8-0c1e-4a3b-8d5f-7e9a1b3c5d70",
                "user_id": "6f1c2a8e-3b5d-4f7a-9c1e-2d4b6a8c0e12",
                "rating": 5,
                "comment": "Made this twice already, perfect weeknight dinner.",
                "helpful_count": 0,
                "is_flagged": False,
                "flag_reason": None,
                "created_at": "2024-01-15T10:30:00Z",
                "updated_at": "2024-01-15T10:30:00Z",
                "user": {
                    "id": "6f1c2a8e-3b5d-4f7a-9c1e-2d4b6a8c0e12",
                    "username": "chef_ada",
                    "profile_pic": None,
                },
            }
        },
    )


class ReviewListResponse(BaseModel):
    """
    Schema for paginated review list responses.

    Includes pagination metadata:
    - total: Total number of matching reviews
    - page: Current page number
    - limit: Page size
    - pages: Total number of pages
    """

    items: list[ReviewResponse] = Field(..., description="Reviews on this page")
    total: int = Field(..., ge=0, description="Total number of reviews")
    page: int = Field(..., ge=1, description="Current page number")
    limit: int = Field(..., ge=1, description="Number of items per page")
    pages: int = Field(..., ge=0, description="Total number of pages")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "items": [],
                "total": 50,
                "page": 1,
                "limit": 20,
                "pages": 3,
            }
        },
    )


class RecipeRatingStats(BaseModel):
    """Aggregated rating statistics for a recipe."""

    recipe_id: str = Field(..., description="Recipe ID")
    average_rating: float = Field(
        ...,
        ge=0,
        le=5,
        description="Mean rating rounded to one decimal (0 means no reviews)",
    )
    total_reviews: int = Field(..., ge=0, description="Total number of reviews")
    rating_distribution: dict[int, int] = Field(
        ...,
        description="Count of reviews for each rating 1-5",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "recipe_id": "a2d4f6b8-0c1e-4a3b-8d5f-7e9a1b3c5d70",
                "average_rating": 4.3,
                "total_reviews": 4,
                "rating_distribution": {"1": 0, "2": 0, "3": 1, "4": 1, "5": 2},
            }
        },
    )
