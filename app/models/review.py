"""
Review Model

Represents one user's rating and optional comment on one recipe.

Business Rules:
- One review per user per recipe (unique constraint)
- Rating must be 1-5 (check constraint)
- Comment at most 500 characters
- Flagging is one-way: is_flagged goes False -> True exactly once
- helpful_count is stored but not changed by any operation
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.utils.dates import utcnow

if TYPE_CHECKING:
    from app.models.recipe import Recipe
    from app.models.user import User

RATING_MIN = 1
RATING_MAX = 5
COMMENT_MAX_LENGTH = 500
FLAG_REASON_MIN_LENGTH = 10
FLAG_REASON_MAX_LENGTH = 200


class Review(Base):
    """
    Review model for recipe reviews.

    Attributes:
        id: Primary key (UUID string)
        recipe_id: Foreign key to recipes table
        user_id: Foreign key to users table (the author)
        rating: 1-5 star rating
        comment: Optional review text
        helpful_count: Number of "helpful" votes (inert)
        is_flagged: Whether the review was flagged for moderation
        flag_reason: Why it was flagged
        created_at: When the review was created
        updated_at: When the review was last changed
    """

    __tablename__ = "reviews"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    # Foreign keys
    recipe_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("recipes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Review content
    rating: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Rating from 1-5 stars",
    )
    comment: Mapped[str | None] = mapped_column(
        String(COMMENT_MAX_LENGTH),
        nullable=True,
        comment="Optional review text",
    )

    # Moderation fields
    helpful_count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        comment="Number of helpful votes",
    )
    is_flagged: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        index=True,
        comment="Flag for moderation review",
    )
    flag_reason: Mapped[str | None] = mapped_column(
        String(FLAG_REASON_MAX_LENGTH),
        nullable=True,
        comment="Reason supplied by the user who flagged the review",
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    # Relationships
    recipe: Mapped["Recipe"] = relationship("Recipe", back_populates="reviews")
    user: Mapped["User"] = relationship("User", back_populates="reviews")

    __table_args__ = (
        # One review per user per recipe
        UniqueConstraint("recipe_id", "user_id", name="uq_review_recipe_user"),
        CheckConstraint(
            f"rating >= {RATING_MIN} AND rating <= {RATING_MAX}",
            name="ck_review_rating_range",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Review(id={self.id!r}, recipe_id={self.recipe_id!r}, "
            f"user_id={self.user_id!r}, rating={self.rating})>"
        )
