"""
Recipe Model

Recipes are owned by the recipe CRUD subsystem; the review engine only
reads them to check that a recipe exists and has not been soft-deleted.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

if TYPE_CHECKING:
    from app.models.review import Review
    from app.models.user import User


class Recipe(Base):
    """
    Recipe model.

    Attributes:
        id: Primary key (UUID string)
        user_id: Owner of the recipe
        title: Recipe title
        description: Optional description
        is_deleted: Soft-delete flag; deleted recipes accept no new reviews
    """

    __tablename__ = "recipes"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_deleted: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    owner: Mapped["User"] = relationship("User", back_populates="recipes")
    reviews: Mapped[list["Review"]] = relationship(
        "Review",
        back_populates="recipe",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Recipe(id={self.id!r}, title={self.title!r}, is_deleted={self.is_deleted})>"
