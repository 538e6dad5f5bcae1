"""
Pydantic Schemas Package

This package contains Pydantic models for request/response validation.

Schema Naming Convention:
- XxxCreate: Fields required when creating a new record
- XxxUpdate: Fields allowed when updating (usually all optional)
- XxxResponse: Fields returned in API responses
"""

from app.schemas.review import (
    RecipeRatingStats,
    ReviewCreate,
    ReviewFlag,
    ReviewListResponse,
    ReviewResponse,
    ReviewUpdate,
)
from app.schemas.user import UserSnapshot

__all__ = [
    # User schemas
    "UserSnapshot",
    # Review schemas
    "ReviewCreate",
    "ReviewUpdate",
    "ReviewFlag",
    "ReviewResponse",
    "ReviewListResponse",
    "RecipeRatingStats",
]
