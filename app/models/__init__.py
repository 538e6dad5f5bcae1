"""
SQLAlchemy Models Package

This package contains all database models for the Recipes API.

Model Relationships:
- User -> Recipe: One-to-Many (a user publishes recipes)
- User -> Review: One-to-Many (a user writes reviews)
- Recipe -> Review: One-to-Many (a recipe collects reviews)

Import all models here so Alembic discovers them for migrations.
"""

from app.models.user import User
from app.models.recipe import Recipe
from app.models.review import Review

__all__ = [
    "User",
    "Recipe",
    "Review",
]
