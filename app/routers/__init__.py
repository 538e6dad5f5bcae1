"""
API Routers Package

This package contains FastAPI routers that handle API endpoints.

Router Structure:
- reviews.py: /api/v1/recipes/{id}/reviews, /api/v1/reviews/*,
  /api/v1/users/{id}/reviews

Each router is imported and registered in main.py.
"""

from app.routers.reviews import router as reviews_router

__all__ = [
    "reviews_router",
]
