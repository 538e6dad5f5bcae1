"""
Recipes API Application Package

REST backend for the review and rating features of a recipe-sharing app.

Package Structure:
- config.py: Application configuration using Pydantic Settings
- database.py: SQLAlchemy database connection and session management
- exceptions.py: Domain errors raised by the review engine
- main.py: FastAPI application factory and configuration
- dependencies.py: Dependency injection functions
- models/: SQLAlchemy ORM models
- schemas/: Pydantic request/response schemas
- routers/: API route handlers
- services/: Business logic (reviews, ratings, rate limiting, JWT)
- utils/: Helper functions
"""

__version__ = "0.1.0"
