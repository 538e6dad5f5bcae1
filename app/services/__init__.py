"""
Services Package

Business logic that is separate from HTTP handling (routers) and can be
tested in isolation.

Current services:
- reviews.py: Review lifecycle (create, read, list, update, delete, flag)
- ratings.py: Recipe rating statistics
- rate_limiter.py: Rate limiting with slowapi
- security.py: JWT access token utilities
"""
