"""
Test Suite for Recipes API

Test Organization:
- conftest.py: Shared fixtures (test database, client, sample data)
- test_reviews.py: HTTP tests for the review endpoints
- test_review_service.py: Review engine business rules
- test_ratings.py: Rating statistics

Running Tests:
    pytest
    pytest --cov=app --cov-report=html
    pytest tests/test_reviews.py -v
"""
