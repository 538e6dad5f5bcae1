"""
pytest Fixtures for Recipes API Tests

Shared fixtures used across all test files.

For database tests, we use:
- session scope for the engine (expensive to create)
- function scope for sessions (each test runs in a transaction that is
  rolled back afterwards)
"""

# =============================================================================
# TEST ENVIRONMENT SETUP
# =============================================================================
# IMPORTANT: Set environment variables BEFORE importing the app
import os

os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests-at-least-32-characters-long"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"

from collections.abc import Callable, Generator
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models import Recipe, Review, User

# =============================================================================
# DATABASE FIXTURES
# =============================================================================
# SQLite in-memory: fast, isolated, no external database needed.
# StaticPool keeps the single connection alive so the in-memory database
# survives between sessions.


@pytest.fixture(scope="session")
def engine():
    """Create a SQLite in-memory database engine with all tables."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Session, None, None]:
    """
    Create a fresh database session for each test.

    The session is wrapped in an outer transaction that's rolled back,
    so tests don't affect each other.
    """
    TestSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )

    connection = engine.connect()
    transaction = connection.begin()
    session = TestSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """
    Create a test client that uses the test database session.

    The get_db dependency is overridden so every request shares db_session.
    """

    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Session cleanup handled by db_session fixture

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# HELPERS
# =============================================================================


def make_user(db: Session, username: str, **kwargs) -> User:
    user = User(
        email=f"{username}@example.com",
        username=username,
        **kwargs,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================


@pytest.fixture
def sample_user(db_session: Session) -> User:
    """The author of sample_review."""
    return make_user(
        db_session,
        "chef_ada",
        profile_pic="https://cdn.example.com/u/chef_ada.png",
    )


@pytest.fixture
def second_user(db_session: Session) -> User:
    """A second user for ownership scenarios."""
    return make_user(db_session, "home_cook")


@pytest.fixture
def superuser(db_session: Session) -> User:
    """A moderator."""
    return make_user(db_session, "moderator", is_superuser=True)


@pytest.fixture
def recipe_owner(db_session: Session) -> User:
    return make_user(db_session, "recipe_owner")


@pytest.fixture
def sample_recipe(db_session: Session, recipe_owner: User) -> Recipe:
    """A published recipe that accepts reviews."""
    recipe = Recipe(
        user_id=recipe_owner.id,
        title="Shakshuka",
        description="Eggs poached in a spiced tomato and pepper sauce.",
    )
    db_session.add(recipe)
    db_session.commit()
    db_session.refresh(recipe)
    return recipe


@pytest.fixture
def deleted_recipe(db_session: Session, recipe_owner: User) -> Recipe:
    """A soft-deleted recipe."""
    recipe = Recipe(
        user_id=recipe_owner.id,
        title="Retired Recipe",
        is_deleted=True,
    )
    db_session.add(recipe)
    db_session.commit()
    db_session.refresh(recipe)
    return recipe


@pytest.fixture
def sample_review(
    db_session: Session,
    sample_recipe: Recipe,
    sample_user: User,
) -> Review:
    """A 4-star review of sample_recipe by sample_user."""
    review = Review(
        recipe_id=sample_recipe.id,
        user_id=sample_user.id,
        rating=4,
        comment="Lovely, I added feta on top.",
    )
    db_session.add(review)
    db_session.commit()
    db_session.refresh(review)
    return review


@pytest.fixture
def review_factory(
    db_session: Session,
    sample_recipe: Recipe,
) -> Callable[..., Review]:
    """
    Create reviews from fresh users.

    Each call creates a new reviewer so the one-review-per-user rule holds.
    """
    counter = {"n": 0}

    def create(
        rating: int,
        created_at: datetime | None = None,
        recipe: Recipe | None = None,
        **kwargs,
    ) -> Review:
        counter["n"] += 1
        reviewer = make_user(db_session, f"reviewer{counter['n']}")
        review = Review(
            recipe_id=(recipe or sample_recipe).id,
            user_id=reviewer.id,
            rating=rating,
            **kwargs,
        )
        if created_at is not None:
            review.created_at = created_at
            review.updated_at = created_at
        db_session.add(review)
        db_session.commit()
        db_session.refresh(review)
        return review

    return create
