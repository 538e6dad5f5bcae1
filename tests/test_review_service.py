"""
Tests for the Review Service

Exercises app.services.reviews directly, without HTTP:
- Creation rules (recipe must exist, one review per user)
- Listing (pagination, ordering, determinism)
- Update rules (author only, edit window, field handling)
- Deletion and flagging rules
"""

from datetime import timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base
from app.exceptions import (
    ConflictError,
    ErrorKind,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
)
from app.models import Recipe, Review, User
from app.services import reviews as review_service
from app.services.reviews import ReviewSort
from app.utils.dates import ensure_utc, utcnow

FLAG_REASON = "Looks like an advert for a kitchen shop."


# =============================================================================
# Create
# =============================================================================


class TestCreateReview:
    def test_create_review(
        self, db_session: Session, sample_recipe: Recipe, sample_user: User
    ):
        review = review_service.create_review(
            db_session, sample_user.id, sample_recipe.id, 5, "  Perfect brunch.  "
        )

        assert review.id is not None
        assert review.rating == 5
        assert review.comment == "Perfect brunch."
        assert review.helpful_count == 0
        assert review.is_flagged is False
        assert review.flag_reason is None
        assert review.user.username == "chef_ada"
        assert review.created_at is not None

    def test_create_review_duplicate(
        self, db_session: Session, sample_review: Review, sample_user: User
    ):
        with pytest.raises(ConflictError) as exc_info:
            review_service.create_review(
                db_session, sample_user.id, sample_review.recipe_id, 2
            )

        assert exc_info.value.kind == ErrorKind.CONFLICT
        assert exc_info.value.message == "You have already reviewed this recipe"

    def test_create_review_missing_recipe(
        self, db_session: Session, sample_user: User
    ):
        with pytest.raises(NotFoundError):
            review_service.create_review(
                db_session, sample_user.id, "00000000-0000-0000-0000-000000000000", 4
            )

    def test_create_review_deleted_recipe(
        self, db_session: Session, deleted_recipe: Recipe, sample_user: User
    ):
        with pytest.raises(NotFoundError):
            review_service.create_review(
                db_session, sample_user.id, deleted_recipe.id, 4
            )

    @pytest.mark.parametrize("rating", [0, 6, True, "5", 3.0, None])
    def test_create_review_invalid_rating(
        self, db_session: Session, sample_recipe: Recipe, sample_user: User, rating
    ):
        with pytest.raises(InvalidInputError):
            review_service.create_review(
                db_session, sample_user.id, sample_recipe.id, rating
            )

    def test_create_review_comment_too_long(
        self, db_session: Session, sample_recipe: Recipe, sample_user: User
    ):
        with pytest.raises(InvalidInputError):
            review_service.create_review(
                db_session, sample_user.id, sample_recipe.id, 4, "x" * 501
            )

    def test_create_review_comment_at_limit(
        self, db_session: Session, sample_recipe: Recipe, sample_user: User
    ):
        review = review_service.create_review(
            db_session, sample_user.id, sample_recipe.id, 4, "x" * 500
        )

        assert len(review.comment) == 500

    def test_check_user_review_exists(
        self, db_session: Session, sample_recipe: Recipe, sample_user: User
    ):
        assert not review_service.check_user_review_exists(
            db_session, sample_user.id, sample_recipe.id
        )

        review_service.create_review(db_session, sample_user.id, sample_recipe.id, 3)

        assert review_service.check_user_review_exists(
            db_session, sample_user.id, sample_recipe.id
        )


class TestCreateReviewConstraint:
    """
    The unique constraint backs up the duplicate pre-check.

    Runs on its own database: a failed commit rolls back the session, which
    would end the outer transaction the shared db_session fixture relies on.
    """

    @pytest.fixture
    def isolated_session(self):
        engine = create_engine(
            "sqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(bind=engine)
        session = sessionmaker(autoflush=False, bind=engine)()

        yield session

        session.close()
        engine.dispose()

    def test_concurrent_duplicate_maps_to_conflict(
        self, isolated_session: Session, monkeypatch
    ):
        owner = User(email="owner@example.com", username="owner")
        reviewer = User(email="racer@example.com", username="racer")
        isolated_session.add_all([owner, reviewer])
        isolated_session.flush()
        recipe = Recipe(user_id=owner.id, title="Dal")
        isolated_session.add(recipe)
        isolated_session.commit()

        review_service.create_review(isolated_session, reviewer.id, recipe.id, 4)

        # Simulate a second request that passed the pre-check before the
        # first one committed
        monkeypatch.setattr(
            review_service, "check_user_review_exists", lambda *args: False
        )

        with pytest.raises(ConflictError):
            review_service.create_review(isolated_session, reviewer.id, recipe.id, 2)

        reviews = isolated_session.query(Review).all()
        assert len(reviews) == 1
        assert reviews[0].rating == 4


# =============================================================================
# Read
# =============================================================================


class TestGetReview:
    def test_get_review_by_id(self, db_session: Session, sample_review: Review):
        review = review_service.get_review_by_id(db_session, sample_review.id)

        assert review is not None
        assert review.id == sample_review.id
        assert review.user.username == "chef_ada"

    def test_get_review_by_id_missing(self, db_session: Session):
        assert (
            review_service.get_review_by_id(
                db_session, "00000000-0000-0000-0000-000000000000"
            )
            is None
        )


class TestListReviews:
    def test_pagination(
        self, db_session: Session, sample_recipe: Recipe, review_factory
    ):
        base = utcnow() - timedelta(days=2)
        created = [
            review_factory(rating=4, created_at=base + timedelta(hours=i))
            for i in range(5)
        ]

        items, total = review_service.list_reviews_for_recipe(
            db_session, sample_recipe.id, page=2, limit=2, sort=ReviewSort.OLDEST
        )

        assert total == 5
        assert [review.id for review in items] == [created[2].id, created[3].id]

    def test_page_past_end_is_empty(
        self, db_session: Session, sample_recipe: Recipe, review_factory
    ):
        review_factory(rating=4)

        items, total = review_service.list_reviews_for_recipe(
            db_session, sample_recipe.id, page=3, limit=10
        )

        assert items == []
        assert total == 1

    def test_unknown_recipe_lists_nothing(self, db_session: Session):
        items, total = review_service.list_reviews_for_recipe(
            db_session, "00000000-0000-0000-0000-000000000000"
        )

        assert items == []
        assert total == 0

    def test_only_reviews_of_the_recipe(
        self,
        db_session: Session,
        sample_recipe: Recipe,
        recipe_owner: User,
        review_factory,
    ):
        other = Recipe(user_id=recipe_owner.id, title="Focaccia")
        db_session.add(other)
        db_session.commit()
        review_factory(rating=5)
        review_factory(rating=2, recipe=other)

        items, total = review_service.list_reviews_for_recipe(
            db_session, sample_recipe.id
        )

        assert total == 1
        assert items[0].recipe_id == sample_recipe.id

    def test_sort_highest(
        self, db_session: Session, sample_recipe: Recipe, review_factory
    ):
        for rating in [3, 1, 5, 5, 2, 4]:
            review_factory(rating=rating)

        items, _ = review_service.list_reviews_for_recipe(
            db_session, sample_recipe.id, sort="highest"
        )

        ratings = [review.rating for review in items]
        assert ratings == sorted(ratings, reverse=True)

    def test_sort_oldest(
        self, db_session: Session, sample_recipe: Recipe, review_factory
    ):
        base = utcnow() - timedelta(days=3)
        for offset in [5, 1, 3]:
            review_factory(rating=3, created_at=base + timedelta(hours=offset))

        items, _ = review_service.list_reviews_for_recipe(
            db_session, sample_recipe.id, sort=ReviewSort.OLDEST
        )

        timestamps = [ensure_utc(review.created_at) for review in items]
        assert timestamps == sorted(timestamps)

    def test_order_is_stable_for_ties(
        self, db_session: Session, sample_recipe: Recipe, review_factory
    ):
        same_time = utcnow() - timedelta(hours=1)
        for _ in range(4):
            review_factory(rating=4, created_at=same_time)

        first, _ = review_service.list_reviews_for_recipe(
            db_session, sample_recipe.id, sort=ReviewSort.HIGHEST
        )
        second, _ = review_service.list_reviews_for_recipe(
            db_session, sample_recipe.id, sort=ReviewSort.HIGHEST
        )

        assert [r.id for r in first] == [r.id for r in second]

    @pytest.mark.parametrize(
        "kwargs",
        [{"page": 0}, {"limit": 0}, {"limit": 101}, {"sort": "best"}],
    )
    def test_invalid_listing_arguments(
        self, db_session: Session, sample_recipe: Recipe, kwargs
    ):
        with pytest.raises(InvalidInputError):
            review_service.list_reviews_for_recipe(
                db_session, sample_recipe.id, **kwargs
            )

    def test_list_reviews_by_user(
        self, db_session: Session, sample_review: Review, sample_user: User
    ):
        items, total = review_service.list_reviews_by_user(db_session, sample_user.id)

        assert total == 1
        assert items[0].id == sample_review.id

    def test_list_flagged_reviews(
        self, db_session: Session, sample_review: Review, review_factory
    ):
        flagged = review_factory(
            rating=1, is_flagged=True, flag_reason="Abusive towards the cook."
        )

        items, total = review_service.list_flagged_reviews(db_session)

        assert total == 1
        assert items[0].id == flagged.id


# =============================================================================
# Update
# =============================================================================


class TestUpdateReview:
    def test_update_rating_and_comment(
        self, db_session: Session, sample_review: Review, sample_user: User
    ):
        before = ensure_utc(sample_review.updated_at)

        review = review_service.update_review(
            db_session,
            sample_review.id,
            sample_user.id,
            {"rating": 2, "comment": "Too salty on a second try."},
        )

        assert review.rating == 2
        assert review.comment == "Too salty on a second try."
        assert ensure_utc(review.updated_at) >= before

    def test_rating_none_rejected(
        self, db_session: Session, sample_review: Review, sample_user: User
    ):
        with pytest.raises(InvalidInputError):
            review_service.update_review(
                db_session,
                sample_review.id,
                sample_user.id,
                {"rating": None, "comment": "Changed my mind about the feta."},
            )

        db_session.commit()
        db_session.refresh(sample_review)
        assert sample_review.rating == 4
        assert sample_review.comment == "Lovely, I added feta on top."

    def test_rejected_update_leaves_review_unchanged(
        self, db_session: Session, sample_review: Review, sample_user: User
    ):
        """A valid rating is not applied when the comment in the same update fails."""
        with pytest.raises(InvalidInputError):
            review_service.update_review(
                db_session,
                sample_review.id,
                sample_user.id,
                {"rating": 1, "comment": "x" * 501},
            )

        db_session.commit()
        db_session.refresh(sample_review)
        assert sample_review.rating == 4
        assert sample_review.comment == "Lovely, I added feta on top."

    def test_comment_none_clears(
        self, db_session: Session, sample_review: Review, sample_user: User
    ):
        review = review_service.update_review(
            db_session, sample_review.id, sample_user.id, {"comment": None}
        )

        assert review.comment is None
        assert review.rating == 4

    def test_non_author_forbidden(
        self, db_session: Session, sample_review: Review, second_user: User
    ):
        with pytest.raises(ForbiddenError) as exc_info:
            review_service.update_review(
                db_session, sample_review.id, second_user.id, {"rating": 1}
            )

        assert exc_info.value.message == "You can only update your own reviews"

    def test_ownership_checked_before_payload(
        self, db_session: Session, sample_review: Review, second_user: User
    ):
        with pytest.raises(ForbiddenError):
            review_service.update_review(
                db_session, sample_review.id, second_user.id, {"rating": 9}
            )

    def test_edit_window_expired(
        self, db_session: Session, sample_review: Review, sample_user: User
    ):
        sample_review.created_at = utcnow() - timedelta(days=31)
        db_session.commit()

        with pytest.raises(ForbiddenError) as exc_info:
            review_service.update_review(
                db_session, sample_review.id, sample_user.id, {"rating": 1}
            )

        assert "30 days" in exc_info.value.message

    def test_edit_window_still_open(
        self, db_session: Session, sample_review: Review, sample_user: User
    ):
        sample_review.created_at = utcnow() - timedelta(days=29)
        db_session.commit()

        review = review_service.update_review(
            db_session, sample_review.id, sample_user.id, {"rating": 1}
        )

        assert review.rating == 1

    def test_missing_review(self, db_session: Session, sample_user: User):
        with pytest.raises(NotFoundError):
            review_service.update_review(
                db_session,
                "00000000-0000-0000-0000-000000000000",
                sample_user.id,
                {"rating": 3},
            )

    def test_empty_changes(
        self, db_session: Session, sample_review: Review, sample_user: User
    ):
        with pytest.raises(InvalidInputError):
            review_service.update_review(
                db_session, sample_review.id, sample_user.id, {}
            )

    def test_unknown_field(
        self, db_session: Session, sample_review: Review, sample_user: User
    ):
        with pytest.raises(InvalidInputError):
            review_service.update_review(
                db_session, sample_review.id, sample_user.id, {"helpful_count": 99}
            )

    def test_invalid_rating(
        self, db_session: Session, sample_review: Review, sample_user: User
    ):
        with pytest.raises(InvalidInputError):
            review_service.update_review(
                db_session, sample_review.id, sample_user.id, {"rating": 0}
            )


class TestEditWindow:
    def test_boundary_is_inclusive(self, sample_review: Review):
        created = ensure_utc(sample_review.created_at)

        assert review_service.is_within_edit_window(
            sample_review, now=created + timedelta(days=30)
        )
        assert not review_service.is_within_edit_window(
            sample_review, now=created + timedelta(days=30, seconds=1)
        )


# =============================================================================
# Delete
# =============================================================================


class TestDeleteReview:
    def test_delete_review(
        self, db_session: Session, sample_review: Review, sample_user: User
    ):
        review_id = sample_review.id

        review_service.delete_review(db_session, review_id, sample_user.id)

        assert review_service.get_review_by_id(db_session, review_id) is None

    def test_delete_review_not_author(
        self, db_session: Session, sample_review: Review, second_user: User
    ):
        with pytest.raises(ForbiddenError) as exc_info:
            review_service.delete_review(db_session, sample_review.id, second_user.id)

        assert exc_info.value.message == "You can only delete your own reviews"
        assert review_service.get_review_by_id(db_session, sample_review.id)

    def test_delete_missing_review(self, db_session: Session, sample_user: User):
        with pytest.raises(NotFoundError):
            review_service.delete_review(
                db_session, "00000000-0000-0000-0000-000000000000", sample_user.id
            )


# =============================================================================
# Flag
# =============================================================================


class TestFlagReview:
    def test_flag_review(
        self, db_session: Session, sample_review: Review, second_user: User
    ):
        review_service.flag_review(
            db_session, sample_review.id, second_user.id, f"  {FLAG_REASON}  "
        )

        review = review_service.get_review_by_id(db_session, sample_review.id)
        assert review.is_flagged is True
        assert review.flag_reason == FLAG_REASON

    def test_flag_own_review(
        self, db_session: Session, sample_review: Review, sample_user: User
    ):
        with pytest.raises(ConflictError) as exc_info:
            review_service.flag_review(
                db_session, sample_review.id, sample_user.id, FLAG_REASON
            )

        assert exc_info.value.message == "You cannot flag your own review"

    def test_flag_twice_keeps_first_reason(
        self,
        db_session: Session,
        sample_review: Review,
        second_user: User,
        superuser: User,
    ):
        review_service.flag_review(
            db_session, sample_review.id, second_user.id, FLAG_REASON
        )

        with pytest.raises(ConflictError) as exc_info:
            review_service.flag_review(
                db_session, sample_review.id, superuser.id, "Another complaint here."
            )

        assert exc_info.value.message == "This review has already been flagged"
        review = review_service.get_review_by_id(db_session, sample_review.id)
        assert review.flag_reason == FLAG_REASON

    @pytest.mark.parametrize("reason", ["short", "x" * 201, None])
    def test_flag_invalid_reason(
        self, db_session: Session, sample_review: Review, second_user: User, reason
    ):
        with pytest.raises(InvalidInputError):
            review_service.flag_review(
                db_session, sample_review.id, second_user.id, reason
            )

        review = review_service.get_review_by_id(db_session, sample_review.id)
        assert review.is_flagged is False

    def test_flag_missing_review(self, db_session: Session, second_user: User):
        with pytest.raises(NotFoundError):
            review_service.flag_review(
                db_session,
                "00000000-0000-0000-0000-000000000000",
                second_user.id,
                FLAG_REASON,
            )
