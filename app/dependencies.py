"""
FastAPI Dependencies Module

Dependencies are reusable components injected into route handlers.
FastAPI's Depends() function manages their lifecycle.

Provided here:
- Database sessions (per-request)
- Authentication (resolve the Bearer token to a User)
- Pagination and sort parameters for review listings
"""

import math
from typing import Annotated

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.exceptions import NotFoundError
from app.models.user import User
from app.services.reviews import ReviewSort
from app.services.security import verify_token_type

settings = get_settings()

# =============================================================================
# Type Aliases with Annotated
# =============================================================================
# Instead of writing:
#   def get_review(db: Session = Depends(get_db)):
#
# You can write:
#   def get_review(db: DbSession):

DbSession = Annotated[Session, Depends(get_db)]


# =============================================================================
# Pagination Parameters
# =============================================================================
class PaginationParams:
    """
    Common pagination parameters for list endpoints.

    - page: Which page to return (1-indexed)
    - limit: How many items per page

    Usage in route:
        @router.get("/users/{user_id}/reviews")
        def list_user_reviews(db: DbSession, pagination: Pagination):
            ...
    """

    def __init__(
        self,
        page: int = Query(
            default=1,
            ge=1,
            description="Page number (1-indexed)",
            examples=[1, 2, 3],
        ),
        limit: int = Query(
            default=settings.review_list_default_limit,
            ge=1,
            le=settings.review_list_max_limit,
            description="Number of items per page (max 100)",
            examples=[10, 20, 50],
        ),
    ) -> None:
        self.page = page
        self.limit = limit

    def page_count(self, total: int) -> int:
        """Total number of pages for total items (0 when there are none)."""
        return math.ceil(total / self.limit) if total > 0 else 0


Pagination = Annotated[PaginationParams, Depends()]


class ReviewListParams(PaginationParams):
    """
    Pagination plus sort order for a recipe's reviews.

    Usage:
        GET /recipes/{recipe_id}/reviews?page=2&limit=10&sort=highest
    """

    def __init__(
        self,
        page: int = Query(
            default=1,
            ge=1,
            description="Page number (1-indexed)",
        ),
        limit: int = Query(
            default=settings.review_list_default_limit,
            ge=1,
            le=settings.review_list_max_limit,
            description="Number of items per page (max 100)",
        ),
        sort: ReviewSort = Query(
            default=ReviewSort.NEWEST,
            description="newest, oldest, highest or lowest",
        ),
    ) -> None:
        super().__init__(page=page, limit=limit)
        self.sort = sort


ReviewListing = Annotated[ReviewListParams, Depends()]


# =============================================================================
# JWT Authentication
# =============================================================================
# OAuth2PasswordBearer extracts the token from "Authorization: Bearer <token>"
# and returns 401 if the header is missing.

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/v1/auth/login",
    auto_error=True,
)


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the JWT access token to a user.

    Raises:
        HTTPException: 401 if the token is invalid or the user is missing
            or soft-deleted
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = verify_token_type(token, "access")
    if payload is None:
        raise credentials_exception

    user_id = payload.get("sub")
    if not user_id:
        raise credentials_exception

    stmt = select(User).where(User.id == str(user_id), User.is_deleted.is_(False))
    user = db.execute(stmt).scalar_one_or_none()

    if user is None:
        raise credentials_exception

    return user


def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Verify the current user is active.

    Raises:
        HTTPException: 403 if user is inactive
    """
    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )
    return current_user


def get_current_superuser(
    current_user: User = Depends(get_current_active_user),
) -> User:
    """
    Verify the current user may use moderation endpoints.

    Raises:
        HTTPException: 403 if user is not a superuser
    """
    if not current_user.is_superuser:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Superuser privileges required",
        )
    return current_user


ActiveUser = Annotated[User, Depends(get_current_active_user)]
SuperUser = Annotated[User, Depends(get_current_superuser)]


# =============================================================================
# Lookup Helpers
# =============================================================================
def get_user_or_404(db: Session, user_id: str) -> User:
    """Get a non-deleted user by ID, or raise 404."""
    stmt = select(User).where(User.id == user_id, User.is_deleted.is_(False))
    user = db.execute(stmt).scalar_one_or_none()

    if user is None:
        raise NotFoundError("User not found")
    return user
