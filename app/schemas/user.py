"""
User Pydantic Schemas

Only the public author snapshot is exposed by this API. It is read from
the users table at response time (never copied onto reviews), so renamed
users and new profile pictures show up immediately.
"""

from pydantic import BaseModel, ConfigDict, Field


class UserSnapshot(BaseModel):
    """
    Public identity of a review author.

    Excludes email, account status and every other private field.
    """

    id: str = Field(..., description="Unique user identifier")
    username: str = Field(..., description="Public username")
    profile_pic: str | None = Field(default=None, description="URL to profile picture")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "6f1c2a8e-3b5d-4f7a-9c1e-2d4b6a8c0e12",
                "username": "chef_ada",
                "profile_pic": "https://cdn.example.com/u/chef_ada.png",
            }
        },
    )
