"""Social graph schemas"""

from typing import Optional

from pydantic import BaseModel


class UserSearchResult(BaseModel):
    uid: str
    display_name: str
    email: str
    bio: Optional[str] = ""
    photo_url: Optional[str] = None
    is_following: bool


class FollowResponse(BaseModel):
    success: bool
    uid: str
    is_following: bool
    following: list[str]


class FollowingStatusResponse(BaseModel):
    uid: str
    is_following: bool


class UserSummary(BaseModel):
    uid: str
    display_name: str
    photo_url: Optional[str] = None
