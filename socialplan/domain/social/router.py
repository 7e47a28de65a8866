"""Search/follow router"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...config import SEARCH_MAX_RESULTS
from ...database import get_db
from ...models import UserProfile
from .schemas import FollowingStatusResponse, FollowResponse, UserSearchResult, UserSummary
from .service import SocialService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Social"])


def get_social_service(db: Session = Depends(get_db)) -> SocialService:
    """Dependency injection for SocialService"""
    return SocialService(db)


@router.get("/search", response_model=list[UserSearchResult])
async def search_users(
    q: str = Query("", max_length=100),
    limit: int = Query(SEARCH_MAX_RESULTS, ge=1, le=50),
    current_user: UserProfile = Depends(get_current_user),
    service: SocialService = Depends(get_social_service),
):
    """Find other users by display name or email"""
    return service.search_users(q, current_user.uid, limit)


@router.get("/me/following", response_model=list[UserSummary])
async def get_following(
    current_user: UserProfile = Depends(get_current_user),
    service: SocialService = Depends(get_social_service),
):
    return [
        UserSummary(uid=p.uid, display_name=p.display_name, photo_url=p.photo_url)
        for p in service.list_connections(current_user.uid, "following")
    ]


@router.get("/me/followers", response_model=list[UserSummary])
async def get_followers(
    current_user: UserProfile = Depends(get_current_user),
    service: SocialService = Depends(get_social_service),
):
    return [
        UserSummary(uid=p.uid, display_name=p.display_name, photo_url=p.photo_url)
        for p in service.list_connections(current_user.uid, "followers")
    ]


@router.post("/{uid}/follow", response_model=FollowResponse)
async def follow_user(
    uid: str,
    current_user: UserProfile = Depends(get_current_user),
    service: SocialService = Depends(get_social_service),
):
    profile = service.follow_user(current_user.uid, uid)
    return FollowResponse(success=True, uid=uid, is_following=True, following=profile.following)


@router.delete("/{uid}/follow", response_model=FollowResponse)
async def unfollow_user(
    uid: str,
    current_user: UserProfile = Depends(get_current_user),
    service: SocialService = Depends(get_social_service),
):
    profile = service.unfollow_user(current_user.uid, uid)
    return FollowResponse(success=True, uid=uid, is_following=False, following=profile.following)


@router.get("/{uid}/is-following", response_model=FollowingStatusResponse)
async def get_following_status(
    uid: str,
    current_user: UserProfile = Depends(get_current_user),
    service: SocialService = Depends(get_social_service),
):
    return FollowingStatusResponse(uid=uid, is_following=service.is_following(current_user.uid, uid))
