"""Profile router - FastAPI endpoints for profile documents"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import UserProfile
from .schemas import (
    AvailabilityUpdate,
    BioUpdate,
    FreeTimeResponse,
    ProfileResponse,
    ProfileUpdate,
    PublicProfileResponse,
)
from .service import ProfileService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Profiles"])


def get_profile_service(db: Session = Depends(get_db)) -> ProfileService:
    """Dependency injection for ProfileService"""
    return ProfileService(db)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(current_user: UserProfile = Depends(get_current_user)):
    """The signed-in user's full profile"""
    return current_user


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    data: ProfileUpdate,
    current_user: UserProfile = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
):
    return service.update_profile(current_user.uid, data)


@router.put("/me/bio", response_model=ProfileResponse)
async def update_my_bio(
    data: BioUpdate,
    current_user: UserProfile = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
):
    return service.update_bio(current_user.uid, data.bio)


@router.put("/me/availability", response_model=ProfileResponse)
async def update_my_availability(
    data: AvailabilityUpdate,
    current_user: UserProfile = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
):
    return service.update_availability(current_user.uid, data.availability)


@router.get("/{uid}", response_model=PublicProfileResponse)
async def get_user_profile(
    uid: str,
    current_user: UserProfile = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
):
    """Another user's public profile"""
    return service.get_public_profile(uid)


@router.get("/{uid}/free-time", response_model=FreeTimeResponse)
async def get_shared_free_time(
    uid: str,
    current_user: UserProfile = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
):
    """Windows where both the current user and `uid` are available"""
    slots = service.free_time_with(current_user.uid, uid)
    return FreeTimeResponse(uid=current_user.uid, other_uid=uid, slots=slots)
