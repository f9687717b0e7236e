# app/routes/users.py
from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile

from ..controllers.user_controller import (
    get_my_profile,
    get_profile_by_id,
    get_recommended_users,
    search_users,
    update_banner_image,
    update_profile,
    update_profile_blocks,
    update_profile_picture,
    upload_profile_content,
)
from ..schemas._common import UserPreview
from ..schemas.user_schema import (
    BannerImageResponse,
    ImageUploadResponse,
    ProfileBlocksRequest,
    ProfileBlocksResponse,
    ProfilePictureResponse,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
    UserProfileOut,
)
from ..utils.auth_utils import get_current_user, get_optional_user

router = APIRouter(prefix="/users", tags=["Users"])

# ---------- Static paths first ----------

@router.get("/profile", response_model=UserProfileOut, summary="Get my profile")
async def my_profile_route(current_user: dict = Depends(get_current_user)):
    return await get_my_profile(current_user)


@router.put("/profile/update", response_model=ProfileUpdateResponse, summary="Update my profile fields")
async def update_profile_route(
    data: ProfileUpdateRequest,
    current_user: dict = Depends(get_current_user),
):
    return await update_profile(current_user, data)


@router.put("/profile/photo", response_model=ProfilePictureResponse, summary="Upload a new profile picture")
async def profile_photo_route(
    profile_picture: Optional[UploadFile] = File(None),
    current_user: dict = Depends(get_current_user),
):
    return await update_profile_picture(current_user, profile_picture)


@router.put("/profile/banner", response_model=BannerImageResponse, summary="Upload a new banner image")
async def profile_banner_route(
    banner_image: Optional[UploadFile] = File(None),
    current_user: dict = Depends(get_current_user),
):
    return await update_banner_image(current_user, banner_image)


@router.put("/profile/blocks", response_model=ProfileBlocksResponse, summary="Replace my profile blocks")
async def profile_blocks_route(
    data: ProfileBlocksRequest,
    current_user: dict = Depends(get_current_user),
):
    return await update_profile_blocks(current_user, data.profile_blocks)


@router.post("/profile/upload-image", response_model=ImageUploadResponse, summary="Upload an image for profile content")
async def profile_upload_image_route(
    image: Optional[UploadFile] = File(None),
    current_user: dict = Depends(get_current_user),
):
    return await upload_profile_content(image)


@router.get("/recommended", response_model=List[UserPreview], summary="Recommended users")
async def recommended_route(current_user: Optional[dict] = Depends(get_optional_user)):
    return await get_recommended_users(current_user)


@router.get("/search", response_model=List[UserPreview], summary="Search users by name or username")
async def search_route(query: Optional[str] = None, limit: int = 20, skip: int = 0):
    return await search_users(query, limit=limit, skip=skip)


# ---------- Parameterised ----------

@router.get("/profile/{user_id}", response_model=UserProfileOut, summary="Get any user's profile")
async def profile_by_id_route(user_id: str, current_user: dict = Depends(get_current_user)):
    return await get_profile_by_id(user_id)
