# app/routes/posts.py
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from ..controllers.post_controller import (
    create_post,
    delete_post,
    get_alliance_feed,
    get_community_posts,
    get_post_by_id,
    get_user_posts,
    like_post,
    unlike_post,
    update_post,
)
from ..schemas._common import MessageResponse
from ..schemas.post_schema import PostActionResponse, PostLikeResponse, PostOut
from ..utils.auth_utils import get_current_user, get_optional_user

router = APIRouter(prefix="/posts", tags=["Posts"])


# ✅ Create a post (general, or inside a community)
@router.post(
    "/create",
    response_model=PostActionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a post",
)
async def create_post_route(
    text: Optional[str] = Form(None),
    community_id: Optional[str] = Form(None),
    media: Optional[UploadFile] = File(None),
    current_user: dict = Depends(get_current_user),
):
    return await create_post(current_user, text=text, community_id=community_id, media=media)


# ---------- Static prefixes before /{post_id} ----------

@router.get("/feed/alliances", response_model=List[PostOut], summary="Feed from allies and joined communities")
async def feed_route(
    skip: int = 0,
    limit: int = 20,
    current_user: dict = Depends(get_current_user),
):
    return await get_alliance_feed(current_user, skip, limit)


@router.get("/community/{community_id}", response_model=List[PostOut], summary="Posts of a community (members only)")
async def community_posts_route(community_id: str, current_user: dict = Depends(get_current_user)):
    return await get_community_posts(community_id, current_user)


@router.get("/user/{user_id}", response_model=List[PostOut], summary="Posts by a user")
async def user_posts_route(user_id: str, current_user: Optional[dict] = Depends(get_optional_user)):
    return await get_user_posts(user_id, current_user)


# ---------- Single post ----------

@router.get("/{post_id}", response_model=PostOut, summary="Get a post")
async def get_post_route(post_id: str, current_user: Optional[dict] = Depends(get_optional_user)):
    return await get_post_by_id(post_id, current_user)


@router.post("/{post_id}/like", response_model=PostLikeResponse, summary="Like a post")
async def like_route(post_id: str, current_user: dict = Depends(get_current_user)):
    return await like_post(post_id, current_user)


@router.post("/{post_id}/unlike", response_model=PostLikeResponse, summary="Remove my like from a post")
async def unlike_route(post_id: str, current_user: dict = Depends(get_current_user)):
    return await unlike_post(post_id, current_user)


@router.put("/{post_id}/update", response_model=PostActionResponse, summary="Update a post (author only)")
async def update_route(
    post_id: str,
    text: Optional[str] = Form(None),
    media: Optional[UploadFile] = File(None),
    current_user: dict = Depends(get_current_user),
):
    return await update_post(post_id, current_user, text=text, media=media)


@router.delete("/{post_id}", response_model=MessageResponse, summary="Delete a post (author only)")
async def delete_route(post_id: str, current_user: dict = Depends(get_current_user)):
    return await delete_post(post_id, current_user)
