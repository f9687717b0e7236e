# app/routes/communities.py
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from ..controllers.community_controller import (
    create_community,
    delete_community,
    get_all_communities,
    get_communities_created_by,
    get_community_by_id,
    join_community,
    leave_community,
    update_community,
)
from ..schemas._common import MessageResponse
from ..schemas.community_schema import CommunityActionResponse, CommunityOut, CommunitySummary
from ..utils.auth_utils import get_current_user

router = APIRouter(prefix="/communities", tags=["Communities"])


# ✅ Create a community (multipart: name, description, cover_image)
@router.post(
    "/create",
    response_model=CommunityActionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a community",
)
async def create_community_route(
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    cover_image: Optional[UploadFile] = File(None),
    current_user: dict = Depends(get_current_user),
):
    return await create_community(current_user, name, description, cover_image)


@router.get("/", response_model=List[CommunityOut], summary="List all communities")
async def list_communities_route():
    return await get_all_communities()


# Static prefix before /{community_id}
@router.get("/created-by/{user_id}", response_model=List[CommunitySummary], summary="Communities created by a user")
async def created_by_route(user_id: str):
    return await get_communities_created_by(user_id)


@router.get("/{community_id}", response_model=CommunityOut, summary="Get a community")
async def get_community_route(community_id: str):
    return await get_community_by_id(community_id)


@router.post("/{community_id}/join", response_model=CommunityActionResponse, summary="Join a community")
async def join_route(community_id: str, current_user: dict = Depends(get_current_user)):
    return await join_community(community_id, current_user)


@router.post("/{community_id}/leave", response_model=CommunityActionResponse, summary="Leave a community")
async def leave_route(community_id: str, current_user: dict = Depends(get_current_user)):
    return await leave_community(community_id, current_user)


@router.put("/{community_id}/update", response_model=CommunityActionResponse, summary="Update a community (creator only)")
async def update_route(
    community_id: str,
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    cover_image: Optional[UploadFile] = File(None),
    current_user: dict = Depends(get_current_user),
):
    return await update_community(community_id, current_user, name, description, cover_image)


@router.delete("/{community_id}", response_model=MessageResponse, summary="Delete a community (creator only)")
async def delete_route(community_id: str, current_user: dict = Depends(get_current_user)):
    return await delete_community(community_id, current_user)
