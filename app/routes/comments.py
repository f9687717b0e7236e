# app/routes/comments.py
from typing import Optional

from fastapi import APIRouter, Depends, status

from ..controllers.comment_controller import (
    add_comment,
    delete_comment,
    get_post_comments,
    like_comment,
    unlike_comment,
)
from ..schemas._common import MessageResponse
from ..schemas.comment_schema import (
    CommentActionResponse,
    CommentCreateRequest,
    CommentLikeResponse,
    CommentListResponse,
)
from ..utils.auth_utils import get_current_user, get_optional_user

router = APIRouter(prefix="/comments", tags=["Comments"])


@router.get("/post/{post_id}", response_model=CommentListResponse, summary="Threaded comments of a post")
async def list_comments_route(post_id: str, current_user: Optional[dict] = Depends(get_optional_user)):
    return await get_post_comments(post_id, current_user)


@router.post(
    "/{post_id}",
    response_model=CommentActionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a post (or reply with parent_comment_id)",
)
async def add_comment_route(
    post_id: str,
    data: CommentCreateRequest,
    current_user: dict = Depends(get_current_user),
):
    return await add_comment(post_id, data, current_user)


@router.post("/{comment_id}/like", response_model=CommentLikeResponse, summary="Like a comment")
async def like_route(comment_id: str, current_user: dict = Depends(get_current_user)):
    return await like_comment(comment_id, current_user)


@router.post("/{comment_id}/unlike", response_model=CommentLikeResponse, summary="Remove my like from a comment")
async def unlike_route(comment_id: str, current_user: dict = Depends(get_current_user)):
    return await unlike_comment(comment_id, current_user)


@router.delete("/{comment_id}", response_model=MessageResponse, summary="Delete a comment and its replies")
async def delete_route(comment_id: str, current_user: dict = Depends(get_current_user)):
    return await delete_comment(comment_id, current_user)
