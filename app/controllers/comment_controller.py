# app/controllers/comment_controller.py
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import HTTPException
from pymongo import ReturnDocument

from ..db.mongo import comments_collection, posts_collection
from ..models.comment_model import CommentModel
from ..schemas.comment_schema import CommentCreateRequest, CommentOut
from ..utils.ids import contains_id, ensure_oid, same_id, str_ids
from .community_controller import ensure_can_view_post
from .user_controller import load_user_previews

logger = logging.getLogger(__name__)


# ---------------------------
# Helpers
# ---------------------------

async def _to_comment_out(docs: List[dict]) -> List[CommentOut]:
    previews = await load_user_previews(d.get("user") for d in docs)
    return [
        CommentOut(
            id=str(d["_id"]),
            post=str(d["post"]),
            user=previews.get(str(d.get("user"))),
            content=d.get("content", ""),
            parent_comment=str(d["parent_comment"]) if d.get("parent_comment") else None,
            likes=str_ids(d.get("likes")),
            created_at=d.get("created_at"),
        )
        for d in docs
    ]


def build_comment_tree(comments: List[CommentOut]) -> List[CommentOut]:
    """
    Attach replies to their parents in one pass over the post's comments.
    Input is expected newest first; top-level keeps that order, replies read
    oldest first. Replies whose parent is missing surface at the top level.
    """
    by_id: Dict[str, CommentOut] = {c.id: c for c in comments}
    roots: List[CommentOut] = []
    for c in comments:
        parent = by_id.get(c.parent_comment) if c.parent_comment else None
        if parent is None or parent is c:
            roots.append(c)
        else:
            parent.replies.insert(0, c)
    return roots


async def _get_comment_doc(comment_id: str) -> dict:
    oid = ensure_oid(comment_id, "Invalid comment id")
    comment = await comments_collection.find_one({"_id": oid})
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")
    return comment


async def _ensure_can_view_comment(comment: dict, current_user: dict) -> None:
    post = await posts_collection.find_one({"_id": comment.get("post")}, {"community": 1})
    if post:
        await ensure_can_view_post(post, current_user)


# ---------------------------
# Create / Read
# ---------------------------

async def add_comment(post_id: str, data: CommentCreateRequest, current_user: dict) -> dict:
    post_oid = ensure_oid(post_id, "Invalid post id")
    post = await posts_collection.find_one({"_id": post_oid}, {"community": 1})
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    await ensure_can_view_post(post, current_user)

    parent_oid = None
    if data.parent_comment_id:
        parent_oid = ensure_oid(data.parent_comment_id, "Invalid parent comment id")
        parent = await comments_collection.find_one({"_id": parent_oid}, {"post": 1})
        if not parent or not same_id(parent.get("post"), post_oid):
            raise HTTPException(status_code=400, detail="Parent comment does not belong to this post")

    comment = CommentModel(post=post_oid, user=current_user["_id"], content=data.content, parent_comment=parent_oid)
    doc = comment.to_document()
    result = await comments_collection.insert_one(doc)
    doc["_id"] = result.inserted_id

    await posts_collection.update_one({"_id": post_oid}, {"$push": {"comments": result.inserted_id}})

    return {"message": "Comment added", "comment": (await _to_comment_out([doc]))[0]}


async def get_post_comments(post_id: str, current_user: Optional[dict] = None) -> dict:
    post_oid = ensure_oid(post_id, "Invalid post id")
    post = await posts_collection.find_one({"_id": post_oid}, {"community": 1})
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    await ensure_can_view_post(post, current_user)

    docs = [d async for d in comments_collection.find({"post": post_oid}).sort("created_at", -1)]
    flat = await _to_comment_out(docs)
    return {"message": "Comments fetched", "comments": build_comment_tree(flat)}


# ---------------------------
# Like / Unlike
# ---------------------------

async def like_comment(comment_id: str, current_user: dict) -> dict:
    comment = await _get_comment_doc(comment_id)
    await _ensure_can_view_comment(comment, current_user)
    me = current_user["_id"]

    updated = await comments_collection.find_one_and_update(
        {"_id": comment["_id"], "likes": {"$ne": me}},
        {"$push": {"likes": me}},
        return_document=ReturnDocument.AFTER,
    )
    if updated is None:
        raise HTTPException(status_code=400, detail="You already liked this comment")

    return {"message": "Like added", "comment": {"id": str(updated["_id"]), "likes": str_ids(updated.get("likes"))}}


async def unlike_comment(comment_id: str, current_user: dict) -> dict:
    comment = await _get_comment_doc(comment_id)
    await _ensure_can_view_comment(comment, current_user)
    me = current_user["_id"]
    if not contains_id(comment.get("likes"), me):
        raise HTTPException(status_code=400, detail="You have not liked this comment")

    updated = await comments_collection.find_one_and_update(
        {"_id": comment["_id"]},
        {"$pull": {"likes": me}},
        return_document=ReturnDocument.AFTER,
    )
    return {"message": "Like removed", "comment": {"id": str(updated["_id"]), "likes": str_ids(updated.get("likes"))}}


# ---------------------------
# Delete (author only, cascades to replies)
# ---------------------------

async def delete_comment(comment_id: str, current_user: dict) -> dict:
    comment = await _get_comment_doc(comment_id)
    if not same_id(comment.get("user"), current_user["_id"]):
        raise HTTPException(status_code=403, detail="You do not have permission to delete this comment")

    # Collect the whole reply subtree
    to_delete = [comment["_id"]]
    frontier = [comment["_id"]]
    while frontier:
        children = [c["_id"] async for c in comments_collection.find({"parent_comment": {"$in": frontier}}, {"_id": 1})]
        to_delete.extend(children)
        frontier = children

    await comments_collection.delete_many({"_id": {"$in": to_delete}})
    await posts_collection.update_one({"_id": comment["post"]}, {"$pullAll": {"comments": to_delete}})

    logger.info("Comment %s deleted by %s (%d including replies)", comment["_id"], current_user["_id"], len(to_delete))
    return {"message": "Comment deleted"}
