# app/utils/ids.py
from typing import Iterable, List

from bson import ObjectId
from fastapi import HTTPException


def ensure_oid(id_str, detail: str = "Invalid ObjectId") -> ObjectId:
    if isinstance(id_str, ObjectId):
        return id_str
    if not id_str or not ObjectId.is_valid(str(id_str)):
        raise HTTPException(status_code=400, detail=detail)
    return ObjectId(str(id_str))


def same_id(a, b) -> bool:
    return a is not None and b is not None and str(a) == str(b)


def contains_id(ids: Iterable, target) -> bool:
    return any(same_id(i, target) for i in ids or [])


def str_ids(ids: Iterable) -> List[str]:
    return [str(i) for i in ids or []]
