# app/schemas/ally_schema.py
from typing import List, Optional

from pydantic import BaseModel

from ._common import UserPreview


class AddAllyRequest(BaseModel):
    user_id: Optional[str] = None


class AllyListResponse(BaseModel):
    message: str
    allies: List[UserPreview]


class AllyActionResponse(BaseModel):
    message: str
    ally: UserPreview


class AllyCheckResponse(BaseModel):
    is_ally: bool


class AllyBackfillResponse(BaseModel):
    message: str
    created: int
