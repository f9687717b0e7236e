# app/schemas/_common.py
from typing import Optional

from pydantic import BaseModel
from typing_extensions import Annotated
from pydantic.functional_validators import BeforeValidator

# Converts MongoDB ObjectId to string during serialization
PyObjectId = Annotated[str, BeforeValidator(lambda x: str(x))]


class MessageResponse(BaseModel):
    message: str


class UserPreview(BaseModel):
    id: PyObjectId
    name: Optional[str] = None
    username: Optional[str] = None
    profile_picture: Optional[str] = None
    bio: Optional[str] = None
    category: Optional[str] = None
