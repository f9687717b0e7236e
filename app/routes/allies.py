# app/routes/allies.py
from fastapi import APIRouter, Depends, status

from ..controllers.ally_controller import (
    add_ally,
    check_ally,
    create_all_allies,
    get_my_allies,
    get_user_allies,
    remove_ally,
)
from ..schemas._common import MessageResponse
from ..schemas.ally_schema import (
    AddAllyRequest,
    AllyActionResponse,
    AllyBackfillResponse,
    AllyCheckResponse,
    AllyListResponse,
)
from ..utils.auth_utils import get_current_user

router = APIRouter(prefix="/allies", tags=["Allies"])


@router.get("/my-allies", response_model=AllyListResponse, summary="List my allies")
async def my_allies_route(user: dict = Depends(get_current_user)):
    return await get_my_allies(user)


@router.post(
    "/add-ally",
    response_model=AllyActionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add an ally",
)
async def add_ally_route(data: AddAllyRequest, user: dict = Depends(get_current_user)):
    return await add_ally(user, data)


@router.delete("/remove-ally/{user_id}", response_model=MessageResponse, summary="Remove an ally")
async def remove_ally_route(user_id: str, user: dict = Depends(get_current_user)):
    return await remove_ally(user, user_id)


# TODO: restrict to admins once users carry a role field
@router.post("/create-all-allies", response_model=AllyBackfillResponse, summary="Make every pair of users allies")
async def create_all_route(user: dict = Depends(get_current_user)):
    return await create_all_allies()


@router.get("/user/{user_id}", response_model=AllyListResponse, summary="List a user's allies")
async def user_allies_route(user_id: str, user: dict = Depends(get_current_user)):
    return await get_user_allies(user_id)


@router.get("/check/{target_user_id}", response_model=AllyCheckResponse, summary="Is this user my ally?")
async def check_route(target_user_id: str, user: dict = Depends(get_current_user)):
    return await check_ally(user, target_user_id)
