from fastapi import APIRouter, Depends, status

from ..controllers.auth_controller import (
    get_authenticated_user,
    login_with_email_password,
    register_user,
)
from ..schemas.auth_schema import AuthResponse, LoginRequest, MeResponse, RegisterRequest
from ..utils.auth_utils import get_current_user

router = APIRouter(prefix="/auth", tags=["Auth"])


# ---------------------------
# Signup / Login
# ---------------------------

@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def register(payload: RegisterRequest):
    return await register_user(payload)


@router.post("/login", response_model=AuthResponse, summary="Login with email and password")
async def login(payload: LoginRequest):
    return await login_with_email_password(payload.email, payload.password)


# ---------------------
# Authenticated helpers
# ---------------------
@router.get("/me", response_model=MeResponse, summary="Get authenticated user")
async def get_me(current_user: dict = Depends(get_current_user)):
    return await get_authenticated_user(current_user)
