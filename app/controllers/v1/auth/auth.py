from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from app.models.auth.auth import AuthResponse, LoginPayload, PasswordUpdate, RegisterPayload, TokenResponse
from app.models.user.user import UserDetailsUpdate, UserResponse
from app.services.auth.auth import get_me, login_user, register_user, update_details, update_password
from app.services.auth.guards import require
from app.services.auth.policies import AUTHENTICATED, PUBLIC

router = APIRouter()


@router.post(
    "/api/auth/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    response_model_exclude_none=True,
    dependencies=[Depends(require(PUBLIC))],
)
async def register(payload: RegisterPayload):
    return await register_user(payload)


@router.post(
    "/api/auth/login",
    response_model=AuthResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require(PUBLIC))],
)
async def login(payload: LoginPayload):
    return await login_user(payload)


@router.get("/api/auth/me", response_model=UserResponse, response_model_exclude_none=True)
async def me(user: Dict[str, Any] = Depends(require(AUTHENTICATED))):
    return await get_me(user)


@router.put("/api/auth/updatedetails", response_model=UserResponse, response_model_exclude_none=True)
async def change_details(payload: UserDetailsUpdate, user: Dict[str, Any] = Depends(require(AUTHENTICATED))):
    return await update_details(user, payload)


@router.put("/api/auth/updatepassword", response_model=TokenResponse, response_model_exclude_none=True)
async def change_password(payload: PasswordUpdate, user: Dict[str, Any] = Depends(require(AUTHENTICATED))):
    return await update_password(user, payload)
