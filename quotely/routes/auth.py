"""
Quotely API — Auth & Profile Routes
====================================

What:  Signup, login, current user, and profile read/update.
How:   Thin handlers over AuthService; tokens come back in the body and are
       sent by the client as `Authorization: Bearer <token>`.

Routes:
    POST /api/auth/signup              create account → 201 {user, token}
    POST /api/auth/login               → {user, token} | 401
    GET  /api/auth/me                  (auth) → {user}
    GET  /api/user/profile/{user_id}   public profile | 404
    PUT  /api/user/profile             (auth) update own profile
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from quotely.dependencies import get_auth_service, get_current_user
from quotely.exceptions import failure_message
from quotely.schemas.auth import (
    AuthResponse,
    LoginRequest,
    OwnProfileResponse,
    ProfileResponse,
    ProfileUpdateRequest,
    SignupRequest,
    UserResponse,
)
from quotely.schemas.common import ErrorResponse
from quotely.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Auth"])


@router.post(
    "/auth/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": "Invalid input or account exists"}},
    summary="Create an account",
)
async def signup(
    body: SignupRequest,
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    user, token = await service.signup(
        email=body.email,
        password=body.password,
        name=body.name,
        username=body.username,
    )
    return AuthResponse(user=user, token=token)


@router.post(
    "/auth/login",
    response_model=AuthResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
    summary="Exchange email and password for a token",
)
async def login(
    body: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    user, token = await service.login(email=body.email, password=body.password)
    return AuthResponse(user=user, token=token)


@router.get(
    "/auth/me",
    response_model=UserResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Current user",
)
async def me(
    user_id: UUID = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    return UserResponse(user=await service.get_profile(user_id))


@router.get(
    "/user/profile/{user_id}",
    response_model=ProfileResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Public profile",
)
@failure_message("Failed to fetch profile")
async def get_profile(
    user_id: UUID,
    service: AuthService = Depends(get_auth_service),
) -> ProfileResponse:
    return ProfileResponse(profile=await service.get_profile(user_id))


@router.put(
    "/user/profile",
    response_model=OwnProfileResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
    summary="Update own profile",
    description="Only name, username, avatar_url and bio can be changed.",
)
@failure_message("Failed to update profile")
async def update_profile(
    body: ProfileUpdateRequest,
    user_id: UUID = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> OwnProfileResponse:
    profile = await service.update_profile(user_id, body.model_dump(exclude_none=True))
    return OwnProfileResponse(profile=profile)
