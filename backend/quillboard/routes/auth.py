"""
Quillboard Backend: Auth Route Handlers
========================================

    POST /api/auth/register   create account, returns token   (public)
    POST /api/auth/login      returns token                   (public)
    GET  /api/auth/me         current user                    (auth)

Clients send the returned token as `Authorization: Bearer <token>`.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from quillboard.database import get_db_session
from quillboard.routes.deps import get_current_identity
from quillboard.schemas.auth import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from quillboard.schemas.common import ApiResponse, ErrorResponse
from quillboard.services.access_control import Identity
from quillboard.services.auth_service import auth_service

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=ApiResponse[TokenResponse],
    responses={400: {"description": "Invalid input or email taken", "model": ErrorResponse}},
    summary="Register a new account",
)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[TokenResponse]:
    result = await auth_service.register(db, payload.name, payload.email, payload.password)
    return ApiResponse[TokenResponse](data=result)


@router.post(
    "/login",
    response_model=ApiResponse[TokenResponse],
    responses={401: {"description": "Invalid email or password", "model": ErrorResponse}},
    summary="Log in with email and password",
)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[TokenResponse]:
    result = await auth_service.login(db, payload.email, payload.password)
    return ApiResponse[TokenResponse](data=result)


@router.get(
    "/me",
    response_model=ApiResponse[UserResponse],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Resolve the current user",
)
async def me(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UserResponse]:
    return ApiResponse[UserResponse](data=await auth_service.get_user(db, identity))
