from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from quillboard.database import get_db_session
from quillboard.routes.deps import get_current_identity
from quillboard.schemas.category import CategoryCreate, CategoryResponse
from quillboard.schemas.common import ApiResponse, ErrorResponse
from quillboard.services.access_control import Identity
from quillboard.services.category_service import category_service

router = APIRouter(prefix="/api/categories", tags=["Categories"])


@router.get(
    "",
    response_model=ApiResponse[List[CategoryResponse]],
    summary="List all categories",
)
async def list_categories(
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[CategoryResponse]]:
    return ApiResponse[List[CategoryResponse]](data=await category_service.list_categories(db))


@router.post(
    "",
    status_code=201,
    response_model=ApiResponse[CategoryResponse],
    responses={
        400: {"description": "Invalid or duplicate name", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        403: {"description": "Admin role required", "model": ErrorResponse},
    },
    summary="Create a category (admin only)",
)
async def create_category(
    payload: CategoryCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[CategoryResponse]:
    category = await category_service.create_category(db, identity, payload.name)
    return ApiResponse[CategoryResponse](data=category)
