"""
Quillboard Backend: Comments Route Handlers
============================================

    GET  /api/posts/{id}/comments   list, oldest first   (public)
    POST /api/posts/{id}/comments   add a comment        (auth)
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from quillboard.database import get_db_session
from quillboard.routes.deps import get_current_identity
from quillboard.schemas.comment import CommentCreate, CommentResponse
from quillboard.schemas.common import ApiResponse, ErrorResponse
from quillboard.services.access_control import Identity
from quillboard.services.comment_service import comment_service

router = APIRouter(prefix="/api/posts", tags=["Comments"])


@router.get(
    "/{post_id}/comments",
    response_model=ApiResponse[List[CommentResponse]],
    responses={404: {"description": "Post not found", "model": ErrorResponse}},
    summary="List comments on a post",
)
async def list_comments(
    post_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[CommentResponse]]:
    comments = await comment_service.list_comments(db, post_id)
    return ApiResponse[List[CommentResponse]](data=comments)


@router.post(
    "/{post_id}/comments",
    status_code=201,
    response_model=ApiResponse[CommentResponse],
    responses={
        400: {"description": "Empty or overlong comment", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Post not found", "model": ErrorResponse},
    },
    summary="Add a comment to a post",
)
async def add_comment(
    post_id: str,
    payload: CommentCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[CommentResponse]:
    comment = await comment_service.add_comment(db, identity, post_id, payload.content)
    return ApiResponse[CommentResponse](data=comment)
