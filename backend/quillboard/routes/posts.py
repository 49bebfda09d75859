"""
Quillboard Backend: Posts Route Handlers
=========================================

What:  HTTP surface for posts.

    GET    /api/posts              paginated / filtered list      (public)
    GET    /api/posts/{id}         single post, references expanded (public)
    POST   /api/posts              create (JSON or multipart)     (auth)
    PUT    /api/posts/{id}         partial update                 (owner/admin)
    DELETE /api/posts/{id}         delete                         (owner/admin)

How:   Extracts query params, body and identity, then delegates to
       PostService. Errors are formatted by the global handlers in main.py.
"""

import logging

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from quillboard.config import settings
from quillboard.database import get_db_session
from quillboard.routes.deps import get_current_identity, read_post_submission
from quillboard.schemas.common import ApiResponse, ErrorResponse, PageResponse
from quillboard.schemas.post import DeletedResponse, PostResponse, PostSubmission
from quillboard.services.access_control import Identity
from quillboard.services.post_service import post_service
from quillboard.services.query_builder import PostQuery

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/posts", tags=["Posts"])

_AUTH_ERRORS = {
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Not the owner and not an admin", "model": ErrorResponse},
    404: {"description": "Post not found", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=PageResponse[PostResponse],
    summary="List posts with pagination, search and category filter",
    description=(
        "Returns one page of posts, newest first. `search` matches title or content "
        "case-insensitively; `category` restricts to posts in that category. "
        "A page past the last one returns an empty list."
    ),
)
async def list_posts(
    response: Response,
    page: str | None = Query(default=None, description="1-based page number (values below 1 mean 1)"),
    search: str | None = Query(default=None, description="Free-text search in title and content"),
    category: str | None = Query(default=None, description="Category id to filter by"),
    db: AsyncSession = Depends(get_db_session),
) -> PageResponse[PostResponse]:
    query = PostQuery.from_params(
        page=page,
        search=search,
        category=category,
        page_size=settings.page_size,
    )
    posts, meta = await post_service.list_posts(db, query)

    response.headers["X-Total-Count"] = str(meta.total_count)

    return PageResponse[PostResponse](
        data=posts,
        current_page=meta.current_page,
        total_pages=meta.total_pages,
        total_count=meta.total_count,
    )


@router.get(
    "/{post_id}",
    response_model=ApiResponse[PostResponse],
    responses={404: {"description": "Post not found", "model": ErrorResponse}},
    summary="Get a single post by ID",
)
async def get_post(
    post_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[PostResponse]:
    return ApiResponse[PostResponse](data=await post_service.get_post(db, post_id))


@router.post(
    "",
    status_code=201,
    response_model=ApiResponse[PostResponse],
    responses={
        400: {"description": "Invalid fields, categories or image", "model": ErrorResponse},
        401: _AUTH_ERRORS[401],
    },
    summary="Create a post",
    description=(
        "Accepts JSON, or multipart/form-data with an optional `image` file "
        "(JPEG, PNG, GIF or WebP). The author is always the authenticated user."
    ),
)
async def create_post(
    identity: Identity = Depends(get_current_identity),
    submission: PostSubmission = Depends(read_post_submission),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[PostResponse]:
    post = await post_service.create_post(db, identity, submission)
    return ApiResponse[PostResponse](data=post)


@router.put(
    "/{post_id}",
    response_model=ApiResponse[PostResponse],
    responses={400: {"description": "Invalid input", "model": ErrorResponse}, **_AUTH_ERRORS},
    summary="Update a post",
)
async def update_post(
    post_id: str,
    identity: Identity = Depends(get_current_identity),
    submission: PostSubmission = Depends(read_post_submission),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[PostResponse]:
    post = await post_service.update_post(db, identity, post_id, submission)
    return ApiResponse[PostResponse](data=post)


@router.delete(
    "/{post_id}",
    response_model=ApiResponse[DeletedResponse],
    responses=_AUTH_ERRORS,
    summary="Delete a post and its comments",
)
async def delete_post(
    post_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[DeletedResponse]:
    await post_service.delete_post(db, identity, post_id)
    # post_id parsed successfully above, so it is a valid UUID string
    return ApiResponse[DeletedResponse](data=DeletedResponse(id=post_id))
