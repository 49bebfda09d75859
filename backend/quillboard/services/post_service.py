"""
Quillboard Backend: Post Service (Business Logic Orchestrator)
===============================================================

What:  Create, read, list, update and delete posts.
How:   Composes AccessControl (who may write), the query builder (listing),
       FileService (featured images) and the database session.
Who:   Called by the posts route handlers with an explicit Identity.

Write workflow (create / update with an image):
    ┌──────────┐   ┌──────────────┐   ┌──────────────┐   ┌────────────────┐
    │ Validate │──▶│ Validate img │──▶│  Store file  │──▶│ Write + commit │
    │  fields  │   │ (no writes)  │   │  (FileServ)  │   │      (DB)      │
    └──────────┘   └──────────────┘   └──────────────┘   └────────────────┘

    Any failure after the file is written deletes that file again, so a
    post is never saved without its image and an image never outlives a
    failed write. Files replaced or cleared by an update are only removed
    after the commit succeeds.

Concurrency:
    Concurrent updates/deletes of the same post are last-write-wins; no row
    locking is taken.

Error mapping:
    unknown / malformed id         → NotFoundError
    not owner and not admin        → ForbiddenError
    bad fields / category / image  → ValidationError
    SQLAlchemy failures            → DatabaseError (details logged only)
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, List, Optional, Tuple, Union

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from quillboard.exceptions import DatabaseError, NotFoundError, QuillboardError, ValidationError
from quillboard.models.category import Category
from quillboard.models.comment import Comment
from quillboard.models.post import Post
from quillboard.schemas.post import (
    AuthorSummary,
    CategorySummary,
    PostResponse,
    PostSubmission,
)
from quillboard.services.access_control import Identity, access_control
from quillboard.services.file_service import file_service
from quillboard.services.query_builder import PageMeta, PostQuery, build_filters, ordering
from quillboard.validators import validate_post_fields

logger = logging.getLogger(__name__)

PostId = Union[str, uuid.UUID]


def parse_post_id(post_id: PostId) -> uuid.UUID:
    """Path id → UUID. A malformed id is reported as not found."""
    if isinstance(post_id, uuid.UUID):
        return post_id
    try:
        return uuid.UUID(str(post_id))
    except ValueError:
        raise NotFoundError(resource="post", resource_id=str(post_id))


def normalize_category_ids(raw: Any) -> List[uuid.UUID]:
    """
    Accepts a list of ids, a comma-separated string, or a list of expanded
    category objects ({"id": ...}) as sent back by an edit form.
    Duplicates are dropped; order is preserved.
    """
    if raw is None or raw == "":
        return []
    if isinstance(raw, str):
        items: List[Any] = raw.split(",")
    elif isinstance(raw, (list, tuple)):
        items = list(raw)
    else:
        raise ValidationError(message="Categories must be a list of category ids", field="categories")

    ids: List[uuid.UUID] = []
    for item in items:
        if isinstance(item, dict):
            item = item.get("id")
        text = str(item).strip() if item is not None else ""
        if not text:
            continue
        try:
            category_id = uuid.UUID(text)
        except ValueError:
            raise ValidationError(
                message=f"'{text}' is not a valid category id",
                field="categories",
            )
        if category_id not in ids:
            ids.append(category_id)
    return ids


class PostService:
    """
    Business logic layer for posts.

    Every mutating method commits explicitly inside its own try block so
    that file cleanup can react to a failed commit.
    """

    # ── Loading & Expansion ───────────────────────────────────────────────

    async def _load_post(self, db: AsyncSession, post_id: PostId, refresh: bool = False) -> Post:
        """
        Fetch one post with author and categories eagerly loaded.

        Args:
            refresh: Re-read columns of an instance already in the session
                     (used after a commit to return what was stored).
        """
        pid = parse_post_id(post_id)
        stmt = (
            select(Post)
            .options(selectinload(Post.author), selectinload(Post.categories))
            .where(Post.id == pid)
        )
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)

        result = await db.execute(stmt)
        post = result.scalar_one_or_none()
        if post is None:
            raise NotFoundError(resource="post", resource_id=str(pid))
        return post

    def _to_response(self, post: Post) -> PostResponse:
        return PostResponse(
            id=post.id,
            title=post.title,
            content=post.content,
            excerpt=post.excerpt,
            featured_image=file_service.public_url(post.featured_image),
            categories=[CategorySummary.model_validate(c) for c in post.categories],
            author=AuthorSummary.model_validate(post.author),
            created_at=post.created_at,
            updated_at=post.updated_at,
        )

    async def _resolve_categories(self, db: AsyncSession, raw: Any) -> List[Category]:
        """Load the referenced categories; any unknown id is a ValidationError."""
        ids = normalize_category_ids(raw)
        if not ids:
            return []

        result = await db.execute(select(Category).where(Category.id.in_(ids)))
        found = {category.id: category for category in result.scalars().all()}

        missing = [str(cid) for cid in ids if cid not in found]
        if missing:
            raise ValidationError(
                message=f"Unknown category id(s): {', '.join(missing)}",
                field="categories",
                context={"missing": missing},
            )
        return [found[cid] for cid in ids]

    # ── Read ──────────────────────────────────────────────────────────────

    async def get_post(self, db: AsyncSession, post_id: PostId) -> PostResponse:
        """
        Retrieve a single post with expanded references.

        Raises:
            NotFoundError: Post id is malformed or does not exist (→ 404)
            DatabaseError: Query execution failed (→ 500)
        """
        try:
            post = await self._load_post(db, post_id)
        except NotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error fetching post %s: %s", post_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the post. Please try again.",
                context={"post_id": str(post_id)},
            )
        return self._to_response(post)

    async def list_posts(
        self,
        db: AsyncSession,
        query: PostQuery,
    ) -> Tuple[List[PostResponse], PageMeta]:
        """
        One page of posts, newest first, plus page metadata.

        Always succeeds for well-formed queries: no matches or a page past
        the end yields an empty list.
        """
        filters = build_filters(query)
        try:
            count_result = await db.execute(
                select(func.count()).select_from(Post).where(*filters)
            )
            total_count = count_result.scalar() or 0

            posts: List[Post] = []
            if query.offset < total_count:
                result = await db.execute(
                    select(Post)
                    .options(selectinload(Post.author), selectinload(Post.categories))
                    .where(*filters)
                    .order_by(*ordering())
                    .offset(query.offset)
                    .limit(query.page_size)
                )
                posts = list(result.scalars().all())

        except SQLAlchemyError as e:
            logger.error("Database error listing posts: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve posts. Please try again.",
                context={"error_type": type(e).__name__},
            )

        meta = PageMeta.compute(total_count, query.page, query.page_size)
        return [self._to_response(post) for post in posts], meta

    # ── Create ────────────────────────────────────────────────────────────

    async def create_post(
        self,
        db: AsyncSession,
        identity: Identity,
        submission: PostSubmission,
    ) -> PostResponse:
        """
        Create a post owned by `identity`.

        Any `author` the client sent never reaches this method; ownership
        comes only from the identity.

        Raises:
            ValidationError: field, category or image problems (nothing written)
            FileStorageError / DatabaseError: storage failures (file removed)
        """
        fields = submission.fields
        cleaned = validate_post_fields(fields)
        categories = await self._resolve_categories(db, fields.get("categories"))

        if fields.get("featured_image") not in (None, ""):
            raise ValidationError(
                message="A featured image can only be set by uploading an image file",
                field="featuredImage",
            )

        extension: Optional[str] = None
        if submission.image is not None:
            image = submission.image
            extension = file_service.validate_image(image.filename, image.content_type, image.content)

        post_id = uuid.uuid4()
        stored_path: Optional[str] = None
        try:
            if submission.image is not None:
                _, stored_path = await file_service.store_file(submission.image.content, extension)

            now = datetime.now(timezone.utc)
            post = Post(
                id=post_id,
                title=cleaned["title"],
                content=cleaned["content"],
                excerpt=cleaned["excerpt"],
                featured_image=stored_path,
                author_id=identity.id,
                created_at=now,
                updated_at=now,
            )
            post.categories = categories
            db.add(post)
            await db.commit()

        except Exception as e:
            await self._abort_write(db, stored_path)
            self._reraise(e, "create", post_id)

        logger.info("Post %s created by user %s", post_id, identity.id)
        return self._to_response(await self._load_post(db, post_id, refresh=True))

    # ── Update ────────────────────────────────────────────────────────────

    async def update_post(
        self,
        db: AsyncSession,
        identity: Identity,
        post_id: PostId,
        submission: PostSubmission,
    ) -> PostResponse:
        """
        Partially update a post. Only title, content, excerpt, categories
        and featuredImage can change; author and createdAt never do.

        featuredImage in the body:
            null or ""          → remove the current image
            the current value   → no change
            anything else       → ValidationError (upload a file instead)
        """
        post = await self._load_post(db, post_id)
        access_control.ensure_can_modify(identity, post)

        fields = submission.fields
        cleaned = validate_post_fields(fields, partial=True)

        categories: Optional[List[Category]] = None
        if "categories" in fields:
            categories = await self._resolve_categories(db, fields["categories"])

        clear_image = False
        if "featured_image" in fields:
            requested = fields["featured_image"]
            if requested in (None, ""):
                clear_image = True
            elif requested not in (post.featured_image, file_service.public_url(post.featured_image)):
                raise ValidationError(
                    message="A featured image can only be set by uploading an image file",
                    field="featuredImage",
                )

        extension: Optional[str] = None
        if submission.image is not None:
            image = submission.image
            extension = file_service.validate_image(image.filename, image.content_type, image.content)

        pid = post.id
        previous_image = post.featured_image
        stored_path: Optional[str] = None
        try:
            if submission.image is not None:
                _, stored_path = await file_service.store_file(submission.image.content, extension)

            for name, value in cleaned.items():
                setattr(post, name, value)
            if categories is not None:
                post.categories = categories
            if stored_path is not None:
                post.featured_image = stored_path
            elif clear_image:
                post.featured_image = None
            post.updated_at = datetime.now(timezone.utc)

            await db.commit()

        except Exception as e:
            await self._abort_write(db, stored_path)
            self._reraise(e, "update", pid)

        if previous_image and previous_image != post.featured_image:
            await file_service.delete_image(previous_image)

        logger.info("Post %s updated by user %s", pid, identity.id)
        return self._to_response(await self._load_post(db, pid, refresh=True))

    # ── Delete ────────────────────────────────────────────────────────────

    async def delete_post(self, db: AsyncSession, identity: Identity, post_id: PostId) -> None:
        """
        Permanently delete a post together with its comments and category
        links, then remove its featured image file.
        """
        post = await self._load_post(db, post_id)
        access_control.ensure_can_modify(identity, post)

        pid = post.id
        image = post.featured_image
        try:
            await db.execute(delete(Comment).where(Comment.post_id == pid))
            await db.delete(post)
            await db.commit()
        except Exception as e:
            await self._abort_write(db, None)
            self._reraise(e, "delete", pid)

        await file_service.delete_image(image)
        logger.info("Post %s deleted by user %s", pid, identity.id)

    # ── Failure Handling ──────────────────────────────────────────────────

    async def _abort_write(self, db: AsyncSession, stored_path: Optional[str]) -> None:
        await db.rollback()
        if stored_path:
            await file_service.delete_image(stored_path)

    def _reraise(self, error: Exception, action: str, post_id: uuid.UUID) -> None:
        """Propagate app errors as-is; wrap SQLAlchemy errors in DatabaseError."""
        if isinstance(error, QuillboardError):
            raise error
        if isinstance(error, SQLAlchemyError):
            logger.error("Database error on post %s (%s): %s", post_id, action, str(error), exc_info=True)
            raise DatabaseError(
                message=f"Could not {action} the post. Please try again.",
                context={"post_id": str(post_id), "error_type": type(error).__name__},
            ) from error
        raise error


# ── Singleton Instance ────────────────────────────────────────────────────
post_service = PostService()
