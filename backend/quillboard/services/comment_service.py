"""
Quillboard Backend: Comment Service
====================================

What:  Lists and appends comments on a post.
Who:   Called by the comments route handlers.

Comments are append-only; they disappear only when PostService deletes
their post.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from quillboard.exceptions import DatabaseError, NotFoundError
from quillboard.models.comment import Comment
from quillboard.models.post import Post
from quillboard.schemas.comment import CommentResponse
from quillboard.schemas.post import AuthorSummary
from quillboard.services.access_control import Identity
from quillboard.services.post_service import PostId, parse_post_id
from quillboard.validators import validate_comment_content

logger = logging.getLogger(__name__)


class CommentService:

    async def _ensure_post_exists(self, db: AsyncSession, post_id: PostId) -> uuid.UUID:
        pid = parse_post_id(post_id)
        result = await db.execute(select(Post.id).where(Post.id == pid))
        if result.scalar_one_or_none() is None:
            raise NotFoundError(resource="post", resource_id=str(pid))
        return pid

    def _to_response(self, comment: Comment) -> CommentResponse:
        return CommentResponse(
            id=comment.id,
            post_id=comment.post_id,
            content=comment.content,
            author=AuthorSummary.model_validate(comment.author),
            created_at=comment.created_at,
        )

    async def list_comments(self, db: AsyncSession, post_id: PostId) -> List[CommentResponse]:
        """All comments on a post, oldest first."""
        pid = await self._ensure_post_exists(db, post_id)
        try:
            result = await db.execute(
                select(Comment)
                .options(selectinload(Comment.author))
                .where(Comment.post_id == pid)
                .order_by(Comment.created_at.asc(), Comment.id.asc())
            )
            comments = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing comments for post %s: %s", pid, str(e))
            raise DatabaseError(
                message="Could not retrieve comments. Please try again.",
                context={"post_id": str(pid)},
            )
        return [self._to_response(comment) for comment in comments]

    async def add_comment(
        self,
        db: AsyncSession,
        identity: Identity,
        post_id: PostId,
        content: object,
    ) -> CommentResponse:
        """
        Append a comment authored by `identity`.

        Raises:
            NotFoundError: the post does not exist
            ValidationError: empty or overlong content
        """
        pid = await self._ensure_post_exists(db, post_id)
        text = validate_comment_content(content)

        comment_id = uuid.uuid4()
        try:
            db.add(
                Comment(
                    id=comment_id,
                    post_id=pid,
                    author_id=identity.id,
                    content=text,
                    created_at=datetime.now(timezone.utc),
                )
            )
            await db.commit()
            result = await db.execute(
                select(Comment)
                .options(selectinload(Comment.author))
                .where(Comment.id == comment_id)
                .execution_options(populate_existing=True)
            )
            comment = result.scalar_one()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error adding comment to post %s: %s", pid, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save your comment. Please try again.",
                context={"post_id": str(pid)},
            )

        logger.info("Comment %s added to post %s by user %s", comment_id, pid, identity.id)
        return self._to_response(comment)


comment_service = CommentService()
