"""
Quillboard Backend: Post SQLAlchemy Model
==========================================

What:  ORM model for the `posts` table and the `post_categories` association.
Who:   Written by PostService; filtered and paged by the query builder.

Table Design Rationale:
    - author_id is set once at creation from the authenticated identity and
      never reassigned by any service path
    - featured_image holds the path relative to STORAGE_ROOT
      (YYYY/MM/DD/<uuid>.<ext>); the public URL is built at response time
    - updated_at is written explicitly by every mutation in PostService
    - categories live in an association table; references are not embedded

    Index on created_at DESC:
        The listing endpoint always orders newest first.

Relationship loading:
    `author` and `categories` are loaded with an explicit selectinload in
    PostService; the async session cannot lazy-load them on attribute access.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Table, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quillboard.database import Base


post_categories = Table(
    "post_categories",
    Base.metadata,
    Column(
        "post_id",
        Uuid,
        ForeignKey("posts.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "category_id",
        Uuid,
        ForeignKey("categories.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Post(Base):
    """
    A blog post owned by its author.

    Lifecycle:
        absent → created (author, createdAt, updatedAt set)
               → updated any number of times (updatedAt refreshed)
               → deleted (comments and category links removed with it)
    """

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    title: Mapped[str] = mapped_column(String(100), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    excerpt: Mapped[Optional[str]] = mapped_column(String(500), nullable=True, default=None)

    featured_image: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        default=None,
        comment="Relative path from storage root to the featured image",
    )

    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    author = relationship("User")

    categories = relationship(
        "Category",
        secondary=post_categories,
        order_by="Category.name",
    )

    __table_args__ = (
        Index("idx_posts_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, title='{self.title[:30]}', author_id={self.author_id})>"
