"""
Quillboard Backend: Post Query Builder
=======================================

What:  Translates the listing query string (page, search, category) into
       SQLAlchemy filter clauses and page metadata.
Who:   Used by PostService.list_posts().

Rules:
    page      Missing, non-numeric or < 1 → 1. Pages past the end are not an
              error; they return an empty page with unchanged metadata.
    search    Trimmed. Empty → no filter. Otherwise a case-insensitive
              substring match on title OR content; LIKE wildcards typed by
              the user (% and _) match literally.
    category  Trimmed. Empty → no filter. Otherwise posts linked to that
              category id. A value that is not a UUID matches nothing.

Page metadata:
    totalPages = ceil(totalCount / pageSize), so zero matches → 0 pages.

Query plan (page 2, search + category):
    SELECT posts.* FROM posts
    WHERE (lower(title) LIKE '%term%' OR lower(content) LIKE '%term%')
      AND id IN (SELECT post_id FROM post_categories
                 WHERE category_id = :cid)
    ORDER BY created_at DESC, id DESC
    LIMIT :page_size OFFSET :page_size
"""

import math
import uuid
from dataclasses import dataclass
from typing import Any, List, Optional

from sqlalchemy import ColumnElement, false, func, or_, select

from quillboard.models.post import Post, post_categories


def parse_page(value: Any) -> int:
    """Lenient page parsing: anything unusable becomes page 1."""
    try:
        page = int(str(value).strip())
    except (TypeError, ValueError):
        return 1
    return max(page, 1)


@dataclass(frozen=True)
class PageMeta:
    current_page: int
    total_pages: int
    total_count: int

    @classmethod
    def compute(cls, total_count: int, page: int, page_size: int) -> "PageMeta":
        total_pages = math.ceil(total_count / page_size) if total_count else 0
        return cls(current_page=page, total_pages=total_pages, total_count=total_count)


@dataclass(frozen=True)
class PostQuery:
    """A validated listing request."""

    page: int
    page_size: int
    search: Optional[str] = None
    category: Optional[str] = None

    @classmethod
    def from_params(
        cls,
        page: Any = None,
        search: Optional[str] = None,
        category: Optional[str] = None,
        page_size: int = 10,
    ) -> "PostQuery":
        search_term = (search or "").strip() or None
        category_ref = (category or "").strip() or None
        return cls(
            page=parse_page(page),
            page_size=page_size,
            search=search_term,
            category=category_ref,
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def category_id(self) -> Optional[uuid.UUID]:
        if self.category is None:
            return None
        try:
            return uuid.UUID(self.category)
        except ValueError:
            return None


def build_filters(query: PostQuery) -> List[ColumnElement[bool]]:
    """SQLAlchemy WHERE clauses for a PostQuery (empty list = no filter)."""
    clauses: List[ColumnElement[bool]] = []

    if query.search:
        term = query.search.lower()
        clauses.append(
            or_(
                func.lower(Post.title).contains(term, autoescape=True),
                func.lower(Post.content).contains(term, autoescape=True),
            )
        )

    if query.category is not None:
        category_id = query.category_id
        if category_id is None:
            clauses.append(false())
        else:
            clauses.append(
                Post.id.in_(
                    select(post_categories.c.post_id).where(post_categories.c.category_id == category_id)
                )
            )

    return clauses


def ordering() -> list:
    """Most recent first; id breaks ties so pages never overlap."""
    return [Post.created_at.desc(), Post.id.desc()]
