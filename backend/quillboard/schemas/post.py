"""
Quillboard Backend: Post Schemas
=================================

What:  Response models for posts with their expanded references, plus the
       parsed form of a create/update submission.
Who:   Built by PostService; returned by the posts routes.

Reference expansion:
    author     → {id, name}
    categories → [{id, name, slug}, ...]
    featuredImage is the public URL (upload prefix + stored relative path).
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from quillboard.schemas.common import CamelModel


class AuthorSummary(CamelModel):
    id: uuid.UUID
    name: str


class CategorySummary(CamelModel):
    id: uuid.UUID
    name: str
    slug: str


class PostResponse(CamelModel):
    """Full post representation returned by every post endpoint."""

    id: uuid.UUID = Field(description="Unique post identifier")
    title: str
    content: str
    excerpt: Optional[str] = None
    featured_image: Optional[str] = Field(
        default=None,
        description="Public URL of the featured image, if any",
    )
    categories: List[CategorySummary] = Field(default_factory=list)
    author: AuthorSummary
    created_at: datetime
    updated_at: datetime


@dataclass
class UploadedImage:
    """An image file that arrived with a create/update request."""

    filename: str
    content_type: str
    content: bytes


@dataclass
class PostSubmission:
    """
    The fields a client sent for a create or update, already pulled out of a
    JSON or multipart body.

    `fields` only contains keys the client actually sent, using model
    attribute names (title, content, excerpt, categories, featured_image).
    That makes partial updates a plain "merge what is present".
    """

    fields: Dict[str, Any] = field(default_factory=dict)
    image: Optional[UploadedImage] = None


class DeletedResponse(CamelModel):
    id: uuid.UUID
    deleted: bool = True
