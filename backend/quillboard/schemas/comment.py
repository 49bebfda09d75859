import uuid
from datetime import datetime
from typing import Optional

from quillboard.schemas.common import CamelModel
from quillboard.schemas.post import AuthorSummary


class CommentCreate(CamelModel):
    content: Optional[str] = None


class CommentResponse(CamelModel):
    id: uuid.UUID
    post_id: uuid.UUID
    content: str
    author: AuthorSummary
    created_at: datetime
