import uuid
from typing import Optional

from quillboard.schemas.common import CamelModel


class CategoryCreate(CamelModel):
    name: Optional[str] = None


class CategoryResponse(CamelModel):
    id: uuid.UUID
    name: str
    slug: str
