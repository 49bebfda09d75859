import uuid

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from quillboard.database import Base


class Category(Base):
    """A post category. Referenced by posts through `post_categories`."""

    __tablename__ = "categories"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)

    # Derived from name by services.category_service.slugify
    slug: Mapped[str] = mapped_column(String(60), nullable=False, unique=True, index=True)

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, slug='{self.slug}')>"
