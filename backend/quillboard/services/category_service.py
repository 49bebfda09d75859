"""
Quillboard Backend: Category Service
=====================================

What:  Lists categories and lets administrators create new ones.
How:   The slug is derived from the name; both must be unique, which is
       checked up front and again by the database's unique constraints.
"""

import logging
import re
import uuid
from typing import List

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from quillboard.exceptions import DatabaseError, ValidationError
from quillboard.models.category import Category
from quillboard.schemas.category import CategoryResponse
from quillboard.services.access_control import Identity, access_control
from quillboard.validators import validate_category_name

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """'Web Dev & Design' → 'web-dev-design'."""
    return _NON_ALNUM.sub("-", name.lower()).strip("-")


class CategoryService:

    async def list_categories(self, db: AsyncSession) -> List[CategoryResponse]:
        try:
            result = await db.execute(select(Category).order_by(Category.name.asc()))
            categories = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing categories: %s", str(e))
            raise DatabaseError(message="Could not retrieve categories. Please try again.")
        return [CategoryResponse.model_validate(category) for category in categories]

    async def create_category(
        self,
        db: AsyncSession,
        identity: Identity,
        name: object,
    ) -> CategoryResponse:
        """
        Create a category (admins only).

        Raises:
            ForbiddenError: identity is not an admin
            ValidationError: bad name, empty slug, duplicate name or slug
        """
        access_control.ensure_admin(identity)

        clean_name = validate_category_name(name)
        slug = slugify(clean_name)
        if not slug:
            raise ValidationError(
                message="Category name must contain at least one letter or digit",
                field="name",
            )

        existing = await db.execute(
            select(Category.id).where(
                or_(func.lower(Category.name) == clean_name.lower(), Category.slug == slug)
            )
        )
        if existing.first() is not None:
            raise ValidationError(
                message=f"A category named '{clean_name}' already exists",
                field="name",
                context={"slug": slug},
            )

        category = Category(id=uuid.uuid4(), name=clean_name, slug=slug)
        try:
            db.add(category)
            await db.commit()
        except IntegrityError:
            # Lost a race with a concurrent create of the same name
            await db.rollback()
            raise ValidationError(
                message=f"A category named '{clean_name}' already exists",
                field="name",
                context={"slug": slug},
            )
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error creating category %s: %s", slug, str(e), exc_info=True)
            raise DatabaseError(message="Could not create the category. Please try again.")

        logger.info("Category %s (%s) created by user %s", category.id, slug, identity.id)
        return CategoryResponse.model_validate(category)


category_service = CategoryService()
