"""
ORM models. Importing this package registers every table on `Base.metadata`
and lets string-based relationships ("User", "Category") resolve.
"""

from quillboard.models.user import User, UserRole
from quillboard.models.category import Category
from quillboard.models.post import Post, post_categories
from quillboard.models.comment import Comment

__all__ = [
    "User",
    "UserRole",
    "Category",
    "Post",
    "post_categories",
    "Comment",
]
