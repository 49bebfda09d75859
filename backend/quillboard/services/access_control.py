"""
Quillboard Backend: Access Control
===================================

What:  Turns a bearer credential into an Identity and decides whether an
       Identity may mutate a post.
Who:   The route dependencies call resolve_identity(); PostService and
       CategoryService call the ensure_* checks.

Decision table:
    no / bad / expired token        → UnauthenticatedError (401)
    token for a deleted user        → UnauthenticatedError (401)
    valid identity, not owner/admin → ForbiddenError (403)
    owner or admin                  → allowed

Identity is a small immutable value handed to each service call. Role is
read from the users table on every request, so a demotion takes effect
without waiting for the token to expire.
"""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from quillboard.exceptions import ForbiddenError, UnauthenticatedError
from quillboard.models.post import Post
from quillboard.models.user import User, UserRole
from quillboard.security import decode_access_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """The authenticated user behind a request."""

    id: uuid.UUID
    name: str
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @classmethod
    def from_user(cls, user: User) -> "Identity":
        return cls(id=user.id, name=user.name, email=user.email, role=user.role)


class AccessControl:
    """Credential resolution and the owner-or-admin predicate."""

    async def resolve_identity(self, db: AsyncSession, token: str) -> Identity:
        """
        Decode a bearer token and load its user.

        Raises:
            UnauthenticatedError: invalid token, bad subject, unknown user.
        """
        claims = decode_access_token(token)

        try:
            user_id = uuid.UUID(str(claims["sub"]))
        except (KeyError, ValueError):
            raise UnauthenticatedError(message="Invalid authentication token")

        result = await db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            logger.info("Token subject %s no longer exists", user_id)
            raise UnauthenticatedError(message="The user for this token no longer exists")

        return Identity.from_user(user)

    def can_modify(self, identity: Identity, post: Post) -> bool:
        return post.author_id == identity.id or identity.is_admin

    def ensure_can_modify(self, identity: Identity, post: Post) -> None:
        if not self.can_modify(identity, post):
            logger.warning(
                "User %s denied write access to post %s owned by %s",
                identity.id,
                post.id,
                post.author_id,
            )
            raise ForbiddenError(
                message="You can only modify your own posts",
                context={"post_id": str(post.id), "user_id": str(identity.id)},
            )

    def ensure_admin(self, identity: Identity) -> None:
        if not identity.is_admin:
            raise ForbiddenError(message="This action requires an administrator")


access_control = AccessControl()
