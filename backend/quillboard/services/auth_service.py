"""
Quillboard Backend: Auth Service
=================================

What:  Registration, login and current-user lookup.
How:   Passwords are hashed with bcrypt (passlib); successful register and
       login both return a signed bearer token plus the public user.
Who:   Called by the auth route handlers.

Login failures share one message whether the email is unknown or the
password is wrong.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from quillboard.config import settings
from quillboard.exceptions import DatabaseError, NotFoundError, UnauthenticatedError, ValidationError
from quillboard.models.user import User, UserRole
from quillboard.schemas.auth import TokenResponse, UserResponse
from quillboard.security import create_access_token, hash_password, verify_password
from quillboard.services.access_control import Identity
from quillboard.validators import validate_registration

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


class AuthService:

    def _issue(self, user: User) -> TokenResponse:
        return TokenResponse(
            token=create_access_token(user.id, user.role),
            user=UserResponse.model_validate(user),
        )

    async def _find_by_email(self, db: AsyncSession, email: str):
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def register(self, db: AsyncSession, name: object, email: object, password: object) -> TokenResponse:
        """
        Create a regular user and sign them in.

        Raises:
            ValidationError: bad input or an email that is already registered
        """
        data = validate_registration(name, email, password, settings.password_min_length)

        if await self._find_by_email(db, data["email"]) is not None:
            raise ValidationError(message="An account with this email already exists", field="email")

        user = User(
            id=uuid.uuid4(),
            name=data["name"],
            email=data["email"],
            password_hash=hash_password(data["password"]),
            role=UserRole.USER.value,
        )
        try:
            db.add(user)
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ValidationError(message="An account with this email already exists", field="email")
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error registering user: %s", str(e), exc_info=True)
            raise DatabaseError(message="Could not create your account. Please try again.")

        logger.info("User %s registered", user.id)
        return self._issue(user)

    async def login(self, db: AsyncSession, email: object, password: object) -> TokenResponse:
        """
        Raises:
            UnauthenticatedError: unknown email or wrong password
        """
        if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
            raise ValidationError(message="Email and password are required")

        user = await self._find_by_email(db, email.strip().lower())
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Failed login attempt for %s", email.strip().lower())
            raise UnauthenticatedError(message=INVALID_CREDENTIALS)

        return self._issue(user)

    async def get_user(self, db: AsyncSession, identity: Identity) -> UserResponse:
        result = await db.execute(select(User).where(User.id == identity.id))
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(identity.id))
        return UserResponse.model_validate(user)


auth_service = AuthService()
