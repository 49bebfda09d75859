"""
Quillboard Backend: Password Hashing and Bearer Tokens
=======================================================

What:  bcrypt password hashing (passlib) and HS256 JWT issuance/decoding (PyJWT).
Who:   AuthService hashes and verifies passwords and issues tokens;
       AccessControl decodes tokens into identities.

Token claims:
    sub:  user id (string UUID)
    role: role at issue time (informational; authorization re-reads the user)
    iat:  issued-at
    exp:  expiry, `access_token_expire_minutes` after issue
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from passlib.context import CryptContext

from quillboard.config import settings
from quillboard.exceptions import UnauthenticatedError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.password_hash_rounds,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    user_id: uuid.UUID,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Issue a signed bearer token for the given user."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    claims = {
        "sub": str(user_id),
        "role": role,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify signature and expiry and return the token claims.

    Raises:
        UnauthenticatedError: token expired, malformed, badly signed, or
        missing the `sub`/`exp` claims.
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise UnauthenticatedError(message="Your session has expired. Please log in again.")
    except jwt.InvalidTokenError as e:
        logger.debug("Rejected bearer token: %s", str(e))
        raise UnauthenticatedError(
            message="Invalid authentication token",
            context={"reason": type(e).__name__},
        )
