import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from quillboard.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    # Types are loose on purpose; quillboard.validators produces the 400s
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserResponse(CamelModel):
    """Public view of a user. Never includes the password hash."""

    id: uuid.UUID
    name: str
    email: str
    role: str
    created_at: datetime


class TokenResponse(CamelModel):
    token: str = Field(description="Bearer token for the Authorization header")
    token_type: str = Field(default="bearer")
    user: UserResponse
