"""
Quillboard Backend: Token and Access Control Tests
===================================================

What:  Bearer token round trips, rejection of expired/tampered tokens,
       identity resolution against the users table, and the
       owner-or-admin rule.
"""

import uuid
from datetime import timedelta

import jwt
import pytest

from quillboard.config import settings
from quillboard.exceptions import ForbiddenError, UnauthenticatedError
from quillboard.models.post import Post
from quillboard.security import create_access_token, decode_access_token, hash_password, verify_password
from quillboard.services.access_control import Identity, access_control


def _identity(role: str = "user") -> Identity:
    return Identity(id=uuid.uuid4(), name="Someone", email="someone@example.com", role=role)


class TestPasswords:

    def test_hash_and_verify(self):
        hashed = hash_password("secret123")
        assert hashed != "secret123"
        assert verify_password("secret123", hashed)
        assert not verify_password("wrong-pass", hashed)


class TestTokens:

    def test_round_trip(self):
        user_id = uuid.uuid4()
        claims = decode_access_token(create_access_token(user_id, "admin"))
        assert claims["sub"] == str(user_id)
        assert claims["role"] == "admin"

    def test_expired_token_rejected(self):
        token = create_access_token(uuid.uuid4(), "user", expires_delta=timedelta(seconds=-5))
        with pytest.raises(UnauthenticatedError, match="expired"):
            decode_access_token(token)

    def test_tampered_token_rejected(self):
        token = create_access_token(uuid.uuid4(), "user")
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])
        with pytest.raises(UnauthenticatedError, match="Invalid authentication token"):
            decode_access_token(tampered)

    def test_token_signed_with_other_key_rejected(self):
        token = jwt.encode({"sub": str(uuid.uuid4()), "exp": 9999999999}, "another-key", algorithm="HS256")
        with pytest.raises(UnauthenticatedError):
            decode_access_token(token)

    def test_token_without_subject_rejected(self):
        token = jwt.encode({"exp": 9999999999}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
        with pytest.raises(UnauthenticatedError):
            decode_access_token(token)

    def test_garbage_rejected(self):
        with pytest.raises(UnauthenticatedError):
            decode_access_token("not-a-token")


class TestResolveIdentity:

    @pytest.mark.asyncio
    async def test_resolves_seeded_user(self, db_session, author):
        identity = await access_control.resolve_identity(db_session, author.token)
        assert identity == author.identity

    @pytest.mark.asyncio
    async def test_unknown_user_rejected(self, db_session):
        token = create_access_token(uuid.uuid4(), "user")
        with pytest.raises(UnauthenticatedError, match="no longer exists"):
            await access_control.resolve_identity(db_session, token)

    @pytest.mark.asyncio
    async def test_non_uuid_subject_rejected(self, db_session):
        token = jwt.encode(
            {"sub": "alice", "exp": 9999999999},
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(UnauthenticatedError):
            await access_control.resolve_identity(db_session, token)

    @pytest.mark.asyncio
    async def test_role_read_from_database(self, db_session, admin):
        # Token claims "user" but the stored role is admin
        token = create_access_token(admin.id, "user")
        identity = await access_control.resolve_identity(db_session, token)
        assert identity.is_admin


class TestCanModify:

    def test_owner_may_modify(self):
        owner = _identity()
        post = Post(title="T", content="C", author_id=owner.id)
        assert access_control.can_modify(owner, post)
        access_control.ensure_can_modify(owner, post)

    def test_admin_may_modify_any_post(self):
        post = Post(title="T", content="C", author_id=uuid.uuid4())
        assert access_control.can_modify(_identity(role="admin"), post)

    def test_other_user_forbidden(self):
        post = Post(title="T", content="C", author_id=uuid.uuid4())
        other = _identity()
        assert not access_control.can_modify(other, post)
        with pytest.raises(ForbiddenError, match="your own posts"):
            access_control.ensure_can_modify(other, post)

    def test_ensure_admin(self):
        access_control.ensure_admin(_identity(role="admin"))
        with pytest.raises(ForbiddenError):
            access_control.ensure_admin(_identity())
