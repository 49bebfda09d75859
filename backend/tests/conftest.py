"""
Quillboard Backend: Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Each test gets a fresh in-memory SQLite database (aiosqlite) with the
       full schema, an isolated image storage directory, and an HTTPX
       AsyncClient wired to the FastAPI app through ASGITransport.

Fixture Hierarchy (all function-scoped):
    ├── db_engine:        in-memory engine with Base.metadata created
    ├── session_factory:  async_sessionmaker bound to db_engine
    ├── db_session:       one AsyncSession for service-level tests
    ├── storage_dir:      tmp directory patched into the file_service singleton
    ├── test_client:      AsyncClient; get_db_session overridden to db_engine
    └── author / other_user / admin: seeded users with bearer tokens
"""

import os
import tempfile

# Settings are read at import time, so the environment must be in place
# before anything from quillboard is imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="quillboard_test_")
os.environ["JWT_SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["PAGE_SIZE"] = "5"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"

import uuid
from dataclasses import dataclass
from typing import AsyncGenerator, Dict

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import quillboard.models  # noqa: F401  (registers every table)
from quillboard import database
from quillboard.database import Base, get_db_session
from quillboard.models.user import User, UserRole
from quillboard.security import create_access_token, hash_password
from quillboard.services.access_control import Identity
from quillboard.services.file_service import file_service

TEST_PASSWORD = "secret123"


@dataclass
class SeededUser:
    """A user inserted straight into the database, with a valid token."""

    identity: Identity
    token: str

    @property
    def id(self) -> uuid.UUID:
        return self.identity.id

    @property
    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """
    In-memory SQLite shared through a StaticPool, so every session in a
    test sees the same database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# Storage
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture(autouse=True)
def storage_dir(tmp_path, monkeypatch):
    """Fresh upload directory per test, patched into the shared FileService."""
    root = (tmp_path / "uploads").resolve()
    root.mkdir()
    monkeypatch.setattr(file_service, "storage_root", root)
    return root


@pytest.fixture
def stored_files(storage_dir):
    """Callable listing every regular file currently under the storage root."""
    def _list():
        return [p for p in storage_dir.rglob("*") if p.is_file()]
    return _list


@pytest.fixture
def png_bytes():
    """PNG signature plus padding; validation trusts the declared type."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


# ══════════════════════════════════════════════════════════════════════════
# Users
# ══════════════════════════════════════════════════════════════════════════

async def seed_user(session_factory, name: str, email: str, role: str = UserRole.USER.value) -> SeededUser:
    async with session_factory() as session:
        user = User(
            id=uuid.uuid4(),
            name=name,
            email=email,
            password_hash=hash_password(TEST_PASSWORD),
            role=role,
        )
        session.add(user)
        await session.commit()
        identity = Identity.from_user(user)
    return SeededUser(identity=identity, token=create_access_token(identity.id, identity.role))


@pytest_asyncio.fixture
async def author(session_factory) -> SeededUser:
    return await seed_user(session_factory, "Ada Author", "ada@example.com")


@pytest_asyncio.fixture
async def other_user(session_factory) -> SeededUser:
    return await seed_user(session_factory, "Olly Other", "olly@example.com")


@pytest_asyncio.fixture
async def admin(session_factory) -> SeededUser:
    return await seed_user(session_factory, "Ari Admin", "admin@example.com", role=UserRole.ADMIN.value)


# ══════════════════════════════════════════════════════════════════════════
# HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory, db_engine, monkeypatch):
    """
    HTTPX AsyncClient talking to the app in-process.

    The lifespan handler does not run under ASGITransport; the storage
    directory is created by the storage_dir fixture instead.
    """
    from quillboard.main import app

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    monkeypatch.setattr(database, "engine", db_engine)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
