"""
Quillboard Backend: Application Package
========================================

What: The blog API package (posts, categories, comments, authentication).
Who:  Imported by uvicorn (`quillboard.main:app`), Alembic and pytest.

Architecture Note:
    The backend is layered:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Access control, queries, CRUD
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes extract request data and the resolved identity, services apply
    the rules, and the database layer owns the session lifecycle.
"""

__version__ = "1.0.0"
