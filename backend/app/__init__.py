"""
SnippetHub Backend — Application Package
=========================================

What: Marks the `app` directory as a Python package.
Who:  Imported by uvicorn, Alembic and pytest (`from app.config import settings`).

Layering:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← versioning, diff, transfer, tags
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Database handle, async sessions
    └─────────────────────────────────────┘

Routes never touch SQL; services never see a Request object.
"""

__version__ = "1.1.0"
