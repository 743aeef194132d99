"""
Notewise Backend - Application Package Initializer
===================================================

What: The `app` package: a notes service with AI assistance.
Who:  Imported by uvicorn (app.main:app), Alembic and pytest.

Architecture Note:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Dependencies (user, AI client)    │  ← resolved once per request
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← actions, prompts, provider
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Actions receive the signed-in user as an argument; nothing below the
    routes reads request state.
"""

__version__ = "1.0.0"
