"""
RICHIEAT Backend — Application Package Initializer
===================================================

What: Marks the `richieat` directory as a Python package.
Who:  Imported by uvicorn (`richieat.main:app`), Alembic, pytest and the
      client-side auth layer in `richieat.client`.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │      Middleware (Request Pipeline)  │  ← request ID, logging, CORS, limits
    ├─────────────────────────────────────┤
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← sessions, client management
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    `richieat.client` sits outside this stack: it is the consumer side of the
    API (auth store, persisted storage, protected-route gate).
"""

__version__ = "1.0.0"
