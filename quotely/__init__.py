"""
Quotely API — Application Package Initializer
==============================================

What: Marks the `quotely` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← favorites, likes, aggregation
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │      Store Adapter (Persistence)    │  ← SQLAlchemy or PostgREST backend
    └─────────────────────────────────────┘

    Routes build services per request from the store handle kept on
    `app.state.store`; services only ever talk to the StoreAdapter interface.
"""

__version__ = "1.0.0"
