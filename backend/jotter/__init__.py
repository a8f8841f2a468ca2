"""
Jotter Backend: Application Package
====================================

What: Personal note-taking service (notes, profiles, signup) plus a headless client.
Who:  Imported by uvicorn (`jotter.main:app`), Alembic, pytest and the client package.

Architecture Note:
    The backend follows a layered layout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, bearer auth dependency
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← validation, ownership, signup compensation
    ├─────────────────────────────────────┤
    │     Repositories (Key Namespace)    │  ← user:<id>:profile, user:<id>:note:<id>
    ├─────────────────────────────────────┤
    │   Storage / Auth Provider adapters  │  ← SQL key-value table, Supabase GoTrue
    └─────────────────────────────────────┘

    The per-user key namespace is always derived from the authenticated identity,
    never from anything the client sends.
"""

__version__ = "1.0.0"
