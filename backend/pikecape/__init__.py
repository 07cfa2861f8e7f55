"""
Pikecape Backend - Application Package Initializer
==================================================

What: Marks the `pikecape` directory as a Python package.
Who:  Used by uvicorn (`pikecape.main:app`), pytest, and the import system.

Architecture Note:
    The backend is a straight line of thin layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     Repositories (Data Access)      │  ← Document-store queries
    ├─────────────────────────────────────┤
    │          Schemas (Contracts)        │  ← Pydantic request/response models
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async MongoDB client lifecycle
    └─────────────────────────────────────┘

    Routes never touch the driver; repositories never see a Request or Response.
"""

__version__ = "1.0.0"
