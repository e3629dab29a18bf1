"""
Cyber Kitchen Backend — Application Package Initializer
=========================================================

What: Marks the `cyberkitchen` directory as a Python package.
Who:  Used by uvicorn (`cyberkitchen.main:app`), pytest, and `python -m cyberkitchen`.

Architecture Note:
    The backend is a thin layered CRUD service:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← store, media, upload, import
    ├─────────────────────────────────────┤
    │            Schemas (Data)           │  ← Pydantic request/response models
    ├─────────────────────────────────────┤
    │       Filesystem (Persistence)      │  ← recipes.json + medias/ tree
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
