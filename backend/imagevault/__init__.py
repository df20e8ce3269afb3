"""
ImageVault Backend — Application Package Initializer
======================================================

Layered layout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← upload storage, record ops
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← stored document + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← async MongoDB client
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
