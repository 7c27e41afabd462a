"""
MeetSpace Backend: Application Package Initializer
====================================================

What: Marks the `meetspace` directory as a Python package.
Who:  Imported by uvicorn (`uvicorn meetspace.main:app`), pytest, and every module.

Architecture Note:
    The backend is layered the same way top to bottom:

    ┌─────────────────────────────────────┐
    │     Routes + Access Gate (HTTP)     │  ← status codes, bearer tokens
    ├─────────────────────────────────────┤
    │   Services (User, Meeting)          │  ← orchestration, validation
    ├─────────────────────────────────────┤
    │   Models, Factories & Schemas       │  ← pydantic documents
    ├─────────────────────────────────────┤
    │   Store + Identity Providers        │  ← Firestore / Firebase Auth
    └─────────────────────────────────────┘

    Routes never talk to a provider directly. Services never see HTTP.
"""

__version__ = "1.0.0"
