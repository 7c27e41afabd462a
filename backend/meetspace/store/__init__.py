"""
MeetSpace Backend: Document Store Package
===========================================

    DocumentRepository[T]  (repository.py)   models, timestamps, error translation
            │
    DocumentBackend        (backend.py)      five primitives over plain dicts
       ├── FirestoreBackend (firestore.py)   Cloud Firestore, async client
       └── InMemoryBackend  (memory.py)      process memory; dev and tests
"""
