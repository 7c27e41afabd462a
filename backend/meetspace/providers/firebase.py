"""
MeetSpace Backend: Firebase Application Handle
================================================

What:  Lazily initialized, process-wide Firebase Admin app plus accessors for
       the Auth and async Firestore clients built on top of it.
How:   initialize_firebase() does a lock-guarded check-and-set, so concurrent
       first use from several threads (Starlette's thread pool runs the
       blocking auth calls) initializes exactly once. The app is never
       re-initialized; callers only ever go through the accessor functions.
Who:   FirebaseIdentityProvider, FirestoreBackend, and the health route.

Credentials:
    FIREBASE_CREDENTIALS_PATH → service account JSON file
    (empty)                   → Application Default Credentials
"""

import logging
import threading
from types import ModuleType
from typing import Optional

import firebase_admin
from firebase_admin import auth, credentials, firestore_async

from meetspace.config import settings

logger = logging.getLogger(__name__)

_app: Optional[firebase_admin.App] = None
_firestore_client = None
_init_lock = threading.Lock()


def initialize_firebase() -> firebase_admin.App:
    """
    Initialize the Firebase Admin app once per process and return it.

    Safe to call from any thread and any number of times; only the first
    caller does the work.
    """
    global _app
    if _app is not None:
        return _app

    with _init_lock:
        if _app is None:
            if settings.firebase_credentials_path:
                credential = credentials.Certificate(settings.firebase_credentials_path)
            else:
                credential = credentials.ApplicationDefault()

            options = {}
            if settings.firebase_project_id:
                options["projectId"] = settings.firebase_project_id

            _app = firebase_admin.initialize_app(credential, options or None)
            logger.info(
                "Firebase initialized (project=%s)",
                settings.firebase_project_id or "from credentials",
            )
    return _app


def get_firebase_app() -> firebase_admin.App:
    """Accessor for the shared app handle."""
    return initialize_firebase()


def get_auth_client() -> ModuleType:
    """
    Accessor for Firebase Auth.

    firebase_admin.auth is a module of functions that take an `app` keyword;
    initializing here guarantees the default app exists before any call.
    """
    get_firebase_app()
    return auth


def get_firestore_client():
    """Accessor for the shared async Firestore client."""
    global _firestore_client
    if _firestore_client is not None:
        return _firestore_client

    app = get_firebase_app()
    with _init_lock:
        if _firestore_client is None:
            _firestore_client = firestore_async.client(app)
    return _firestore_client
