"""
MeetSpace Backend: Cloud Firestore Document Backend
=====================================================

What:  DocumentBackend implementation over the async Firestore client from
       the Firebase Admin SDK.
How:   Uses the process-wide client from providers.firebase. Every SDK
       exception is classified by classify_firestore_error() into a
       ProviderError before it leaves this module.
When:  DOCUMENT_STORE=firestore (the default).

Preconditions used:
    create  → DocumentReference.create()                fails if the id exists
    update  → DocumentReference.update()                fails if the doc is missing
    delete  → delete(option=write_option(exists=True))  fails if the doc is missing
Each is enforced by Firestore itself in the same write, not by a prior read.
"""

import asyncio
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from google.api_core import exceptions as google_exceptions
from google.auth.exceptions import DefaultCredentialsError
from google.cloud.firestore_v1.base_query import FieldFilter

from meetspace.exceptions import ProviderError, ProviderErrorKind
from meetspace.providers.firebase import get_firestore_client
from meetspace.store.backend import DocumentBackend

logger = logging.getLogger(__name__)

_UNAVAILABLE_ERRORS = (
    google_exceptions.ServiceUnavailable,
    google_exceptions.DeadlineExceeded,
    google_exceptions.Cancelled,
    google_exceptions.RetryError,
    asyncio.TimeoutError,
    ConnectionError,
)


def classify_firestore_error(exc: Exception) -> ProviderError:
    """Map a Firestore / google-api-core exception to a ProviderError."""
    if isinstance(exc, ProviderError):
        return exc
    if isinstance(exc, google_exceptions.NotFound):
        return ProviderError(ProviderErrorKind.DOCUMENT_NOT_FOUND, str(exc), code="NOT_FOUND")
    if isinstance(exc, google_exceptions.AlreadyExists):
        return ProviderError(ProviderErrorKind.DOCUMENT_EXISTS, str(exc), code="ALREADY_EXISTS")
    if isinstance(exc, _UNAVAILABLE_ERRORS):
        return ProviderError(ProviderErrorKind.UNAVAILABLE, str(exc) or type(exc).__name__)
    if isinstance(exc, (DefaultCredentialsError, FileNotFoundError)):
        return ProviderError(ProviderErrorKind.MISCONFIGURED, str(exc))
    if isinstance(exc, google_exceptions.GoogleAPICallError):
        code = getattr(exc, "grpc_status_code", None)
        return ProviderError(
            ProviderErrorKind.UNKNOWN,
            exc.message or str(exc),
            code=str(code) if code is not None else None,
        )
    return ProviderError(ProviderErrorKind.UNKNOWN, str(exc) or type(exc).__name__)


@contextmanager
def _classified(operation: str, collection: str, doc_id: Optional[str] = None) -> Iterator[None]:
    try:
        yield
    except Exception as exc:
        error = classify_firestore_error(exc)
        if error.kind not in (
            ProviderErrorKind.DOCUMENT_NOT_FOUND,
            ProviderErrorKind.DOCUMENT_EXISTS,
        ):
            logger.error(
                "Firestore %s failed on %s/%s: %s",
                operation,
                collection,
                doc_id or "*",
                error.message,
            )
        raise error from exc


class FirestoreBackend(DocumentBackend):
    """
    Firestore implementation of the document contract.

    The client is looked up per call through the accessor, so constructing a
    FirestoreBackend never touches credentials.
    """

    name = "firestore"

    def __init__(self, client=None):
        self._explicit_client = client

    def _client(self):
        return self._explicit_client or get_firestore_client()

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        with _classified("get", collection, doc_id):
            snapshot = await self._client().collection(collection).document(doc_id).get()
            if not snapshot.exists:
                return None
            data = snapshot.to_dict() or {}
            data.setdefault("id", snapshot.id)
            return data

    async def query(
        self,
        collection: str,
        field: str,
        value: Any,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        with _classified("query", collection):
            query = self._client().collection(collection).where(
                filter=FieldFilter(field, "==", value)
            )
            if limit is not None:
                query = query.limit(limit)

            results = []
            async for snapshot in query.stream():
                data = snapshot.to_dict() or {}
                data.setdefault("id", snapshot.id)
                results.append(data)
            return results

    async def create(
        self,
        collection: str,
        data: Dict[str, Any],
        doc_id: Optional[str] = None,
    ) -> str:
        with _classified("create", collection, doc_id):
            collection_ref = self._client().collection(collection)
            # document() with no argument generates a new id client-side
            doc_ref = collection_ref.document(doc_id) if doc_id else collection_ref.document()
            await doc_ref.create({**data, "id": doc_ref.id})
            return doc_ref.id

    async def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        with _classified("update", collection, doc_id):
            await self._client().collection(collection).document(doc_id).update(data)

    async def delete(self, collection: str, doc_id: str) -> None:
        with _classified("delete", collection, doc_id):
            client = self._client()
            await client.collection(collection).document(doc_id).delete(
                option=client.write_option(exists=True)
            )

    async def health_check(self) -> bool:
        """
        Lists at most one top-level collection.

        Returns False on credential or connectivity problems instead of raising.
        """
        try:
            async for _ in self._client().collections():
                break
            return True
        except Exception as e:
            logger.warning("Firestore health check failed: %s", str(e))
            return False
