"""
MeetSpace Backend: In-Memory Document Backend
===============================================

What:  A DocumentBackend holding collections as dicts in process memory.
When:  DOCUMENT_STORE=memory for local development, and in the test suite.

Each operation completes without awaiting anything, so on a single event
loop it is atomic like a Firestore document write. Stored dicts are deep
copied on the way in and out so callers never alias stored state.
"""

import copy
import logging
import uuid
from collections import defaultdict
from typing import Any, Dict, List, Optional

from meetspace.exceptions import ProviderError, ProviderErrorKind
from meetspace.store.backend import DocumentBackend

logger = logging.getLogger(__name__)


class InMemoryBackend(DocumentBackend):

    name = "memory"

    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = defaultdict(dict)

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        doc = self._collections[collection].get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def query(
        self,
        collection: str,
        field: str,
        value: Any,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        matches = [
            copy.deepcopy(doc)
            for doc in self._collections[collection].values()
            if field in doc and doc[field] == value
        ]
        return matches[:limit] if limit is not None else matches

    async def create(
        self,
        collection: str,
        data: Dict[str, Any],
        doc_id: Optional[str] = None,
    ) -> str:
        docs = self._collections[collection]
        if doc_id:
            if doc_id in docs:
                raise ProviderError(
                    ProviderErrorKind.DOCUMENT_EXISTS,
                    f"Document {collection}/{doc_id} already exists",
                )
        else:
            doc_id = uuid.uuid4().hex[:20]

        stored = copy.deepcopy(data)
        stored["id"] = doc_id
        docs[doc_id] = stored
        logger.debug("Created %s/%s", collection, doc_id)
        return doc_id

    async def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        doc = self._collections[collection].get(doc_id)
        if doc is None:
            raise ProviderError(
                ProviderErrorKind.DOCUMENT_NOT_FOUND,
                f"No document to update: {collection}/{doc_id}",
            )
        doc.update(copy.deepcopy(data))

    async def delete(self, collection: str, doc_id: str) -> None:
        if self._collections[collection].pop(doc_id, None) is None:
            raise ProviderError(
                ProviderErrorKind.DOCUMENT_NOT_FOUND,
                f"No document to delete: {collection}/{doc_id}",
            )

    async def health_check(self) -> bool:
        return True

    def clear(self) -> None:
        """Drop every collection (test isolation)."""
        self._collections.clear()
