"""
MeetSpace Backend: Abstract Document Backend Interface
========================================================

What:  The contract every document store backend implements.
How:   Concrete backends (FirestoreBackend, InMemoryBackend) implement the
       five primitives below over plain dicts. DocumentRepository layers
       models, timestamps and error translation on top.
Who:   Used only by DocumentRepository.

Failure contract:
    Backends raise ProviderError with one of these kinds and nothing else:
        DOCUMENT_NOT_FOUND  update/delete of a missing document
        DOCUMENT_EXISTS     create with an explicit id that is taken
        UNAVAILABLE         timeout, cancellation, connection failure
        UNKNOWN             anything else (message kept)
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class DocumentBackend(ABC):
    """
    Key/document access over named collections.

    Every method is a single atomic operation at the store. No method
    retries.
    """

    name: str = "abstract"

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Return the stored dict, or None when the document does not exist."""
        ...

    @abstractmethod
    async def query(
        self,
        collection: str,
        field: str,
        value: Any,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Return documents whose `field` equals `value`, in the store's natural order."""
        ...

    @abstractmethod
    async def create(
        self,
        collection: str,
        data: Dict[str, Any],
        doc_id: Optional[str] = None,
    ) -> str:
        """
        Persist a new document and return its id.

        With `doc_id`, the write fails with DOCUMENT_EXISTS if the id is taken.
        Without it, the store generates the id. The returned id is also
        written into the stored document's "id" field.
        """
        ...

    @abstractmethod
    async def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Merge `data` into an existing document; DOCUMENT_NOT_FOUND if absent."""
        ...

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> None:
        """Remove an existing document; DOCUMENT_NOT_FOUND if absent."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Lightweight reachability probe for the health route. Never raises."""
        ...
