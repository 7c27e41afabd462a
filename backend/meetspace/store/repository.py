"""
MeetSpace Backend: Generic Document Repository
================================================

What:  Typed CRUD over one collection, shared by users and meetings.
How:   DocumentRepository[T] converts between pydantic documents and the
       backend's camelCase dicts, stamps `updatedAt` on every update, and
       translates ProviderError into application exceptions.
Who:   UserService and MeetingService.

Contract:
    create(doc)                   → T with the stored id
    get_by_id(id)                 → T | None
    get_or_fail(id)               → T, NotFoundError when missing
    query_by_field(f, v, limit)   → List[T], equality match only
    update(id, partial)           → T after merge, NotFoundError when missing
    delete(id)                    → None, NotFoundError when missing
"""

import logging
from typing import Any, Dict, Generic, List, Mapping, Optional, Type, TypeVar

from meetspace.config import settings
from meetspace.exceptions import NotFoundError, ProviderError, translate_provider_error
from meetspace.models.base import DocumentModel, utc_now_iso
from meetspace.models.meeting import Meeting
from meetspace.models.user import User
from meetspace.store.backend import DocumentBackend

logger = logging.getLogger(__name__)

DocumentT = TypeVar("DocumentT", bound=DocumentModel)


class DocumentRepository(Generic[DocumentT]):
    """
    Repository for one collection and one document model.

    Example:
        meetings = DocumentRepository("meetings", Meeting, backend, resource="meeting")
        meeting = await meetings.create(build_meeting(fields, owner_id))
    """

    def __init__(
        self,
        collection: str,
        model: Type[DocumentT],
        backend: DocumentBackend,
        resource: Optional[str] = None,
    ):
        self.collection = collection
        self.model = model
        self.backend = backend
        self.resource = resource or model.__name__.lower()

    def _error(self, error: ProviderError, doc_id: Optional[str] = None):
        return translate_provider_error(error, resource=self.resource, resource_id=doc_id)

    def _field_name(self, field: str) -> str:
        """Accept either the python name (owner_id) or the stored name (ownerId)."""
        info = self.model.model_fields.get(field)
        if info is not None and info.alias:
            return info.alias
        return field

    async def create(self, doc: DocumentT) -> DocumentT:
        """
        Persist a new document.

        An empty `doc.id` lets the store generate one; a set id is used as-is
        and fails with ConflictError if already taken.
        """
        data = doc.to_document()
        try:
            doc_id = await self.backend.create(self.collection, data, doc_id=doc.id or None)
        except ProviderError as e:
            raise self._error(e, doc.id or None)

        logger.info("Created %s %s", self.resource, doc_id)
        return doc.model_copy(update={"id": doc_id})

    async def get_by_id(self, doc_id: str) -> Optional[DocumentT]:
        try:
            data = await self.backend.get(self.collection, doc_id)
        except ProviderError as e:
            raise self._error(e, doc_id)
        return self.model.from_document(data) if data is not None else None

    async def get_or_fail(self, doc_id: str) -> DocumentT:
        doc = await self.get_by_id(doc_id)
        if doc is None:
            raise NotFoundError(resource=self.resource, resource_id=doc_id)
        return doc

    async def query_by_field(
        self,
        field: str,
        value: Any,
        limit: Optional[int] = None,
    ) -> List[DocumentT]:
        try:
            rows = await self.backend.query(
                self.collection, self._field_name(field), value, limit=limit
            )
        except ProviderError as e:
            raise self._error(e)
        return [self.model.from_document(row) for row in rows]

    async def update(self, doc_id: str, partial: Mapping[str, Any]) -> DocumentT:
        """
        Merge `partial` into the stored document and stamp `updatedAt`.

        Keys may be python or stored names. Fields not in `partial` are left
        untouched. Returns the merged document as read back from the store.
        """
        changes: Dict[str, Any] = {self._field_name(k): v for k, v in partial.items()}
        changes["updatedAt"] = utc_now_iso()
        try:
            await self.backend.update(self.collection, doc_id, changes)
        except ProviderError as e:
            raise self._error(e, doc_id)

        logger.info("Updated %s %s (%s)", self.resource, doc_id, ", ".join(sorted(changes)))
        return await self.get_or_fail(doc_id)

    async def delete(self, doc_id: str) -> None:
        try:
            await self.backend.delete(self.collection, doc_id)
        except ProviderError as e:
            raise self._error(e, doc_id)
        logger.info("Deleted %s %s", self.resource, doc_id)


# ── Backend Selection ─────────────────────────────────────────────────────

def create_backend(kind: Optional[str] = None) -> DocumentBackend:
    """Build the backend named by DOCUMENT_STORE (or `kind`)."""
    kind = (kind or settings.document_store).lower()
    if kind == "memory":
        from meetspace.store.memory import InMemoryBackend

        return InMemoryBackend()
    if kind == "firestore":
        from meetspace.store.firestore import FirestoreBackend

        return FirestoreBackend()
    raise ValueError(f"Unknown document store: {kind}")


# Singleton instances, shared by the default services
document_backend = create_backend()
user_repository: DocumentRepository[User] = DocumentRepository(
    settings.users_collection, User, document_backend, resource="user"
)
meeting_repository: DocumentRepository[Meeting] = DocumentRepository(
    settings.meetings_collection, Meeting, document_backend, resource="meeting"
)
