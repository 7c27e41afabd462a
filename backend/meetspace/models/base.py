"""
MeetSpace Backend: Document Model Base
========================================

What:  Shared base class and clock helpers for documents kept in the store.
How:   Python attributes are snake_case; the stored and serialized form uses
       camelCase aliases (ownerId, createdAt) so documents written by other
       clients of the same collections stay readable.

Timestamp format:
    ISO-8601 UTC, millisecond precision, "Z" suffix
    e.g. 2024-01-05T09:00:00.000Z
    Fixed width, so string comparison orders chronologically.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Current instant in the stored timestamp format."""
    return format_timestamp(utc_now())


def format_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


class DocumentModel(BaseModel):
    """
    Base for every stored document.

    Every document has a string `id` and the two audit timestamps.
    """

    id: str = ""
    created_at: str = ""
    updated_at: str = ""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "extra": "ignore",
    }

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the camelCase dict written to the store."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_document(cls, data: Dict[str, Any]):
        """Build a model from a stored camelCase dict."""
        return cls.model_validate(data)
