"""
MeetSpace Backend: Meeting Service
====================================

What:  Meeting CRUD for the authenticated subject.
How:   Validates fields, builds the initial document with build_meeting(),
       and goes through the meetings DocumentRepository.
Who:   Called by routes/meetings.py through the get_meeting_service dependency.

Ownership:
    create() stamps ownerId with the caller's subject id and list_owned()
    filters by it. get/update/delete by id check ownership only when
    ENFORCE_MEETING_OWNERSHIP is on; otherwise any authenticated caller who
    knows an id may act on it.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from meetspace.config import settings
from meetspace.exceptions import ForbiddenError, InvalidArgumentError
from meetspace.models.meeting import MUTABLE_FIELDS, Meeting, build_meeting
from meetspace.schemas.meeting import MeetingFields
from meetspace.store.repository import DocumentRepository, meeting_repository

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "date", "time", "duration")

_FIELD_MESSAGES = {
    "title": "title must be a non-empty string",
    "description": "description must be a string",
    "date": "date must be a valid date in YYYY-MM-DD format",
    "time": "time must be in HH:mm format",
    "duration": "duration must be a positive integer number of minutes",
}


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_meeting_fields(fields: Mapping[str, Any], required: Sequence[str] = ()) -> None:
    """
    Check presence of `required` and the format of every supplied field.

    Raises:
        InvalidArgumentError naming the first offending field.
    """
    missing = [name for name in required if _is_missing(fields.get(name))]
    if missing:
        raise InvalidArgumentError(
            f"Missing required fields: {', '.join(missing)}",
            field=missing[0],
            context={"missing": missing},
        )

    try:
        MeetingFields.model_validate(dict(fields))
    except ValidationError as e:
        errors = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        field = errors[0]["field"]
        raise InvalidArgumentError(
            _FIELD_MESSAGES.get(field, errors[0]["message"]),
            field=field,
            context={"errors": errors},
        ) from e


def _supplied(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """The mutable fields actually present in a request; None means absent."""
    return {name: fields[name] for name in MUTABLE_FIELDS if fields.get(name) is not None}


class MeetingService:
    """
    Business logic for meetings.

    Args:
        meetings:          Repository over the meetings collection
        enforce_ownership: Reject get/update/delete by a non-owner with 403.
                           Defaults to ENFORCE_MEETING_OWNERSHIP.
    """

    def __init__(
        self,
        meetings: DocumentRepository[Meeting],
        enforce_ownership: Optional[bool] = None,
    ):
        self.meetings = meetings
        self.enforce_ownership = (
            settings.enforce_meeting_ownership if enforce_ownership is None else enforce_ownership
        )

    def _check_owner(self, meeting: Meeting, subject_id: Optional[str]) -> None:
        if not self.enforce_ownership or subject_id is None:
            return
        if meeting.owner_id != subject_id:
            logger.warning(
                "Subject %s denied access to meeting %s owned by %s",
                subject_id,
                meeting.id,
                meeting.owner_id,
            )
            raise ForbiddenError(context={"meeting_id": meeting.id})

    async def create(self, subject_id: str, fields: Mapping[str, Any]) -> Meeting:
        changes = _supplied(fields)
        validate_meeting_fields(changes, required=REQUIRED_FIELDS)
        return await self.meetings.create(build_meeting(changes, subject_id))

    async def list_owned(self, subject_id: str) -> List[Meeting]:
        return await self.meetings.query_by_field("owner_id", subject_id)

    async def get_by_id(self, meeting_id: str, subject_id: Optional[str] = None) -> Meeting:
        meeting = await self.meetings.get_or_fail(meeting_id)
        self._check_owner(meeting, subject_id)
        return meeting

    async def update(
        self,
        meeting_id: str,
        partial: Mapping[str, Any],
        subject_id: Optional[str] = None,
    ) -> Meeting:
        """
        Merge the supplied mutable fields into the meeting.

        `ownerId`, `id` and the timestamps in `partial` are ignored.
        """
        changes = _supplied(partial)
        validate_meeting_fields(changes)
        if self.enforce_ownership:
            self._check_owner(await self.meetings.get_or_fail(meeting_id), subject_id)
        return await self.meetings.update(meeting_id, changes)

    async def delete(self, meeting_id: str, subject_id: Optional[str] = None) -> None:
        if self.enforce_ownership:
            self._check_owner(await self.meetings.get_or_fail(meeting_id), subject_id)
        await self.meetings.delete(meeting_id)


# ── Singleton Instance ────────────────────────────────────────────────────
meeting_service = MeetingService(meeting_repository)


def get_meeting_service() -> MeetingService:
    """Dependency provider for routes."""
    return meeting_service
