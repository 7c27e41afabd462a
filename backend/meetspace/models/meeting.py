"""
MeetSpace Backend: Meeting Document
=====================================

What:  A meeting scheduled by a user, stored in the `meetings` collection
       under a store-generated id.

Field formats:
    date      YYYY-MM-DD
    time      HH:mm (24h)
    duration  minutes, integer > 0

`owner_id` is set once at creation and never changes.
"""

from typing import Any, Mapping

from meetspace.models.base import DocumentModel, format_timestamp, utc_now

DEFAULT_TIME = "00:00"
DEFAULT_DURATION = 30

# Fields a client may change after creation
MUTABLE_FIELDS = ("title", "description", "date", "time", "duration")


class Meeting(DocumentModel):
    owner_id: str
    title: str = ""
    description: str = ""
    date: str = ""
    time: str = DEFAULT_TIME
    duration: int = DEFAULT_DURATION


def build_meeting(fields: Mapping[str, Any], owner_id: str) -> Meeting:
    """
    Build the initial meeting document.

    No validation happens here; MeetingService checks required fields first.
    `date` defaults to today's UTC date, `id` stays empty for the store.
    """
    now = utc_now()
    stamp = format_timestamp(now)

    def pick(name: str, default: Any) -> Any:
        value = fields.get(name)
        return default if value is None else value

    return Meeting(
        id="",
        owner_id=owner_id,
        title=pick("title", ""),
        description=pick("description", ""),
        date=pick("date", now.date().isoformat()),
        time=pick("time", DEFAULT_TIME),
        duration=pick("duration", DEFAULT_DURATION),
        created_at=stamp,
        updated_at=stamp,
    )
