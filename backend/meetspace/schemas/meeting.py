"""
MeetSpace Backend: Meeting Schemas
====================================

What:  Bodies accepted by POST and PUT /meetings, and the format rules for
       meeting fields.
How:   MeetingRequest is lenient: everything is optional, and `duration` is
       a strict integer so "30" and true are rejected rather than coerced.
       ownerId, id and timestamps are not accepted from clients and are
       dropped if sent. MeetingFields holds the per-field format rules;
       MeetingService validates against it so the same checks apply to
       every caller.

Field formats:
    title     non-blank string
    date      YYYY-MM-DD, a real calendar date
    time      HH:mm, 24h
    duration  minutes, integer > 0
"""

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, StrictInt, StrictStr, field_validator

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

_DATE_SHAPE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class MeetingRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[str] = Field(default=None, description="YYYY-MM-DD")
    time: Optional[str] = Field(default=None, description="HH:mm, 24h")
    duration: Optional[StrictInt] = Field(default=None, description="Minutes, > 0")


class MeetingFields(BaseModel):
    """
    Format rules for the mutable meeting fields.

    Every field is optional so one model serves creation and partial
    updates; which fields are required is decided by the caller.
    """
    title: Optional[StrictStr] = None
    description: Optional[StrictStr] = None
    date: Optional[StrictStr] = None
    time: Optional[StrictStr] = Field(default=None, pattern=TIME_PATTERN)
    duration: Optional[StrictInt] = Field(default=None, gt=0)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("title must not be blank")
        return v

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: Optional[str]) -> Optional[str]:
        """Rejects other layouts and impossible days such as 2024-02-30."""
        if v is None:
            return v
        if not _DATE_SHAPE.match(v):
            raise ValueError("date must be in YYYY-MM-DD format")
        datetime.strptime(v, "%Y-%m-%d")
        return v
