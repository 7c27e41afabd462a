"""
MeetSpace Backend: Meeting Route Handlers
===========================================

What:  CRUD on meetings for an authenticated caller.
How:   Every route depends on the access gate. New meetings are owned by the
       caller and GET /meetings lists only the caller's meetings. Routes by
       id pass the caller along; MeetingService decides whether ownership is
       checked (ENFORCE_MEETING_OWNERSHIP).
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from meetspace.config import settings
from meetspace.middleware.auth_gate import require_subject
from meetspace.models.meeting import Meeting
from meetspace.schemas.common import ErrorResponse, MessageResponse
from meetspace.schemas.meeting import MeetingRequest
from meetspace.services.meeting_service import MeetingService, get_meeting_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix=f"{settings.api_prefix}/meetings",
    tags=["Meetings"],
)

_BY_ID_ERRORS = {
    401: {"description": "Missing, invalid or expired bearer token", "model": ErrorResponse},
    403: {"description": "Not the owner (only with ownership enforcement)", "model": ErrorResponse},
    404: {"description": "Meeting not found", "model": ErrorResponse},
}


@router.post(
    "",
    response_model=Meeting,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Missing or malformed field", "model": ErrorResponse}},
    summary="Schedule a meeting owned by the caller",
)
async def create_meeting(
    body: MeetingRequest,
    subject_id: str = Depends(require_subject),
    service: MeetingService = Depends(get_meeting_service),
) -> Meeting:
    return await service.create(subject_id, body.model_dump(exclude_unset=True))


@router.get("", response_model=List[Meeting], summary="List the caller's meetings")
async def list_meetings(
    subject_id: str = Depends(require_subject),
    service: MeetingService = Depends(get_meeting_service),
) -> List[Meeting]:
    return await service.list_owned(subject_id)


@router.get("/{meeting_id}", response_model=Meeting, responses=_BY_ID_ERRORS)
async def get_meeting(
    meeting_id: str,
    subject_id: str = Depends(require_subject),
    service: MeetingService = Depends(get_meeting_service),
) -> Meeting:
    return await service.get_by_id(meeting_id, subject_id=subject_id)


@router.put(
    "/{meeting_id}",
    response_model=Meeting,
    responses={**_BY_ID_ERRORS, 400: {"description": "Malformed field", "model": ErrorResponse}},
)
async def update_meeting(
    meeting_id: str,
    body: MeetingRequest,
    subject_id: str = Depends(require_subject),
    service: MeetingService = Depends(get_meeting_service),
) -> Meeting:
    return await service.update(
        meeting_id, body.model_dump(exclude_unset=True), subject_id=subject_id
    )


@router.delete("/{meeting_id}", response_model=MessageResponse, responses=_BY_ID_ERRORS)
async def delete_meeting(
    meeting_id: str,
    subject_id: str = Depends(require_subject),
    service: MeetingService = Depends(get_meeting_service),
) -> MessageResponse:
    await service.delete(meeting_id, subject_id=subject_id)
    return MessageResponse(message="Meeting deleted")
