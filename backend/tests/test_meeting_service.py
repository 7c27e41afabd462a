"""
MeetSpace Backend: Meeting Service Unit Tests
===============================================

What we test:
    ✅ create: required fields, format checks, owner stamping
    ✅ list_owned: only the caller's meetings
    ✅ get/update/delete by id, unknown id → NotFoundError
    ✅ update ignores ownerId and timestamps from the client
    ✅ ownership is not checked by default, and is with enforcement on
"""

import pytest

from meetspace.exceptions import ForbiddenError, InvalidArgumentError, NotFoundError
from meetspace.schemas.meeting import MeetingFields
from meetspace.services.meeting_service import MeetingService, validate_meeting_fields

STANDUP = {"title": "Standup", "date": "2024-01-05", "time": "09:00", "duration": 15}


class TestValidation:

    @pytest.mark.parametrize("missing", ["title", "date", "time", "duration"])
    def test_required_fields(self, missing):
        fields = {k: v for k, v in STANDUP.items() if k != missing}
        with pytest.raises(InvalidArgumentError) as exc_info:
            validate_meeting_fields(fields, required=("title", "date", "time", "duration"))
        assert exc_info.value.field == missing

    @pytest.mark.parametrize(
        "field, value",
        [
            ("date", "05/01/2024"),
            ("date", "2024-02-30"),
            ("date", "2024-1-5"),
            ("time", "9:00"),
            ("time", "24:00"),
            ("time", "09:60"),
            ("duration", 0),
            ("duration", -15),
            ("duration", "30"),
            ("duration", True),
            ("duration", 1.5),
            ("title", ""),
            ("description", 42),
        ],
    )
    def test_malformed_values(self, field, value):
        with pytest.raises(InvalidArgumentError) as exc_info:
            validate_meeting_fields({**STANDUP, field: value})
        assert exc_info.value.field == field

    def test_valid_fields_pass(self):
        validate_meeting_fields({**STANDUP, "description": "", "time": "23:59"})

    def test_failure_carries_field_errors(self):
        with pytest.raises(InvalidArgumentError) as exc_info:
            validate_meeting_fields({**STANDUP, "date": "2024-02-30", "duration": 0})

        error = exc_info.value
        assert error.message == "date must be a valid date in YYYY-MM-DD format"
        assert [e["field"] for e in error.context["errors"]] == ["date", "duration"]

    def test_format_rules_ignore_unknown_keys(self):
        fields = MeetingFields.model_validate({**STANDUP, "ownerId": "uid-2"})
        assert fields.duration == 15
        assert not hasattr(fields, "ownerId")


class TestMeetingService:

    @pytest.fixture(autouse=True)
    def _setup(self, meeting_service, meeting_repo):
        self.service = meeting_service
        self.repo = meeting_repo

    @pytest.mark.asyncio
    async def test_create_stamps_owner_and_timestamps(self):
        meeting = await self.service.create("uid-1", STANDUP)

        assert meeting.id
        assert meeting.owner_id == "uid-1"
        assert meeting.description == ""
        assert meeting.created_at == meeting.updated_at
        assert await self.repo.get_by_id(meeting.id) == meeting

    @pytest.mark.asyncio
    async def test_create_ignores_client_owner(self):
        meeting = await self.service.create("uid-1", {**STANDUP, "owner_id": "uid-2", "ownerId": "uid-2"})
        assert meeting.owner_id == "uid-1"

    @pytest.mark.asyncio
    async def test_create_missing_title_writes_nothing(self):
        with pytest.raises(InvalidArgumentError):
            await self.service.create("uid-1", {k: v for k, v in STANDUP.items() if k != "title"})
        assert await self.service.list_owned("uid-1") == []

    @pytest.mark.asyncio
    async def test_list_owned_filters_by_owner(self):
        await self.service.create("uid-1", STANDUP)
        await self.service.create("uid-1", {**STANDUP, "title": "Retro"})
        await self.service.create("uid-2", {**STANDUP, "title": "Other"})

        mine = await self.service.list_owned("uid-1")

        assert sorted(m.title for m in mine) == ["Retro", "Standup"]
        assert all(m.owner_id == "uid-1" for m in mine)

    @pytest.mark.asyncio
    async def test_get_unknown_id(self):
        with pytest.raises(NotFoundError):
            await self.service.get_by_id("nope")

    @pytest.mark.asyncio
    async def test_update_merges_and_keeps_owner(self):
        meeting = await self.service.create("uid-1", STANDUP)

        updated = await self.service.update(
            meeting.id, {"duration": 30, "ownerId": "uid-2", "createdAt": "1999-01-01T00:00:00.000Z"}
        )

        assert updated.duration == 30
        assert updated.title == "Standup"
        assert updated.owner_id == "uid-1"
        assert updated.created_at == meeting.created_at
        assert updated.updated_at >= updated.created_at

    @pytest.mark.asyncio
    async def test_update_validates_supplied_fields(self):
        meeting = await self.service.create("uid-1", STANDUP)
        with pytest.raises(InvalidArgumentError):
            await self.service.update(meeting.id, {"time": "9am"})
        assert (await self.repo.get_by_id(meeting.id)).time == "09:00"

    @pytest.mark.asyncio
    async def test_update_unknown_id(self):
        with pytest.raises(NotFoundError):
            await self.service.update("nope", {"title": "x"})

    @pytest.mark.asyncio
    async def test_delete_then_get_is_not_found(self):
        meeting = await self.service.create("uid-1", STANDUP)
        await self.service.delete(meeting.id)
        with pytest.raises(NotFoundError):
            await self.service.get_by_id(meeting.id)

    @pytest.mark.asyncio
    async def test_delete_unknown_id(self):
        with pytest.raises(NotFoundError):
            await self.service.delete("nope")

    @pytest.mark.asyncio
    async def test_non_owner_access_allowed_by_default(self):
        """Without enforcement any authenticated subject may act on any meeting id."""
        meeting = await self.service.create("uid-1", STANDUP)

        assert (await self.service.get_by_id(meeting.id, subject_id="uid-2")).id == meeting.id
        updated = await self.service.update(meeting.id, {"title": "Hijacked"}, subject_id="uid-2")
        assert updated.title == "Hijacked"
        await self.service.delete(meeting.id, subject_id="uid-2")


class TestOwnershipEnforcement:

    @pytest.fixture(autouse=True)
    def _setup(self, meeting_repo):
        self.service = MeetingService(meeting_repo, enforce_ownership=True)

    @pytest.mark.asyncio
    async def test_owner_has_access(self):
        meeting = await self.service.create("uid-1", STANDUP)
        assert (await self.service.get_by_id(meeting.id, subject_id="uid-1")).id == meeting.id

    @pytest.mark.asyncio
    async def test_non_owner_is_forbidden(self):
        meeting = await self.service.create("uid-1", STANDUP)

        with pytest.raises(ForbiddenError):
            await self.service.get_by_id(meeting.id, subject_id="uid-2")
        with pytest.raises(ForbiddenError):
            await self.service.update(meeting.id, {"title": "x"}, subject_id="uid-2")
        with pytest.raises(ForbiddenError):
            await self.service.delete(meeting.id, subject_id="uid-2")

        assert (await self.service.get_by_id(meeting.id, subject_id="uid-1")).title == "Standup"

    @pytest.mark.asyncio
    async def test_unknown_id_is_still_not_found(self):
        with pytest.raises(NotFoundError):
            await self.service.delete("nope", subject_id="uid-1")
