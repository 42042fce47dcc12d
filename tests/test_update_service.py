"""Tests for ResourceUpdateService: submission, scoped listing and resolution."""

import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import update

from newbridge.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
)
from newbridge.models.enums import AdminRole, ChangeType, ResourceCategory, ReviewAction, UpdateStatus
from newbridge.models.resource_update_request import ResourceUpdateRequest
from newbridge.modules.access.schemas import AdminAccess, LocationScope
from newbridge.modules.directory.sql_repository import SqlResourceRepository
from newbridge.modules.updates.schemas import ResourceUpdatePayload
from newbridge.modules.updates.service import ResourceUpdateService, normalize_availability

_SUPER = AdminAccess.super_admin()
_AMES_ADMIN = AdminAccess(
    is_admin=True, roles=frozenset({AdminRole.CITY_ADMIN}), city_slugs=frozenset({"ames"})
)
_BOONE_LOCAL = AdminAccess(
    is_admin=True,
    roles=frozenset({AdminRole.LOCAL_ADMIN}),
    city_slugs=frozenset({"boone"}),
    location_scopes=frozenset({LocationScope("boone", "loc-x")}),
)


async def _add_request(
    session,
    city_slug: str,
    resource_external_id: str | None,
    minutes_ago: int = 0,
    payload: dict | None = None,
) -> ResourceUpdateRequest:
    request = ResourceUpdateRequest(
        city_slug=city_slug,
        resource_external_id=resource_external_id,
        category="food",
        change_type="update" if resource_external_id else "add",
        payload=payload if payload is not None else {"name": "Pantry", "address": "1 Main St"},
        submitted_by_email="contributor@example.org",
        submitted_at=datetime.now(UTC) - timedelta(minutes=minutes_ago),
        status="pending",
    )
    session.add(request)
    await session.flush()
    return request


def _service(session, repository=None) -> ResourceUpdateService:
    return ResourceUpdateService(session, repository or SqlResourceRepository(session))


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


class TestSubmitUpdate:
    @pytest.mark.asyncio
    async def test_submit_without_email_is_unauthenticated(self, seeded_session):
        with pytest.raises(UnauthorizedException):
            await _service(seeded_session).submit_update(
                None, "ames", ResourceCategory.FOOD, ResourceUpdatePayload(name="X")
            )

    @pytest.mark.asyncio
    async def test_submit_requires_city_slug(self, seeded_session):
        with pytest.raises(ValidationException):
            await _service(seeded_session).submit_update(
                "casey@example.org", "   ", ResourceCategory.FOOD, ResourceUpdatePayload()
            )

    @pytest.mark.asyncio
    async def test_submit_for_unknown_city_is_not_found(self, seeded_session):
        with pytest.raises(NotFoundException):
            await _service(seeded_session).submit_update(
                "casey@example.org", "atlantis", ResourceCategory.FOOD, ResourceUpdatePayload()
            )

    @pytest.mark.asyncio
    async def test_submit_with_resource_id_is_an_update(self, seeded_session):
        request = await _service(seeded_session).submit_update(
            "casey@example.org",
            "Ames",
            ResourceCategory.FOOD,
            ResourceUpdatePayload(resource_id="pantry-1", hours="9-5"),
            submitted_by_name="Casey",
        )

        assert request.change_type == ChangeType.UPDATE.value
        assert request.resource_external_id == "pantry-1"
        assert request.city_slug == "ames"
        assert request.status == UpdateStatus.PENDING.value
        assert request.submitted_by_name == "Casey"
        assert request.payload["hours"] == "9-5"

    @pytest.mark.asyncio
    async def test_submit_accepts_incomplete_payload(self, seeded_session):
        request = await _service(seeded_session).submit_update(
            "casey@example.org", "ames", ResourceCategory.FOOD, ResourceUpdatePayload(notes="?")
        )

        assert request.change_type == ChangeType.ADD.value
        assert request.resource_external_id is None

    @pytest.mark.asyncio
    async def test_payload_category_overrides_request_category(self, seeded_session):
        request = await _service(seeded_session).submit_update(
            "casey@example.org",
            "ames",
            ResourceCategory.FOOD,
            ResourceUpdatePayload(name="Bed", address="2 Main", category=ResourceCategory.SHELTER),
        )

        assert request.category == "shelter"

    @pytest.mark.asyncio
    async def test_submitter_email_is_stored_lowercased(self, seeded_session):
        request = await _service(seeded_session).submit_update(
            "  Casey@Example.ORG ", "ames", ResourceCategory.FOOD, ResourceUpdatePayload(name="X")
        )

        assert request.submitted_by_email == "casey@example.org"


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


class TestListPending:
    @pytest.mark.asyncio
    async def test_list_is_scoped_per_access(self, seeded_session):
        ames = await _add_request(seeded_session, "ames", None, minutes_ago=3)
        loc_x = await _add_request(seeded_session, "boone", "loc-x", minutes_ago=2)
        await _add_request(seeded_session, "boone", "loc-y", minutes_ago=1)
        svc = _service(seeded_session)

        assert len(await svc.list_pending(_SUPER)) == 3
        assert [r.id for r in await svc.list_pending(_AMES_ADMIN)] == [ames.id]
        assert [r.id for r in await svc.list_pending(_BOONE_LOCAL)] == [loc_x.id]

    @pytest.mark.asyncio
    async def test_list_is_newest_first_and_pending_only(self, seeded_session):
        older = await _add_request(seeded_session, "ames", None, minutes_ago=10)
        newer = await _add_request(seeded_session, "ames", "pantry-1", minutes_ago=1)
        done = await _add_request(seeded_session, "ames", "pantry-2", minutes_ago=0)
        done.status = "rejected"
        await seeded_session.flush()

        rows = await _service(seeded_session).list_pending(_SUPER)

        assert [r.id for r in rows] == [newer.id, older.id]

    @pytest.mark.asyncio
    async def test_non_admin_cannot_list(self, seeded_session):
        with pytest.raises(ForbiddenException):
            await _service(seeded_session).list_pending(AdminAccess.none())

    @pytest.mark.asyncio
    async def test_admin_without_scopes_gets_empty_list(self, seeded_session):
        await _add_request(seeded_session, "ames", None)
        access = AdminAccess(is_admin=True, roles=frozenset({AdminRole.CITY_ADMIN}))

        assert await _service(seeded_session).list_pending(access) == []


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class TestResolveUpdate:
    @pytest.mark.asyncio
    async def test_end_to_end_add_then_approve(self, seeded_session):
        repository = SqlResourceRepository(seeded_session)
        svc = _service(seeded_session, repository)

        request = await svc.submit_update(
            "contributor@example.org",
            "ames",
            ResourceCategory.FOOD,
            ResourceUpdatePayload(name="New Pantry", address="1 Main St"),
        )
        assert request.change_type == ChangeType.ADD.value
        assert request.status == UpdateStatus.PENDING.value

        resolved = await svc.resolve_update(
            _AMES_ADMIN, request.id, ReviewAction.APPROVE, reviewer_email="ames-admin@example.org"
        )

        assert resolved.status == UpdateStatus.APPROVED.value
        assert resolved.reviewed_by_email == "ames-admin@example.org"
        assert resolved.reviewed_at is not None

        foods = await repository.list_resources("ames", ResourceCategory.FOOD)
        created = [r for r in foods if r.name == "New Pantry"]
        assert len(created) == 1
        assert created[0].address == "1 Main St"
        assert created[0].external_id not in {"pantry-1", "pantry-2"}
        assert resolved.resource_external_id == created[0].external_id

    @pytest.mark.asyncio
    async def test_approve_existing_resource_merges_fields(self, seeded_session):
        repository = SqlResourceRepository(seeded_session)
        request = await _add_request(
            seeded_session,
            "ames",
            "pantry-1",
            payload={
                "resource_id": "pantry-1",
                "name": "Food at First",
                "address": "300 Main St",
                "hours": "Mon-Fri 5-6pm",
                "availability_status": "yes",
            },
        )

        await _service(seeded_session, repository).resolve_update(
            _AMES_ADMIN, request.id, ReviewAction.APPROVE, reviewer_email="a@example.org"
        )

        resource = await repository.find_resource("ames", "pantry-1", ResourceCategory.FOOD)
        assert resource.hours == "Mon-Fri 5-6pm"
        assert resource.availability_status == "yes"
        assert resource.last_available_at is not None

    @pytest.mark.asyncio
    async def test_second_resolution_conflicts_and_keeps_first(self, seeded_session):
        request = await _add_request(seeded_session, "ames", None)
        svc = _service(seeded_session)

        await svc.resolve_update(
            _SUPER, request.id, ReviewAction.REJECT, note="dup", reviewer_email="first@example.org"
        )
        with pytest.raises(ConflictException):
            await svc.resolve_update(
                _SUPER, request.id, ReviewAction.APPROVE, reviewer_email="second@example.org"
            )

        again = await svc.get_request(request.id)
        assert again.status == UpdateStatus.REJECTED.value
        assert again.reviewed_by_email == "first@example.org"
        assert again.review_note == "dup"

    @pytest.mark.asyncio
    async def test_reject_does_not_touch_repository(self, seeded_session):
        request = await _add_request(seeded_session, "ames", None)
        repository = AsyncMock()

        resolved = await _service(seeded_session, repository).resolve_update(
            _SUPER, request.id, ReviewAction.REJECT
        )

        assert resolved.status == UpdateStatus.REJECTED.value
        assert resolved.reviewed_by_email == "system"
        repository.upsert_resource.assert_not_called()

    @pytest.mark.asyncio
    async def test_repository_failure_leaves_request_pending(self, seeded_session):
        request = await _add_request(seeded_session, "ames", None)
        repository = AsyncMock()
        repository.upsert_resource.side_effect = RuntimeError("disk full")

        with pytest.raises(RuntimeError):
            await _service(seeded_session, repository).resolve_update(
                _SUPER, request.id, ReviewAction.APPROVE, reviewer_email="a@example.org"
            )

        assert request.status == UpdateStatus.PENDING.value
        assert request.reviewed_by_email is None
        assert request.reviewed_at is None

    @pytest.mark.asyncio
    async def test_approve_without_name_or_address_fails_validation(self, seeded_session):
        request = await _add_request(seeded_session, "ames", None, payload={"name": "Only a name"})
        repository = AsyncMock()

        with pytest.raises(ValidationException):
            await _service(seeded_session, repository).resolve_update(
                _SUPER, request.id, ReviewAction.APPROVE
            )

        assert request.status == UpdateStatus.PENDING.value
        repository.upsert_resource.assert_not_called()

    @pytest.mark.asyncio
    async def test_local_admin_cannot_resolve_other_location(self, seeded_session):
        request = await _add_request(seeded_session, "boone", "loc-y")

        with pytest.raises(ForbiddenException):
            await _service(seeded_session).resolve_update(
                _BOONE_LOCAL, request.id, ReviewAction.REJECT
            )

    @pytest.mark.asyncio
    async def test_unknown_request_is_not_found(self, seeded_session):
        with pytest.raises(NotFoundException):
            await _service(seeded_session).resolve_update(
                _SUPER, uuid.uuid4(), ReviewAction.REJECT
            )

    @pytest.mark.asyncio
    async def test_non_admin_is_forbidden_before_lookup(self, seeded_session):
        with pytest.raises(ForbiddenException):
            await _service(seeded_session).resolve_update(
                AdminAccess.none(), uuid.uuid4(), ReviewAction.REJECT
            )

    @pytest.mark.asyncio
    async def test_concurrent_resolution_is_a_conflict(self, seeded_session):
        request = await _add_request(seeded_session, "ames", None)
        # Another reviewer resolves the row behind this session's back
        await seeded_session.execute(
            update(ResourceUpdateRequest)
            .where(ResourceUpdateRequest.id == request.id)
            .values(status="rejected")
            .execution_options(synchronize_session=False)
        )

        with pytest.raises(ConflictException):
            await _service(seeded_session).resolve_update(
                _SUPER, request.id, ReviewAction.REJECT
            )


def test_normalize_availability_drops_unknown_values():
    assert normalize_availability("yes") == "yes"
    assert normalize_availability("not_sure") == "not_sure"
    assert normalize_availability("maybe") is None
    assert normalize_availability(None) is None
