"""Contributor update queue: submit, list for review, approve or reject."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime

from pydantic import ValidationError
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from newbridge.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
)
from newbridge.models.enums import (
    AvailabilityStatus,
    ChangeType,
    ResourceCategory,
    ReviewAction,
    UpdateStatus,
)
from newbridge.models.resource_update_request import ResourceUpdateRequest
from newbridge.modules.access.guards import can_review_resource_update, require_admin
from newbridge.modules.access.resolver import clean_text, normalize_email
from newbridge.modules.access.schemas import AdminAccess
from newbridge.modules.directory.repository import ResourceRepository, new_external_id
from newbridge.modules.directory.schemas import ResourceFields, ResourceRecord
from newbridge.modules.updates.constants import SYSTEM_REVIEWER_EMAIL, VALID_AVAILABILITY_STATUSES
from newbridge.modules.updates.schemas import ResourceUpdatePayload

logger = logging.getLogger(__name__)

_ACTION_STATUS_MAP = {
    ReviewAction.APPROVE: UpdateStatus.APPROVED,
    ReviewAction.REJECT: UpdateStatus.REJECTED,
}


def normalize_availability(value: str | None) -> str | None:
    """Return ``yes``, ``no`` or ``not_sure``; anything else is dropped."""
    return value if value in VALID_AVAILABILITY_STATUSES else None


class ResourceUpdateService:
    def __init__(self, db: AsyncSession, repository: ResourceRepository):
        self.db = db
        self.repository = repository

    async def submit_update(
        self,
        principal_email: str | None,
        city_slug: str,
        category: ResourceCategory,
        payload: ResourceUpdatePayload,
        submitted_by_name: str | None = None,
    ) -> ResourceUpdateRequest:
        """Queue a proposed change as ``pending``.

        Any authenticated principal may submit. Only the city is checked here;
        name and address are enforced when the request is approved.
        """
        submitted_by_email = normalize_email(principal_email)
        if not submitted_by_email:
            raise UnauthorizedException("Sign in to suggest an update")

        slug = (city_slug or "").strip().lower()
        if not slug:
            raise ValidationException("Missing required field: city_slug")

        city = await self.repository.find_city(slug)
        if city is None:
            raise NotFoundException(f"City '{slug}' not found")

        resource_id = clean_text(payload.resource_id)
        change_type = ChangeType.UPDATE if resource_id else ChangeType.ADD
        resolved_category = payload.category or category
        stored_payload = payload.model_copy(
            update={"resource_id": resource_id, "category": resolved_category}
        )

        update_request = ResourceUpdateRequest(
            city_slug=slug,
            resource_external_id=resource_id,
            category=resolved_category.value,
            change_type=change_type.value,
            payload=stored_payload.model_dump(mode="json"),
            submitted_by_email=submitted_by_email,
            submitted_by_name=submitted_by_name,
            submitted_at=datetime.now(UTC),
            status=UpdateStatus.PENDING.value,
        )
        self.db.add(update_request)
        await self.db.flush()
        logger.info(
            "Update request %s submitted by %s for %s (%s %s)",
            update_request.id,
            submitted_by_email,
            slug,
            change_type.value,
            resource_id or "new resource",
        )
        return update_request

    async def get_request(self, request_id: uuid.UUID) -> ResourceUpdateRequest:
        result = await self.db.execute(
            select(ResourceUpdateRequest).where(ResourceUpdateRequest.id == request_id)
        )
        update_request = result.scalar_one_or_none()
        if update_request is None:
            raise NotFoundException("Update request not found")
        return update_request

    async def list_pending(self, access: AdminAccess) -> list[ResourceUpdateRequest]:
        """Pending requests this access may review, newest first.

        Non-super admins are narrowed to their cities first, then each row is
        checked individually so a location admin only sees their own locations.
        """
        require_admin(access)

        query = (
            select(ResourceUpdateRequest)
            .where(ResourceUpdateRequest.status == UpdateStatus.PENDING.value)
            .order_by(ResourceUpdateRequest.submitted_at.desc())
        )
        if access.is_super_admin:
            result = await self.db.execute(query)
            return list(result.scalars().all())

        city_slugs = access.reviewable_city_slugs
        if not city_slugs:
            return []

        result = await self.db.execute(
            query.where(ResourceUpdateRequest.city_slug.in_(sorted(city_slugs)))
        )
        return [
            row
            for row in result.scalars().all()
            if can_review_resource_update(access, row.city_slug, row.resource_external_id)
        ]

    async def resolve_update(
        self,
        access: AdminAccess,
        request_id: uuid.UUID,
        action: ReviewAction,
        note: str | None = None,
        reviewer_email: str | None = None,
    ) -> ResourceUpdateRequest:
        """Approve or reject a pending request.

        On approval the resource repository is written first; the status only
        moves out of ``pending`` once that write has succeeded.
        """
        require_admin(access)
        update_request = await self.get_request(request_id)

        if not can_review_resource_update(
            access, update_request.city_slug, update_request.resource_external_id
        ):
            raise ForbiddenException("You cannot review updates for this resource")

        if update_request.status != UpdateStatus.PENDING.value:
            raise ConflictException("Update request already processed")

        resource_external_id = update_request.resource_external_id
        if action == ReviewAction.APPROVE:
            record = await self._apply_to_repository(update_request)
            resource_external_id = record.external_id

        return await self._mark_resolved(
            update_request,
            _ACTION_STATUS_MAP[action],
            reviewer_email or SYSTEM_REVIEWER_EMAIL,
            note,
            resource_external_id,
        )

    async def _apply_to_repository(self, update_request: ResourceUpdateRequest) -> ResourceRecord:
        try:
            payload = ResourceUpdatePayload.model_validate(update_request.payload or {})
        except ValidationError as exc:
            raise ValidationException("Stored update payload is invalid") from exc

        name = clean_text(payload.name)
        address = clean_text(payload.address)
        if not name or not address:
            raise ValidationException("Invalid payload: name and address required")

        availability_status = normalize_availability(payload.availability_status)
        now = datetime.now(UTC)
        fields = ResourceFields(
            name=name,
            address=address,
            lat=payload.lat,
            lng=payload.lng,
            hours=clean_text(payload.hours),
            days_open=clean_text(payload.days_open),
            phone=clean_text(payload.phone),
            website=clean_text(payload.website),
            requires_id=payload.requires_id,
            walk_in=payload.walk_in,
            notes=clean_text(payload.notes),
            availability_status=availability_status,
            last_available_at=now if availability_status == AvailabilityStatus.YES.value else None,
        )
        external_id = (
            update_request.resource_external_id
            or clean_text(payload.resource_id)
            or new_external_id()
        )
        return await self.repository.upsert_resource(
            update_request.city_slug,
            ResourceCategory(update_request.category),
            external_id,
            fields,
        )

    async def _mark_resolved(
        self,
        update_request: ResourceUpdateRequest,
        status: UpdateStatus,
        reviewer_email: str,
        note: str | None,
        resource_external_id: str | None,
    ) -> ResourceUpdateRequest:
        # Conditional on still being pending so two concurrent reviewers cannot both win
        result = await self.db.execute(
            update(ResourceUpdateRequest)
            .where(
                ResourceUpdateRequest.id == update_request.id,
                ResourceUpdateRequest.status == UpdateStatus.PENDING.value,
            )
            .values(
                status=status.value,
                reviewed_by_email=reviewer_email,
                reviewed_at=datetime.now(UTC),
                review_note=note or None,
                resource_external_id=resource_external_id,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConflictException("Update request already processed")

        await self.db.flush()
        await self.db.refresh(update_request)
        logger.info(
            "Update request %s %s by %s", update_request.id, status.value, reviewer_email
        )
        return update_request
