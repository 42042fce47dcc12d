"""Permission administration: super admins grant and revoke scoped roles."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newbridge.exceptions import (
    BackingStoreUnavailableException,
    ConflictException,
    NotFoundException,
    ValidationException,
)
from newbridge.models.admin_role_assignment import AdminRoleAssignment
from newbridge.models.enums import AdminRole
from newbridge.modules.access.constants import (
    ROLE_SCOPE_TYPES,
    ROLES_REQUIRING_CITY,
    ROLES_REQUIRING_LOCATION,
)
from newbridge.modules.access.guards import require_super_admin
from newbridge.modules.access.resolver import clean_text, normalize_email
from newbridge.modules.access.schemas import AdminAccess
from newbridge.modules.access.store import RoleAssignmentStore
from newbridge.modules.directory.repository import ResourceRepository
from newbridge.modules.directory.schemas import CityRecord, LocationOption
from newbridge.modules.identity.service import SignInService
from newbridge.modules.permissions.schemas import AssignmentResponse, PermissionOverviewResponse

logger = logging.getLogger(__name__)


class PermissionService:
    def __init__(
        self,
        db: AsyncSession,
        repository: ResourceRepository,
        store: RoleAssignmentStore | None,
    ):
        self.db = db
        self.repository = repository
        self.store = store

    def _authorize(self, access: AdminAccess) -> RoleAssignmentStore:
        """Return the store after checking it exists and the caller is a super admin."""
        if self.store is None:
            raise BackingStoreUnavailableException(
                "Permission management requires a database-backed deployment (STORAGE_MODE=database)."
            )
        require_super_admin(access)
        return self.store

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_known_users(self, store: RoleAssignmentStore) -> list[str]:
        """Signed-in users plus anyone already holding an assignment."""
        emails = {normalize_email(email) for email in await store.list_assigned_emails()}
        try:
            async with self.db.begin_nested():
                tracked = await SignInService(self.db).list_tracked_emails()
        except SQLAlchemyError as exc:
            logger.warning("Tracked users unavailable, using assignment emails only: %s", exc)
            tracked = []
        emails.update(normalize_email(email) for email in tracked)
        emails.discard("")
        return sorted(emails)

    async def _locations_by_city(
        self, cities: list[CityRecord]
    ) -> dict[str, list[LocationOption]]:
        locations: dict[str, list[LocationOption]] = {}
        for city in cities:
            resources = await self.repository.list_resources(city.slug)
            locations[city.slug] = [
                LocationOption(id=r.external_id, label=f"{r.name} ({r.external_id})")
                for r in resources
            ]
        return locations

    async def get_overview(self, access: AdminAccess) -> PermissionOverviewResponse:
        store = self._authorize(access)
        assignments = await store.list_all()
        cities = await self.repository.list_cities()
        return PermissionOverviewResponse(
            assignments=[AssignmentResponse.model_validate(a) for a in assignments],
            cities=cities,
            users=await self.list_known_users(store),
            locations_by_city=await self._locations_by_city(cities),
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_assignment(
        self,
        access: AdminAccess,
        user_email: str | None,
        role: AdminRole,
        city_slug: str | None = None,
        location_id: str | None = None,
    ) -> AdminRoleAssignment:
        """Grant ``role`` to a known user at the scope the role implies."""
        store = self._authorize(access)

        email = normalize_email(user_email)
        if not email:
            raise ValidationException("User email is required")

        if email not in await self.list_known_users(store):
            raise ValidationException(
                "User must sign in at least once before a role can be assigned"
            )

        city_slug = clean_text(city_slug)
        city_slug = city_slug.lower() if city_slug else None
        location_id = clean_text(location_id)

        if role in ROLES_REQUIRING_CITY and not city_slug:
            raise ValidationException("City is required for city and local admins")
        if role in ROLES_REQUIRING_LOCATION and not location_id:
            raise ValidationException("Location is required for local admins")

        if role in ROLES_REQUIRING_CITY:
            if await self.repository.find_city(city_slug) is None:
                raise NotFoundException(f"City '{city_slug}' not found")
        else:
            city_slug = None

        if role in ROLES_REQUIRING_LOCATION:
            if await self.repository.find_resource(city_slug, location_id) is None:
                raise NotFoundException(f"Location '{location_id}' not found in '{city_slug}'")
        else:
            location_id = None

        scope_type = ROLE_SCOPE_TYPES[role].value
        existing = await store.find_matching(email, role.value, scope_type, city_slug, location_id)
        if existing is not None:
            raise ConflictException("This role assignment already exists")

        try:
            assignment = await store.create(email, role.value, scope_type, city_slug, location_id)
        except IntegrityError as exc:
            raise ConflictException("This role assignment already exists") from exc

        logger.info(
            "Granted %s to %s (city=%s, location=%s)", role.value, email, city_slug, location_id
        )
        return assignment

    async def delete_assignment(self, access: AdminAccess, assignment_id: uuid.UUID) -> bool:
        """Revoke an assignment. A missing id is not an error."""
        store = self._authorize(access)
        deleted = await store.delete(assignment_id)
        if deleted:
            logger.info("Revoked role assignment %s", assignment_id)
        return deleted
