"""Role-assignment store: the persisted admin grants the access resolver reads."""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from newbridge.models.admin_role_assignment import AdminRoleAssignment
from newbridge.modules.access.schemas import RoleAssignmentRow

logger = logging.getLogger(__name__)


class RoleAssignmentStore(ABC):
    @abstractmethod
    async def list_for_email(self, email: str) -> list[RoleAssignmentRow]:
        """Return the raw grant columns of every assignment held by ``email``."""

    @abstractmethod
    async def list_all(self) -> list[AdminRoleAssignment]:
        """Return every assignment ordered by e-mail, role, city and location."""

    @abstractmethod
    async def list_assigned_emails(self) -> list[str]:
        """Return the distinct e-mails that hold at least one assignment."""

    @abstractmethod
    async def find_matching(
        self,
        user_email: str,
        role: str,
        scope_type: str,
        city_slug: str | None,
        location_id: str | None,
    ) -> AdminRoleAssignment | None:
        """Return the assignment with exactly this grant tuple, if any."""

    @abstractmethod
    async def create(
        self,
        user_email: str,
        role: str,
        scope_type: str,
        city_slug: str | None,
        location_id: str | None,
    ) -> AdminRoleAssignment:
        """Persist a new assignment."""

    @abstractmethod
    async def delete(self, assignment_id: uuid.UUID) -> bool:
        """Delete an assignment by id. Returns False when nothing was removed."""


class SqlRoleAssignmentStore(RoleAssignmentStore):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_email(self, email: str) -> list[RoleAssignmentRow]:
        # Savepoint: a failed lookup must not abort the request transaction
        async with self.db.begin_nested():
            result = await self.db.execute(
                select(
                    AdminRoleAssignment.role,
                    AdminRoleAssignment.scope_type,
                    AdminRoleAssignment.city_slug,
                    AdminRoleAssignment.location_id,
                ).where(func.lower(AdminRoleAssignment.user_email) == email)
            )
        return [
            RoleAssignmentRow(
                role=row.role,
                scope_type=row.scope_type,
                city_slug=row.city_slug,
                location_id=row.location_id,
            )
            for row in result.all()
        ]

    async def list_all(self) -> list[AdminRoleAssignment]:
        result = await self.db.execute(
            select(AdminRoleAssignment).order_by(
                AdminRoleAssignment.user_email.asc(),
                AdminRoleAssignment.role.asc(),
                AdminRoleAssignment.city_slug.asc().nulls_first(),
                AdminRoleAssignment.location_id.asc().nulls_first(),
            )
        )
        return list(result.scalars().all())

    async def list_assigned_emails(self) -> list[str]:
        result = await self.db.execute(
            select(AdminRoleAssignment.user_email)
            .distinct()
            .order_by(AdminRoleAssignment.user_email.asc())
        )
        return list(result.scalars().all())

    async def find_matching(
        self,
        user_email: str,
        role: str,
        scope_type: str,
        city_slug: str | None,
        location_id: str | None,
    ) -> AdminRoleAssignment | None:
        # NULL scope columns have to be matched with IS NULL, not equality
        query = select(AdminRoleAssignment).where(
            AdminRoleAssignment.user_email == user_email,
            AdminRoleAssignment.role == role,
            AdminRoleAssignment.scope_type == scope_type,
            AdminRoleAssignment.city_slug.is_(None)
            if city_slug is None
            else AdminRoleAssignment.city_slug == city_slug,
            AdminRoleAssignment.location_id.is_(None)
            if location_id is None
            else AdminRoleAssignment.location_id == location_id,
        )
        result = await self.db.execute(query.limit(1))
        return result.scalar_one_or_none()

    async def create(
        self,
        user_email: str,
        role: str,
        scope_type: str,
        city_slug: str | None,
        location_id: str | None,
    ) -> AdminRoleAssignment:
        assignment = AdminRoleAssignment(
            user_email=user_email,
            role=role,
            scope_type=scope_type,
            city_slug=city_slug,
            location_id=location_id,
        )
        self.db.add(assignment)
        await self.db.flush()
        return assignment

    async def delete(self, assignment_id: uuid.UUID) -> bool:
        result = await self.db.execute(
            delete(AdminRoleAssignment).where(AdminRoleAssignment.id == assignment_id)
        )
        await self.db.flush()
        return bool(result.rowcount)
