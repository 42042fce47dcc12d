"""Access resolution: turn a principal's e-mail into an AdminAccess snapshot."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.exc import SQLAlchemyError

from newbridge.models.enums import AdminRole, AdminScopeType
from newbridge.modules.access.schemas import (
    AdminAccess,
    LocationScope,
    RoleAssignmentRow,
    SessionPrincipal,
)
from newbridge.modules.access.store import RoleAssignmentStore

logger = logging.getLogger(__name__)

_VALID_ROLES = {role.value: role for role in AdminRole}
_VALID_SCOPE_TYPES = {scope.value for scope in AdminScopeType}


def normalize_email(email: str | None) -> str:
    """Trim and lower-case an e-mail; None becomes the empty string."""
    return email.strip().lower() if email else ""


def clean_text(value: str | None) -> str | None:
    """Strip a free-text field; blank becomes None."""
    if value is None:
        return None
    return value.strip() or None


def parse_role(value: str | None) -> AdminRole | None:
    """Return the AdminRole for a stored string, or None if it is not recognised."""
    if value is None:
        return None
    return _VALID_ROLES.get(str(value))


class AccessResolver:
    """Computes effective admin access from the static allow-list and stored grants.

    ``store`` is None for deployments without a role-assignment-capable backing
    store; only the super-admin allow-list counts there.
    """

    def __init__(
        self,
        store: RoleAssignmentStore | None,
        super_admin_emails: Iterable[str] = (),
    ) -> None:
        self.store = store
        self.super_admin_emails = {normalize_email(email) for email in super_admin_emails if email}

    async def resolve_access(self, email: str | None) -> AdminAccess:
        normalized = normalize_email(email)
        if not normalized:
            return AdminAccess.none()

        is_allow_listed = normalized in self.super_admin_emails
        rows = await self._load_rows(normalized)
        access = self._aggregate(rows, is_allow_listed)
        logger.debug(
            "Resolved access for %s: admin=%s super=%s roles=%s",
            normalized,
            access.is_admin,
            access.is_super_admin,
            sorted(role.value for role in access.roles),
        )
        return access

    async def resolve_access_for_session(self, principal: SessionPrincipal | None) -> AdminAccess:
        """Resolve access for a session principal.

        A token issued by the admin password sign-in is trusted as super admin
        without a lookup. Every other principal is resolved fresh by e-mail, and
        role claims carried in the token are ignored so that a revoked grant
        stops working immediately.
        """
        if principal is None:
            return AdminAccess.none()
        if principal.is_super_admin:
            return AdminAccess.super_admin()

        access = await self.resolve_access(principal.email)
        if not access.is_admin and principal.claimed_roles:
            logger.debug(
                "Ignoring role claims %s for %s: no current grant backs them",
                principal.claimed_roles,
                principal.email,
            )
        return access

    async def _load_rows(self, email: str) -> list[RoleAssignmentRow]:
        if self.store is None:
            return []
        try:
            return await self.store.list_for_email(email)
        except SQLAlchemyError as exc:
            logger.warning("Role-assignment store unavailable, using allow-list only: %s", exc)
            return []

    @staticmethod
    def _aggregate(rows: list[RoleAssignmentRow], is_allow_listed: bool) -> AdminAccess:
        roles: set[AdminRole] = {AdminRole.SUPER_ADMIN} if is_allow_listed else set()
        city_slugs: set[str] = set()
        location_scopes: set[LocationScope] = set()
        is_super_admin = is_allow_listed

        for row in rows:
            role = parse_role(row.role)
            if role is not None:
                roles.add(role)
            if role is AdminRole.SUPER_ADMIN or row.scope_type == AdminScopeType.GLOBAL.value:
                is_super_admin = True

            # Rows with an unrecognised scope type never widen city/location scope
            if row.scope_type not in _VALID_SCOPE_TYPES:
                continue
            if row.city_slug:
                city_slugs.add(row.city_slug.lower())
            if row.scope_type == AdminScopeType.LOCATION.value and row.city_slug and row.location_id:
                location_scopes.add(
                    LocationScope(city_slug=row.city_slug.lower(), location_id=str(row.location_id))
                )

        return AdminAccess(
            is_admin=is_super_admin or bool(roles),
            is_super_admin=is_super_admin,
            roles=frozenset(roles),
            city_slugs=frozenset(city_slugs),
            location_scopes=frozenset(location_scopes),
        )
