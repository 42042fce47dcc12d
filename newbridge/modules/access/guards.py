"""Pure authorization predicates over an AdminAccess snapshot.

Slugs and ids are compared exactly; callers lower-case city slugs first.
"""

from __future__ import annotations

from newbridge.exceptions import ForbiddenException
from newbridge.models.enums import AdminRole
from newbridge.modules.access.schemas import AdminAccess, LocationScope


def can_manage_city(access: AdminAccess, city_slug: str) -> bool:
    if access.is_super_admin:
        return True
    # A local admin's city shows up in city_slugs too, so the role check matters
    return city_slug in access.city_slugs and AdminRole.CITY_ADMIN in access.roles


def can_manage_location(access: AdminAccess, city_slug: str, location_id: str) -> bool:
    if can_manage_city(access, city_slug):
        return True
    return LocationScope(city_slug=city_slug, location_id=location_id) in access.location_scopes


def can_review_resource_update(
    access: AdminAccess, city_slug: str, resource_external_id: str | None
) -> bool:
    if access.is_super_admin:
        return True
    if not resource_external_id:
        return can_manage_city(access, city_slug)
    return can_manage_location(access, city_slug, resource_external_id)


def require_admin(access: AdminAccess) -> None:
    """Raise ForbiddenException unless the access carries any admin role."""
    if not access.is_admin:
        raise ForbiddenException("This action requires admin privileges")


def require_super_admin(access: AdminAccess) -> None:
    """Raise ForbiddenException unless the access is super admin."""
    if not access.is_super_admin:
        raise ForbiddenException("This action requires super admin privileges")
