"""Access snapshot types and their API representations."""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel

from newbridge.models.enums import AdminRole


@dataclass(frozen=True)
class LocationScope:
    """A single location (resource) an admin may manage inside one city."""

    city_slug: str
    location_id: str


@dataclass(frozen=True)
class AdminAccess:
    """Resolved authorization snapshot for one principal at request time."""

    is_admin: bool = False
    is_super_admin: bool = False
    roles: frozenset[AdminRole] = field(default_factory=frozenset)
    city_slugs: frozenset[str] = field(default_factory=frozenset)
    location_scopes: frozenset[LocationScope] = field(default_factory=frozenset)

    @classmethod
    def none(cls) -> AdminAccess:
        return cls()

    @classmethod
    def super_admin(cls) -> AdminAccess:
        return cls(is_admin=True, is_super_admin=True, roles=frozenset({AdminRole.SUPER_ADMIN}))

    @property
    def reviewable_city_slugs(self) -> frozenset[str]:
        """Cities in which this access holds any city or location scope."""
        return self.city_slugs | {scope.city_slug for scope in self.location_scopes}


@dataclass(frozen=True)
class RoleAssignmentRow:
    """Raw grant columns as read from the role-assignment store, before parsing."""

    role: str
    scope_type: str
    city_slug: str | None = None
    location_id: str | None = None


@dataclass
class SessionPrincipal:
    """The authenticated principal extracted from a session token.

    ``claimed_roles`` mirrors the identity provider's ``roles`` claim. It is never
    trusted for authorization; the resolver only logs it when no stored grant
    backs the claim, which flags stale or forged tokens.
    """

    subject: str
    email: str | None = None
    name: str | None = None
    is_super_admin: bool = False
    claimed_roles: list[str] = field(default_factory=list)


class LocationScopeResponse(BaseModel):
    city_slug: str
    location_id: str


class AdminAccessResponse(BaseModel):
    is_admin: bool
    is_super_admin: bool
    roles: list[AdminRole]
    city_slugs: list[str]
    location_scopes: list[LocationScopeResponse]

    @classmethod
    def from_access(cls, access: AdminAccess) -> AdminAccessResponse:
        return cls(
            is_admin=access.is_admin,
            is_super_admin=access.is_super_admin,
            roles=sorted(access.roles, key=lambda role: role.value),
            city_slugs=sorted(access.city_slugs),
            location_scopes=[
                LocationScopeResponse(city_slug=scope.city_slug, location_id=scope.location_id)
                for scope in sorted(
                    access.location_scopes, key=lambda s: (s.city_slug, s.location_id)
                )
            ],
        )


class PrincipalResponse(BaseModel):
    email: str | None = None
    name: str | None = None
    access: AdminAccessResponse
