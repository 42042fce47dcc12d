"""Access module: admin access resolution and authorization guards."""

from newbridge.modules.access.auth import (
    create_access_token,
    get_current_principal,
    get_optional_principal,
)
from newbridge.modules.access.dependencies import (
    get_access_resolver,
    get_admin_access,
    get_role_assignment_store,
    require_database_mode,
)
from newbridge.modules.access.guards import (
    can_manage_city,
    can_manage_location,
    can_review_resource_update,
    require_admin,
    require_super_admin,
)
from newbridge.modules.access.resolver import AccessResolver, clean_text, normalize_email
from newbridge.modules.access.schemas import AdminAccess, LocationScope, SessionPrincipal
from newbridge.modules.access.store import RoleAssignmentStore, SqlRoleAssignmentStore

__all__ = [
    # Schemas
    "AdminAccess",
    "LocationScope",
    "SessionPrincipal",
    # Auth
    "create_access_token",
    "get_current_principal",
    "get_optional_principal",
    # Resolution
    "AccessResolver",
    "clean_text",
    "normalize_email",
    # Store
    "RoleAssignmentStore",
    "SqlRoleAssignmentStore",
    # Guards
    "can_manage_city",
    "can_manage_location",
    "can_review_resource_update",
    "require_admin",
    "require_super_admin",
    # Dependencies
    "get_access_resolver",
    "get_admin_access",
    "get_role_assignment_store",
    "require_database_mode",
]
