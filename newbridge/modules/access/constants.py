"""Access module constants for admin roles and scopes."""

from newbridge.models.enums import AdminRole, AdminScopeType

# Each role is granted at exactly one kind of scope
ROLE_SCOPE_TYPES: dict[AdminRole, AdminScopeType] = {
    AdminRole.SUPER_ADMIN: AdminScopeType.GLOBAL,
    AdminRole.CITY_ADMIN: AdminScopeType.CITY,
    AdminRole.LOCAL_ADMIN: AdminScopeType.LOCATION,
}

# Roles whose grants must name a city / a location inside that city
ROLES_REQUIRING_CITY = {AdminRole.CITY_ADMIN, AdminRole.LOCAL_ADMIN}
ROLES_REQUIRING_LOCATION = {AdminRole.LOCAL_ADMIN}

# Name carried by tokens issued through the admin password sign-in
ADMIN_PASSWORD_PRINCIPAL_NAME = "admin"
