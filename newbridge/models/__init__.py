# Import all models so SQLAlchemy metadata is populated for Alembic autogenerate
from newbridge.models.admin_role_assignment import AdminRoleAssignment
from newbridge.models.city import City
from newbridge.models.enums import (
    AdminRole,
    AdminScopeType,
    AvailabilityStatus,
    ChangeType,
    ResourceCategory,
    ReviewAction,
    UpdateStatus,
)
from newbridge.models.resource import Resource
from newbridge.models.resource_update_request import ResourceUpdateRequest
from newbridge.models.tracked_user import TrackedUser

__all__ = [
    "AdminRole",
    "AdminRoleAssignment",
    "AdminScopeType",
    "AvailabilityStatus",
    "ChangeType",
    "City",
    "Resource",
    "ResourceCategory",
    "ResourceUpdateRequest",
    "ReviewAction",
    "TrackedUser",
    "UpdateStatus",
]
