"""FastAPI dependency functions for access resolution."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from newbridge.config import settings
from newbridge.database.session import get_db
from newbridge.exceptions import BackingStoreUnavailableException
from newbridge.modules.access.auth import get_current_principal
from newbridge.modules.access.resolver import AccessResolver
from newbridge.modules.access.schemas import AdminAccess, SessionPrincipal
from newbridge.modules.access.store import RoleAssignmentStore, SqlRoleAssignmentStore


def require_database_mode(feature: str) -> None:
    """Raise BackingStoreUnavailableException when running on file storage."""
    if not settings.use_database:
        raise BackingStoreUnavailableException(
            f"{feature} require a database-backed deployment (STORAGE_MODE=database)."
        )


def get_role_assignment_store(
    db: AsyncSession = Depends(get_db),
) -> RoleAssignmentStore | None:
    """Return the SQL role-assignment store, or None for file-backed deployments."""
    if not settings.use_database:
        return None
    return SqlRoleAssignmentStore(db)


def get_access_resolver(
    store: RoleAssignmentStore | None = Depends(get_role_assignment_store),
) -> AccessResolver:
    return AccessResolver(store, settings.super_admin_email_list)


async def get_admin_access(
    principal: SessionPrincipal = Depends(get_current_principal),
    resolver: AccessResolver = Depends(get_access_resolver),
) -> AdminAccess:
    """Resolve the current principal's access. Unauthenticated requests get 401."""
    return await resolver.resolve_access_for_session(principal)
