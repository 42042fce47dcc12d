"""Permission administration API router (super admins only)."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from newbridge.database.session import get_db
from newbridge.modules.access.dependencies import get_admin_access, get_role_assignment_store
from newbridge.modules.access.schemas import AdminAccess
from newbridge.modules.access.store import RoleAssignmentStore
from newbridge.modules.directory.dependencies import get_resource_repository
from newbridge.modules.directory.repository import ResourceRepository
from newbridge.modules.permissions.schemas import (
    AssignmentCreate,
    AssignmentDeleteResponse,
    AssignmentResponse,
    PermissionOverviewResponse,
)
from newbridge.modules.permissions.service import PermissionService

router = APIRouter(prefix="/admin/permissions", tags=["permissions"])


def get_permission_service(
    db: AsyncSession = Depends(get_db),
    repository: ResourceRepository = Depends(get_resource_repository),
    store: RoleAssignmentStore | None = Depends(get_role_assignment_store),
) -> PermissionService:
    return PermissionService(db, repository, store)


@router.get("", response_model=PermissionOverviewResponse)
async def get_permission_overview(
    access: AdminAccess = Depends(get_admin_access),
    svc: PermissionService = Depends(get_permission_service),
):
    """Assignments, cities, grantable users and each city's locations."""
    return await svc.get_overview(access)


@router.post("", response_model=AssignmentResponse, status_code=201)
async def create_assignment(
    body: AssignmentCreate,
    access: AdminAccess = Depends(get_admin_access),
    svc: PermissionService = Depends(get_permission_service),
):
    assignment = await svc.create_assignment(
        access,
        user_email=body.user_email,
        role=body.role,
        city_slug=body.city_slug,
        location_id=body.location_id,
    )
    return AssignmentResponse.model_validate(assignment)


@router.delete("/{assignment_id}", response_model=AssignmentDeleteResponse)
async def delete_assignment(
    assignment_id: uuid.UUID,
    access: AdminAccess = Depends(get_admin_access),
    svc: PermissionService = Depends(get_permission_service),
):
    deleted = await svc.delete_assignment(access, assignment_id)
    return AssignmentDeleteResponse(deleted=deleted)
