"""Update request API routers: contributor submissions and admin review."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from newbridge.database.session import get_db
from newbridge.modules.access.auth import get_current_principal
from newbridge.modules.access.dependencies import get_admin_access, require_database_mode
from newbridge.modules.access.schemas import AdminAccess, SessionPrincipal
from newbridge.modules.directory.dependencies import get_resource_repository
from newbridge.modules.directory.repository import ResourceRepository
from newbridge.modules.updates.constants import ADMIN_SUBMITTER_EMAIL
from newbridge.modules.updates.schemas import (
    ResolveUpdateRequest,
    ResourceUpdateListResponse,
    ResourceUpdateResponse,
    ResourceUpdateSubmit,
)
from newbridge.modules.updates.service import ResourceUpdateService

submit_router = APIRouter(prefix="/updates", tags=["updates"])
admin_router = APIRouter(prefix="/admin/resource-updates", tags=["updates-admin"])

_FEATURE = "Contributor updates"


def _submitter_email(principal: SessionPrincipal) -> str | None:
    """Password sessions have no e-mail; they submit as the admin principal."""
    if principal.email:
        return principal.email
    if principal.is_super_admin:
        return ADMIN_SUBMITTER_EMAIL
    return None


# ---------------------------------------------------------------------------
# Contributor endpoints
# ---------------------------------------------------------------------------


@submit_router.post("/resources", response_model=ResourceUpdateResponse, status_code=201)
async def submit_resource_update(
    body: ResourceUpdateSubmit,
    principal: SessionPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
    repository: ResourceRepository = Depends(get_resource_repository),
):
    """Suggest a new resource or an edit to an existing one."""
    require_database_mode(_FEATURE)
    svc = ResourceUpdateService(db, repository)
    update_request = await svc.submit_update(
        principal_email=_submitter_email(principal),
        city_slug=body.city_slug,
        category=body.category,
        payload=body.payload,
        submitted_by_name=principal.name,
    )
    return ResourceUpdateResponse.model_validate(update_request)


# ---------------------------------------------------------------------------
# Admin review endpoints
# ---------------------------------------------------------------------------


@admin_router.get("", response_model=ResourceUpdateListResponse)
async def list_pending_updates(
    access: AdminAccess = Depends(get_admin_access),
    db: AsyncSession = Depends(get_db),
    repository: ResourceRepository = Depends(get_resource_repository),
):
    """Pending requests the caller may review, newest first."""
    require_database_mode(_FEATURE)
    svc = ResourceUpdateService(db, repository)
    rows = await svc.list_pending(access)
    return ResourceUpdateListResponse(
        items=[ResourceUpdateResponse.model_validate(r) for r in rows],
        total=len(rows),
    )


@admin_router.patch("/{request_id}", response_model=ResourceUpdateResponse)
async def resolve_update(
    request_id: uuid.UUID,
    body: ResolveUpdateRequest,
    principal: SessionPrincipal = Depends(get_current_principal),
    access: AdminAccess = Depends(get_admin_access),
    db: AsyncSession = Depends(get_db),
    repository: ResourceRepository = Depends(get_resource_repository),
):
    """Approve (apply to the directory) or reject a pending request."""
    require_database_mode(_FEATURE)
    svc = ResourceUpdateService(db, repository)
    update_request = await svc.resolve_update(
        access,
        request_id,
        body.action,
        note=body.note,
        reviewer_email=principal.email,
    )
    return ResourceUpdateResponse.model_validate(update_request)
