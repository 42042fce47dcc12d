"""Directory API routers: public city/resource reads and scoped admin edits."""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from newbridge.exceptions import ForbiddenException, NotFoundException, ValidationException
from newbridge.models.enums import ResourceCategory
from newbridge.modules.access.dependencies import get_admin_access
from newbridge.modules.access.guards import can_manage_location, require_super_admin
from newbridge.modules.access.schemas import AdminAccess
from newbridge.modules.directory.dependencies import get_resource_repository
from newbridge.modules.directory.repository import ResourceRepository
from newbridge.modules.directory.validation import validate_directory
from newbridge.modules.directory.schemas import (
    CityCreateRequest,
    CityListResponse,
    CityRecord,
    DirectoryValidationReport,
    ResourceFields,
    ResourceListResponse,
    ResourceRecord,
    ResourceUpsertRequest,
)

logger = logging.getLogger(__name__)

city_router = APIRouter(prefix="/cities", tags=["directory"])
admin_resource_router = APIRouter(prefix="/admin/cities", tags=["directory-admin"])
admin_directory_router = APIRouter(prefix="/admin", tags=["directory-admin"])

EXPORT_FILENAME = "our-new-bridge-backup.json"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _require_location_access(access: AdminAccess, slug: str, external_id: str) -> None:
    if not can_manage_location(access, slug, external_id):
        raise ForbiddenException(f"You cannot manage location '{external_id}' in '{slug}'")


async def _require_city(repository: ResourceRepository, slug: str) -> CityRecord:
    city = await repository.find_city(slug)
    if city is None:
        raise NotFoundException(f"City '{slug}' not found")
    return city


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@city_router.get("", response_model=CityListResponse)
async def list_cities(
    repository: ResourceRepository = Depends(get_resource_repository),
):
    """List every city in the directory."""
    cities = await repository.list_cities()
    return CityListResponse(items=cities, total=len(cities))


@city_router.get("/{slug}", response_model=CityRecord)
async def get_city(
    slug: str,
    repository: ResourceRepository = Depends(get_resource_repository),
):
    return await _require_city(repository, slug.lower())


@city_router.get("/{slug}/resources", response_model=ResourceListResponse)
async def list_city_resources(
    slug: str,
    category: ResourceCategory | None = Query(None),
    repository: ResourceRepository = Depends(get_resource_repository),
):
    """List a city's resources, optionally for one category."""
    city = await _require_city(repository, slug.lower())
    resources = await repository.list_resources(city.slug, category)
    return ResourceListResponse(items=resources, total=len(resources))


# ---------------------------------------------------------------------------
# Admin endpoints
# ---------------------------------------------------------------------------


@admin_resource_router.put(
    "/{slug}/resources/{category}/{external_id}", response_model=ResourceRecord
)
async def upsert_city_resource(
    slug: str,
    category: ResourceCategory,
    external_id: str,
    body: ResourceUpsertRequest,
    access: AdminAccess = Depends(get_admin_access),
    repository: ResourceRepository = Depends(get_resource_repository),
):
    """Create or edit a resource directly. Needs city or location scope."""
    slug = slug.lower()
    _require_location_access(access, slug, external_id)

    name = body.name.strip()
    address = body.address.strip()
    if not name or not address:
        raise ValidationException("Missing required fields: name, address")

    fields = ResourceFields(**body.model_dump(exclude={"name", "address"}), name=name, address=address)
    return await repository.upsert_resource(slug, category, external_id, fields)


@admin_resource_router.delete("/{slug}/resources/{category}/{external_id}", status_code=204)
async def delete_city_resource(
    slug: str,
    category: ResourceCategory,
    external_id: str,
    access: AdminAccess = Depends(get_admin_access),
    repository: ResourceRepository = Depends(get_resource_repository),
):
    slug = slug.lower()
    _require_location_access(access, slug, external_id)
    deleted = await repository.delete_resource(slug, category, external_id)
    if not deleted:
        raise NotFoundException(f"Resource '{external_id}' not found in '{slug}'")
    logger.info("Deleted %s resource %s in %s", category.value, external_id, slug)


# ---------------------------------------------------------------------------
# Super-admin directory management
# ---------------------------------------------------------------------------


@admin_resource_router.post("", response_model=CityRecord, status_code=201)
async def create_city(
    body: CityCreateRequest,
    access: AdminAccess = Depends(get_admin_access),
    repository: ResourceRepository = Depends(get_resource_repository),
):
    """Add a city to the directory. Super admin only."""
    require_super_admin(access)
    name = body.name.strip()
    if not name:
        raise ValidationException("Missing required field: name")

    city = CityRecord(
        **body.model_dump(exclude={"slug", "name"}), slug=body.slug.lower(), name=name
    )
    return await repository.create_city(city)


@admin_directory_router.get("/export")
async def export_directory(
    access: AdminAccess = Depends(get_admin_access),
    repository: ResourceRepository = Depends(get_resource_repository),
):
    """Download every city config and resource list as one JSON backup."""
    require_super_admin(access)
    cities = await repository.export_data()
    logger.info("Exported %d cities", len(cities))
    return JSONResponse(
        content={"exportedAt": datetime.now(UTC).isoformat(), "cities": cities},
        headers={
            "Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"',
            "Cache-Control": "no-store",
        },
    )


@admin_directory_router.get("/validate", response_model=DirectoryValidationReport)
async def validate_directory_data(
    access: AdminAccess = Depends(get_admin_access),
    repository: ResourceRepository = Depends(get_resource_repository),
):
    require_super_admin(access)
    return await validate_directory(repository)
