"""Pydantic v2 schemas for cities and resources crossing the repository boundary."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from newbridge.models.enums import ResourceCategory


class CityRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    slug: str
    name: str
    state: str | None = None
    center_lat: float | None = None
    center_lng: float | None = None
    default_zoom: int = 12


class ResourceFields(BaseModel):
    """Field values written to a resource by an upsert."""

    name: str
    address: str
    lat: float | None = None
    lng: float | None = None
    hours: str | None = None
    days_open: str | None = None
    phone: str | None = None
    website: str | None = None
    requires_id: bool = False
    walk_in: bool = False
    notes: str | None = None
    availability_status: str | None = None
    last_available_at: datetime | None = None


class ResourceRecord(ResourceFields):
    model_config = ConfigDict(from_attributes=True)

    city_slug: str
    category: ResourceCategory
    external_id: str


class LocationOption(BaseModel):
    id: str
    label: str


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ResourceUpsertRequest(BaseModel):
    name: str = Field(..., max_length=255)
    address: str = Field(..., max_length=500)
    lat: float | None = None
    lng: float | None = None
    hours: str | None = Field(None, max_length=255)
    days_open: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)
    website: str | None = Field(None, max_length=500)
    requires_id: bool = False
    walk_in: bool = False
    notes: str | None = None


class CityCreateRequest(BaseModel):
    slug: str = Field(..., min_length=1, max_length=100, pattern=r"^[A-Za-z0-9][A-Za-z0-9-]*$")
    name: str = Field(..., min_length=1, max_length=255)
    state: str | None = Field(None, max_length=100)
    center_lat: float = Field(..., ge=-90, le=90)
    center_lng: float = Field(..., ge=-180, le=180)
    default_zoom: int = Field(12, ge=1, le=20)


class CityListResponse(BaseModel):
    items: list[CityRecord]
    total: int


class ResourceListResponse(BaseModel):
    items: list[ResourceRecord]
    total: int


class CityValidationResult(BaseModel):
    city: str
    slug: str
    status: str
    resource_count: int
    config_issues: list[str]
    resource_issues: list[str]


class DirectoryValidationReport(BaseModel):
    results: list[CityValidationResult]
    errors: list[str]
