"""Pydantic v2 schemas for permission administration."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from newbridge.models.enums import AdminRole
from newbridge.modules.directory.schemas import CityRecord, LocationOption


class AssignmentCreate(BaseModel):
    user_email: str = Field(..., max_length=255)
    role: AdminRole
    city_slug: str | None = Field(None, max_length=100)
    location_id: str | None = Field(None, max_length=100)


class AssignmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_email: str
    role: str
    scope_type: str
    city_slug: str | None = None
    location_id: str | None = None
    created_at: datetime


class PermissionOverviewResponse(BaseModel):
    assignments: list[AssignmentResponse]
    cities: list[CityRecord]
    users: list[str]
    locations_by_city: dict[str, list[LocationOption]]


class AssignmentDeleteResponse(BaseModel):
    deleted: bool
