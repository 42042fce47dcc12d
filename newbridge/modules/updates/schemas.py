"""Pydantic v2 schemas for contributor update requests."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from newbridge.models.enums import ChangeType, ResourceCategory, ReviewAction, UpdateStatus


class ResourceUpdatePayload(BaseModel):
    """Proposed field values for one resource.

    Every field is optional; completeness (name and address) is only enforced
    when an admin approves the request.
    """

    model_config = ConfigDict(extra="ignore")

    resource_id: str | None = None
    name: str | None = None
    address: str | None = None
    lat: float | None = None
    lng: float | None = None
    hours: str | None = None
    days_open: str | None = None
    phone: str | None = None
    website: str | None = None
    requires_id: bool = False
    walk_in: bool = False
    notes: str | None = None
    category: ResourceCategory | None = None
    availability_status: str | None = None


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ResourceUpdateSubmit(BaseModel):
    city_slug: str = Field(..., max_length=100)
    category: ResourceCategory = ResourceCategory.FOOD
    payload: ResourceUpdatePayload = Field(default_factory=ResourceUpdatePayload)


class ResolveUpdateRequest(BaseModel):
    action: ReviewAction
    note: str | None = Field(None, max_length=2000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ResourceUpdateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    city_slug: str
    resource_external_id: str | None = None
    category: ResourceCategory
    change_type: ChangeType
    payload: dict
    submitted_by_email: str
    submitted_by_name: str | None = None
    submitted_at: datetime
    status: UpdateStatus
    reviewed_by_email: str | None = None
    reviewed_at: datetime | None = None
    review_note: str | None = None


class ResourceUpdateListResponse(BaseModel):
    items: list[ResourceUpdateResponse]
    total: int
