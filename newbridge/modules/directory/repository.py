"""Abstract resource repository that approved changes are written into."""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from typing import Any

from newbridge.models.enums import ResourceCategory
from newbridge.modules.directory.schemas import CityRecord, ResourceFields, ResourceRecord

# snake_case field name -> key used in the published resources.json files
FILE_KEYS = {
    "name": "name",
    "address": "address",
    "lat": "lat",
    "lng": "lng",
    "hours": "hours",
    "days_open": "daysOpen",
    "phone": "phone",
    "website": "website",
    "requires_id": "requiresId",
    "walk_in": "walkIn",
    "notes": "notes",
    "availability_status": "availabilityStatus",
    "last_available_at": "lastAvailableAt",
}

DEFAULT_TAGLINE = "Find help. Fast."
DEFAULT_DESCRIPTION = "A simple, humane platform for finding essential resources"


def new_external_id() -> str:
    """Mint an external id for a resource that has none yet."""
    return uuid.uuid4().hex[:12]


def city_to_config(city: CityRecord) -> dict[str, Any]:
    """Render a city in the shape of a ``config/<slug>.json`` file."""
    return {
        "slug": city.slug,
        "city": {
            "name": city.name,
            "state": city.state or "",
            "fullName": "",
            "tagline": DEFAULT_TAGLINE,
            "description": DEFAULT_DESCRIPTION,
        },
        "map": {
            "centerLat": city.center_lat,
            "centerLng": city.center_lng,
            "defaultZoom": city.default_zoom,
        },
    }


def resource_to_entry(record: ResourceRecord) -> dict[str, Any]:
    """Render a resource as a camelCase resources.json entry, dropping empty fields."""
    values = record.model_dump(mode="json", include=set(FILE_KEYS))
    entry = {"id": record.external_id}
    entry.update({FILE_KEYS[field]: value for field, value in values.items() if value is not None})
    return entry


class ResourceRepository(ABC):
    @abstractmethod
    async def list_cities(self) -> list[CityRecord]:
        """Return all cities ordered by name."""

    @abstractmethod
    async def find_city(self, slug: str) -> CityRecord | None:
        """Return the city with this slug, or None."""

    @abstractmethod
    async def create_city(self, city: CityRecord) -> CityRecord:
        """Add a city. Raises ConflictException when the slug is taken."""

    @abstractmethod
    async def list_resources(
        self, slug: str, category: ResourceCategory | None = None
    ) -> list[ResourceRecord]:
        """Return the resources of a city, optionally limited to one category."""

    @abstractmethod
    async def find_resource(
        self, slug: str, external_id: str, category: ResourceCategory | None = None
    ) -> ResourceRecord | None:
        """Return a resource by its external id inside a city, or None."""

    @abstractmethod
    async def upsert_resource(
        self,
        slug: str,
        category: ResourceCategory,
        external_id: str | None,
        fields: ResourceFields,
    ) -> ResourceRecord:
        """Create or update a resource. A None external id creates a new one.

        Raises NotFoundException when the city does not exist.
        """

    @abstractmethod
    async def delete_resource(
        self, slug: str, category: ResourceCategory, external_id: str
    ) -> bool:
        """Delete a resource. Returns False when nothing matched."""

    async def export_data(self) -> dict[str, dict[str, Any]]:
        """Every city as ``{slug: {"config": ..., "resources": {category: [...]}}}``.

        The output uses the on-disk file format so a backup can be restored
        into a file-mode deployment as is.
        """
        exported: dict[str, dict[str, Any]] = {}
        for city in await self.list_cities():
            resources: dict[str, list[dict]] = {category.value: [] for category in ResourceCategory}
            for record in await self.list_resources(city.slug):
                resources[record.category.value].append(resource_to_entry(record))
            exported[city.slug] = {"config": city_to_config(city), "resources": resources}
        return exported
