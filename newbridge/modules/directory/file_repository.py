"""JSON-file resource repository for deployments without a database.

Layout on disk::

    <config_dir>/<slug>.json              city config (name, state, map centre)
    <data_dir>/<slug>/resources.json      {"food": [...], "shelter": [...], ...}

Resource entries keep the camelCase keys of the published data files.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from newbridge.exceptions import ConflictException, NotFoundException
from newbridge.models.enums import ResourceCategory
from newbridge.modules.directory.repository import (
    FILE_KEYS,
    ResourceRepository,
    city_to_config,
    new_external_id,
)
from newbridge.modules.directory.schemas import CityRecord, ResourceFields, ResourceRecord

logger = logging.getLogger(__name__)

_PATH_LOCKS: dict[str, asyncio.Lock] = {}


def _lock_for(path: Path) -> asyncio.Lock:
    """One lock per data file; writes are read-modify-write of the whole file."""
    return _PATH_LOCKS.setdefault(str(path.resolve()), asyncio.Lock())


def _read_json(path: Path) -> Any | None:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None


def _write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")


def _city_from_config(slug: str, config: dict) -> CityRecord:
    city = config.get("city") or {}
    map_config = config.get("map") or {}
    return CityRecord(
        slug=config.get("slug") or slug,
        name=city.get("name") or slug,
        state=city.get("state") or None,
        center_lat=map_config.get("centerLat"),
        center_lng=map_config.get("centerLng"),
        default_zoom=map_config.get("defaultZoom") or map_config.get("zoom") or 12,
    )


def _record_from_entry(slug: str, category: ResourceCategory, entry: dict) -> ResourceRecord:
    values = {field: entry.get(key) for field, key in FILE_KEYS.items()}
    for coordinate in ("lat", "lng"):
        if values[coordinate] == "":
            values[coordinate] = None
    values["requires_id"] = bool(values["requires_id"])
    values["walk_in"] = bool(values["walk_in"])
    values["name"] = values["name"] or ""
    values["address"] = values["address"] or ""
    return ResourceRecord(
        city_slug=slug,
        category=category,
        external_id=str(entry.get("id")).strip(),
        **values,
    )


class FileResourceRepository(ResourceRepository):
    def __init__(self, config_dir: str | Path, data_dir: str | Path):
        self.config_dir = Path(config_dir)
        self.data_dir = Path(data_dir)

    def _config_path(self, slug: str) -> Path:
        return self.config_dir / f"{slug}.json"

    def _resources_path(self, slug: str) -> Path:
        return self.data_dir / slug / "resources.json"

    def _load_resources(self, slug: str) -> dict[str, list[dict]]:
        parsed = _read_json(self._resources_path(slug))
        resources: dict[str, list[dict]] = {category.value: [] for category in ResourceCategory}
        if isinstance(parsed, dict):
            for category in ResourceCategory:
                if isinstance(parsed.get(category.value), list):
                    resources[category.value] = parsed[category.value]
        return resources

    def _list_cities_sync(self) -> list[CityRecord]:
        if not self.config_dir.is_dir():
            return []
        cities = []
        for path in sorted(self.config_dir.glob("*.json")):
            config = _read_json(path)
            if isinstance(config, dict):
                cities.append(_city_from_config(path.stem, config))
        return sorted(cities, key=lambda city: city.name)

    def _find_city_sync(self, slug: str) -> CityRecord | None:
        config = _read_json(self._config_path(slug))
        if not isinstance(config, dict):
            return None
        return _city_from_config(slug, config)

    def _create_city_sync(self, city: CityRecord) -> CityRecord:
        path = self._config_path(city.slug)
        if path.exists():
            raise ConflictException(f"City '{city.slug}' already exists")
        _write_json(path, city_to_config(city))
        logger.info("Created city %s (file store)", city.slug)
        return city

    def _export_data_sync(self) -> dict[str, dict[str, Any]]:
        if not self.config_dir.is_dir():
            return {}
        exported = {}
        for path in sorted(self.config_dir.glob("*.json")):
            config = _read_json(path)
            if not isinstance(config, dict):
                continue
            slug = config.get("slug") or path.stem
            exported[slug] = {"config": config, "resources": self._load_resources(slug)}
        return exported

    def _list_resources_sync(
        self, slug: str, category: ResourceCategory | None
    ) -> list[ResourceRecord]:
        resources = self._load_resources(slug)
        categories = [category] if category is not None else list(ResourceCategory)
        return [
            _record_from_entry(slug, cat, entry)
            for cat in categories
            for entry in resources[cat.value]
            if entry.get("id") is not None
        ]

    def _upsert_resource_sync(
        self,
        slug: str,
        category: ResourceCategory,
        external_id: str | None,
        fields: ResourceFields,
    ) -> ResourceRecord:
        if self._find_city_sync(slug) is None:
            raise NotFoundException(f"City '{slug}' not found")

        resources = self._load_resources(slug)
        entries = resources[category.value]
        normalized_id = str(external_id).strip() if external_id else new_external_id()
        updates = {
            FILE_KEYS[field]: value
            for field, value in fields.model_dump(mode="json").items()
            if value is not None
        }

        for index, entry in enumerate(entries):
            if str(entry.get("id")).strip() == normalized_id:
                # Merge so fields the form does not carry survive the update
                entries[index] = {**entry, **updates, "id": entry.get("id")}
                break
        else:
            entries.append({"id": normalized_id, **updates})

        _write_json(self._resources_path(slug), resources)
        logger.info("Saved %s resource %s in %s (file store)", category.value, normalized_id, slug)
        saved = next(e for e in entries if str(e.get("id")).strip() == normalized_id)
        return _record_from_entry(slug, category, saved)

    def _delete_resource_sync(
        self, slug: str, category: ResourceCategory, external_id: str
    ) -> bool:
        resources = self._load_resources(slug)
        entries = resources[category.value]
        remaining = [e for e in entries if str(e.get("id")).strip() != external_id]
        if len(remaining) == len(entries):
            return False
        resources[category.value] = remaining
        _write_json(self._resources_path(slug), resources)
        return True

    async def list_cities(self) -> list[CityRecord]:
        return await asyncio.to_thread(self._list_cities_sync)

    async def find_city(self, slug: str) -> CityRecord | None:
        return await asyncio.to_thread(self._find_city_sync, slug)

    async def create_city(self, city: CityRecord) -> CityRecord:
        async with _lock_for(self._config_path(city.slug)):
            return await asyncio.to_thread(self._create_city_sync, city)

    async def list_resources(
        self, slug: str, category: ResourceCategory | None = None
    ) -> list[ResourceRecord]:
        return await asyncio.to_thread(self._list_resources_sync, slug, category)

    async def find_resource(
        self, slug: str, external_id: str, category: ResourceCategory | None = None
    ) -> ResourceRecord | None:
        resources = await self.list_resources(slug, category)
        return next((r for r in resources if r.external_id == external_id), None)

    async def upsert_resource(
        self,
        slug: str,
        category: ResourceCategory,
        external_id: str | None,
        fields: ResourceFields,
    ) -> ResourceRecord:
        async with _lock_for(self._resources_path(slug)):
            return await asyncio.to_thread(
                self._upsert_resource_sync, slug, category, external_id, fields
            )

    async def delete_resource(
        self, slug: str, category: ResourceCategory, external_id: str
    ) -> bool:
        async with _lock_for(self._resources_path(slug)):
            return await asyncio.to_thread(
                self._delete_resource_sync, slug, category, external_id
            )

    async def export_data(self) -> dict[str, dict[str, Any]]:
        return await asyncio.to_thread(self._export_data_sync)
