"""SQLAlchemy-backed resource repository over the cities and resources tables."""

from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from newbridge.exceptions import ConflictException, NotFoundException
from newbridge.models.city import City
from newbridge.models.enums import ResourceCategory
from newbridge.models.resource import Resource
from newbridge.modules.directory.repository import ResourceRepository, new_external_id
from newbridge.modules.directory.schemas import CityRecord, ResourceFields, ResourceRecord

logger = logging.getLogger(__name__)


def _to_record(resource: Resource, city_slug: str) -> ResourceRecord:
    return ResourceRecord(
        city_slug=city_slug,
        category=ResourceCategory(resource.category),
        external_id=resource.external_id,
        name=resource.name,
        address=resource.address,
        lat=resource.lat,
        lng=resource.lng,
        hours=resource.hours,
        days_open=resource.days_open,
        phone=resource.phone,
        website=resource.website,
        requires_id=resource.requires_id,
        walk_in=resource.walk_in,
        notes=resource.notes,
        availability_status=resource.availability_status,
        last_available_at=resource.last_available_at,
    )


class SqlResourceRepository(ResourceRepository):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_city(self, slug: str) -> City | None:
        result = await self.db.execute(select(City).where(City.slug == slug))
        return result.scalar_one_or_none()

    async def list_cities(self) -> list[CityRecord]:
        result = await self.db.execute(select(City).order_by(City.name.asc()))
        return [CityRecord.model_validate(city) for city in result.scalars().all()]

    async def find_city(self, slug: str) -> CityRecord | None:
        city = await self._get_city(slug)
        return CityRecord.model_validate(city) if city is not None else None

    async def create_city(self, city: CityRecord) -> CityRecord:
        if await self._get_city(city.slug) is not None:
            raise ConflictException(f"City '{city.slug}' already exists")

        row = City(**city.model_dump())
        try:
            async with self.db.begin_nested():
                self.db.add(row)
        except IntegrityError as exc:
            raise ConflictException(f"City '{city.slug}' already exists") from exc

        logger.info("Created city %s", city.slug)
        return CityRecord.model_validate(row)

    async def list_resources(
        self, slug: str, category: ResourceCategory | None = None
    ) -> list[ResourceRecord]:
        query = (
            select(Resource)
            .join(City, Resource.city_id == City.id)
            .where(City.slug == slug)
            .order_by(Resource.name.asc())
        )
        if category is not None:
            query = query.where(Resource.category == category.value)
        result = await self.db.execute(query)
        return [_to_record(resource, slug) for resource in result.scalars().all()]

    async def find_resource(
        self, slug: str, external_id: str, category: ResourceCategory | None = None
    ) -> ResourceRecord | None:
        query = (
            select(Resource)
            .join(City, Resource.city_id == City.id)
            .where(City.slug == slug, Resource.external_id == external_id)
        )
        if category is not None:
            query = query.where(Resource.category == category.value)
        result = await self.db.execute(query.limit(1))
        resource = result.scalar_one_or_none()
        return _to_record(resource, slug) if resource is not None else None

    async def upsert_resource(
        self,
        slug: str,
        category: ResourceCategory,
        external_id: str | None,
        fields: ResourceFields,
    ) -> ResourceRecord:
        city = await self._get_city(slug)
        if city is None:
            raise NotFoundException(f"City '{slug}' not found")

        resource = None
        if external_id is not None:
            result = await self.db.execute(
                select(Resource).where(
                    Resource.city_id == city.id,
                    Resource.category == category.value,
                    Resource.external_id == external_id,
                )
            )
            resource = result.scalar_one_or_none()

        values = fields.model_dump()
        # Unset availability fields leave the stored values alone
        for key in ("availability_status", "last_available_at"):
            if values[key] is None:
                values.pop(key)

        if resource is None:
            resource = Resource(
                city_id=city.id,
                category=category.value,
                external_id=external_id or new_external_id(),
                **values,
            )
            self.db.add(resource)
            logger.info("Created %s resource %s in %s", category.value, resource.external_id, slug)
        else:
            for key, value in values.items():
                setattr(resource, key, value)
            logger.info("Updated %s resource %s in %s", category.value, resource.external_id, slug)

        await self.db.flush()
        return _to_record(resource, slug)

    async def delete_resource(
        self, slug: str, category: ResourceCategory, external_id: str
    ) -> bool:
        city = await self._get_city(slug)
        if city is None:
            return False
        result = await self.db.execute(
            delete(Resource).where(
                Resource.city_id == city.id,
                Resource.category == category.value,
                Resource.external_id == external_id,
            )
        )
        await self.db.flush()
        return bool(result.rowcount)
