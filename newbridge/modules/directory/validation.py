"""Directory health check: flags cities and resources with missing required data."""

from __future__ import annotations

import logging

from newbridge.modules.directory.repository import ResourceRepository
from newbridge.modules.directory.schemas import (
    CityRecord,
    CityValidationResult,
    DirectoryValidationReport,
    ResourceRecord,
)

logger = logging.getLogger(__name__)

STATUS_HEALTHY = "healthy"
STATUS_WARNING = "warning"


def city_config_issues(city: CityRecord) -> list[str]:
    issues = []
    if not city.slug:
        issues.append("Missing slug")
    if not city.name:
        issues.append("Missing name")
    if city.center_lat is None:
        issues.append("Missing centerLat")
    if city.center_lng is None:
        issues.append("Missing centerLng")
    return issues


def resource_issues(resources: list[ResourceRecord]) -> list[str]:
    """One line per resource lacking an id, name, address or coordinates."""
    issues = []
    for index, resource in enumerate(resources):
        missing = []
        if not resource.external_id:
            missing.append("id")
        if not resource.name:
            missing.append("name")
        if not resource.address:
            missing.append("address")
        if resource.lat is None or resource.lng is None:
            missing.append("coordinates")
        if missing:
            issues.append(f"Resource {index}: missing {', '.join(missing)}")
    return issues


async def validate_directory(repository: ResourceRepository) -> DirectoryValidationReport:
    """Check every city's config and resources.

    A city whose resources cannot be read is reported under ``errors`` and
    marked as a warning; the remaining cities are still checked.
    """
    results: list[CityValidationResult] = []
    errors: list[str] = []

    for city in await repository.list_cities():
        config_issues = city_config_issues(city)
        try:
            resources = await repository.list_resources(city.slug)
        except ValueError as exc:
            logger.warning("Could not read resources for %s: %s", city.slug, exc)
            errors.append(f"{city.slug}: resources could not be read")
            resources = []
            issues = ["Resources file not found or invalid"]
        else:
            issues = resource_issues(resources)

        results.append(
            CityValidationResult(
                city=city.name,
                slug=city.slug,
                status=STATUS_WARNING if config_issues or issues else STATUS_HEALTHY,
                resource_count=len(resources),
                config_issues=config_issues,
                resource_issues=issues,
            )
        )

    return DirectoryValidationReport(results=results, errors=errors)
