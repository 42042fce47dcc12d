"""Tests for the permission administration endpoints."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from newbridge.app import create_app
from newbridge.exceptions import ConflictException, ValidationException
from newbridge.models.enums import AdminRole
from newbridge.modules.access.dependencies import get_admin_access
from newbridge.modules.access.schemas import AdminAccess
from newbridge.modules.directory.schemas import CityRecord, LocationOption
from newbridge.modules.permissions.router import get_permission_service
from newbridge.modules.permissions.schemas import PermissionOverviewResponse
from newbridge.modules.permissions.service import PermissionService

app = create_app()

_mock_svc = AsyncMock()

app.dependency_overrides[get_admin_access] = AdminAccess.super_admin
app.dependency_overrides[get_permission_service] = lambda: _mock_svc

client = TestClient(app)


def _make_assignment(**overrides):
    values = dict(
        id=uuid.uuid4(),
        user_email="casey@example.org",
        role="city_admin",
        scope_type="city",
        city_slug="ames",
        location_id=None,
        created_at=datetime(2026, 1, 1, tzinfo=UTC),
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def setup_function():
    global _mock_svc
    _mock_svc = AsyncMock()


def test_get_overview():
    _mock_svc.get_overview.return_value = PermissionOverviewResponse(
        assignments=[],
        cities=[CityRecord(slug="ames", name="Ames")],
        users=["casey@example.org"],
        locations_by_city={"ames": [LocationOption(id="pantry-1", label="Food at First (pantry-1)")]},
    )

    response = client.get("/api/v1/admin/permissions")

    assert response.status_code == 200
    data = response.json()
    assert data["users"] == ["casey@example.org"]
    assert data["locations_by_city"]["ames"][0]["label"] == "Food at First (pantry-1)"


def test_create_assignment():
    _mock_svc.create_assignment.return_value = _make_assignment()

    response = client.post(
        "/api/v1/admin/permissions",
        json={"user_email": "casey@example.org", "role": "city_admin", "city_slug": "ames"},
    )

    assert response.status_code == 201
    assert response.json()["scope_type"] == "city"
    kwargs = _mock_svc.create_assignment.call_args.kwargs
    assert kwargs["role"] is AdminRole.CITY_ADMIN
    assert kwargs["city_slug"] == "ames"


def test_duplicate_assignment_is_conflict():
    _mock_svc.create_assignment.side_effect = ConflictException("This role assignment already exists")

    response = client.post(
        "/api/v1/admin/permissions",
        json={"user_email": "casey@example.org", "role": "city_admin", "city_slug": "ames"},
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"


def test_missing_city_is_validation_error():
    _mock_svc.create_assignment.side_effect = ValidationException(
        "City is required for city and local admins"
    )

    response = client.post(
        "/api/v1/admin/permissions",
        json={"user_email": "casey@example.org", "role": "city_admin"},
    )

    assert response.status_code == 422


def test_unknown_role_is_rejected_by_schema():
    response = client.post(
        "/api/v1/admin/permissions",
        json={"user_email": "casey@example.org", "role": "owner"},
    )

    assert response.status_code == 422
    _mock_svc.create_assignment.assert_not_called()


def test_delete_assignment():
    _mock_svc.delete_assignment.return_value = False
    assignment_id = uuid.uuid4()

    response = client.delete(f"/api/v1/admin/permissions/{assignment_id}")

    assert response.status_code == 200
    assert response.json() == {"deleted": False}
    _mock_svc.delete_assignment.assert_awaited_once_with(AdminAccess.super_admin(), assignment_id)


def test_without_store_reports_backing_store_unavailable():
    app.dependency_overrides[get_permission_service] = lambda: PermissionService(
        AsyncMock(), AsyncMock(), None
    )
    try:
        response = client.get("/api/v1/admin/permissions")
    finally:
        app.dependency_overrides[get_permission_service] = lambda: _mock_svc

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "BACKING_STORE_UNAVAILABLE"
