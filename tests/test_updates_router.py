"""Tests for the update submission and review endpoints."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from newbridge.app import create_app
from newbridge.config import settings
from newbridge.database.session import get_db
from newbridge.exceptions import ConflictException, ForbiddenException
from newbridge.models.enums import AdminRole, ReviewAction
from newbridge.modules.access.auth import get_current_principal
from newbridge.modules.access.dependencies import get_admin_access
from newbridge.modules.access.schemas import AdminAccess, SessionPrincipal
from newbridge.modules.directory.dependencies import get_resource_repository

# ── Test app setup ────────────────────────────────────────────────────────

app = create_app()

_principal = SessionPrincipal(subject="u-1", email="casey@example.org", name="Casey")
_access = AdminAccess(
    is_admin=True, roles=frozenset({AdminRole.CITY_ADMIN}), city_slugs=frozenset({"ames"})
)
_mock_db = AsyncMock()
_mock_repository = AsyncMock()


async def _override_get_db():
    yield _mock_db


app.dependency_overrides[get_db] = _override_get_db
app.dependency_overrides[get_resource_repository] = lambda: _mock_repository
app.dependency_overrides[get_current_principal] = lambda: _principal
app.dependency_overrides[get_admin_access] = lambda: _access

client = TestClient(app)


def _make_request(**overrides):
    values = dict(
        id=uuid.uuid4(),
        city_slug="ames",
        resource_external_id=None,
        category="food",
        change_type="add",
        payload={"name": "New Pantry", "address": "1 Main St"},
        submitted_by_email="casey@example.org",
        submitted_by_name="Casey",
        submitted_at=datetime(2026, 1, 1, tzinfo=UTC),
        status="pending",
        reviewed_by_email=None,
        reviewed_at=None,
        review_note=None,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.fixture(autouse=True)
def _database_mode(monkeypatch):
    monkeypatch.setattr(settings, "storage_mode", "database")


@patch("newbridge.modules.updates.router.ResourceUpdateService")
def test_submit_update_returns_pending_request(mock_svc_cls):
    mock_svc = AsyncMock()
    mock_svc.submit_update.return_value = _make_request()
    mock_svc_cls.return_value = mock_svc

    response = client.post(
        "/api/v1/updates/resources",
        json={"city_slug": "ames", "category": "food", "payload": {"name": "New Pantry", "address": "1 Main St"}},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "pending"
    assert data["change_type"] == "add"
    kwargs = mock_svc.submit_update.call_args.kwargs
    assert kwargs["principal_email"] == "casey@example.org"
    assert kwargs["submitted_by_name"] == "Casey"
    assert kwargs["payload"].name == "New Pantry"


@patch("newbridge.modules.updates.router.ResourceUpdateService")
def test_password_session_submits_as_admin(mock_svc_cls):
    mock_svc = AsyncMock()
    mock_svc.submit_update.return_value = _make_request(submitted_by_email="admin")
    mock_svc_cls.return_value = mock_svc
    password_principal = SessionPrincipal(subject="admin", name="admin", is_super_admin=True)
    app.dependency_overrides[get_current_principal] = lambda: password_principal

    try:
        response = client.post("/api/v1/updates/resources", json={"city_slug": "ames"})
    finally:
        app.dependency_overrides[get_current_principal] = lambda: _principal

    assert response.status_code == 201
    assert mock_svc.submit_update.call_args.kwargs["principal_email"] == "admin"


def test_submit_without_token_is_unauthorized():
    app.dependency_overrides.pop(get_current_principal)
    try:
        response = client.post("/api/v1/updates/resources", json={"city_slug": "ames"})
    finally:
        app.dependency_overrides[get_current_principal] = lambda: _principal

    assert response.status_code == 401
    error = response.json()["error"]
    assert error["code"] == "UNAUTHORIZED"
    assert error["requestId"]


def test_file_mode_reports_backing_store_unavailable(monkeypatch):
    monkeypatch.setattr(settings, "storage_mode", "file")

    response = client.post("/api/v1/updates/resources", json={"city_slug": "ames"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "BACKING_STORE_UNAVAILABLE"


@patch("newbridge.modules.updates.router.ResourceUpdateService")
def test_list_pending_updates(mock_svc_cls):
    mock_svc = AsyncMock()
    mock_svc.list_pending.return_value = [_make_request(), _make_request(resource_external_id="pantry-1")]
    mock_svc_cls.return_value = mock_svc

    response = client.get("/api/v1/admin/resource-updates")

    assert response.status_code == 200
    assert response.json()["total"] == 2
    mock_svc.list_pending.assert_awaited_once_with(_access)


@patch("newbridge.modules.updates.router.ResourceUpdateService")
def test_list_pending_forbidden_for_non_admin(mock_svc_cls):
    mock_svc = AsyncMock()
    mock_svc.list_pending.side_effect = ForbiddenException("This action requires admin privileges")
    mock_svc_cls.return_value = mock_svc

    response = client.get("/api/v1/admin/resource-updates")

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


@patch("newbridge.modules.updates.router.ResourceUpdateService")
def test_resolve_update_passes_reviewer_email(mock_svc_cls):
    request_id = uuid.uuid4()
    mock_svc = AsyncMock()
    mock_svc.resolve_update.return_value = _make_request(
        id=request_id,
        status="approved",
        reviewed_by_email="casey@example.org",
        reviewed_at=datetime(2026, 1, 2, tzinfo=UTC),
    )
    mock_svc_cls.return_value = mock_svc

    response = client.patch(
        f"/api/v1/admin/resource-updates/{request_id}",
        json={"action": "approve", "note": "looks right"},
    )

    assert response.status_code == 200
    assert response.json()["status"] == "approved"
    args = mock_svc.resolve_update.call_args
    assert args.args == (_access, request_id, ReviewAction.APPROVE)
    assert args.kwargs == {"note": "looks right", "reviewer_email": "casey@example.org"}


@patch("newbridge.modules.updates.router.ResourceUpdateService")
def test_resolve_already_processed_is_conflict(mock_svc_cls):
    mock_svc = AsyncMock()
    mock_svc.resolve_update.side_effect = ConflictException("Update request already processed")
    mock_svc_cls.return_value = mock_svc

    response = client.patch(
        f"/api/v1/admin/resource-updates/{uuid.uuid4()}", json={"action": "reject"}
    )

    assert response.status_code == 409
    assert response.json()["error"]["message"] == "Update request already processed"


def test_resolve_with_unknown_action_is_validation_error():
    response = client.patch(
        f"/api/v1/admin/resource-updates/{uuid.uuid4()}", json={"action": "archive"}
    )

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"
