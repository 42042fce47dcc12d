"""Versioned API router: every module router is mounted here."""

from fastapi import APIRouter

from newbridge.modules.directory.router import (
    admin_directory_router,
    admin_resource_router,
    city_router,
)
from newbridge.modules.identity.router import router as identity_router
from newbridge.modules.permissions.router import router as permissions_router
from newbridge.modules.reports.router import router as reports_router
from newbridge.modules.updates.router import admin_router as updates_admin_router
from newbridge.modules.updates.router import submit_router as updates_submit_router

v1_router = APIRouter(prefix="/api/v1")
v1_router.include_router(identity_router)
v1_router.include_router(city_router)
v1_router.include_router(admin_resource_router)
v1_router.include_router(admin_directory_router)
v1_router.include_router(updates_submit_router)
v1_router.include_router(updates_admin_router)
v1_router.include_router(permissions_router)
v1_router.include_router(reports_router)
