"""Permissions module: super-admin management of scoped role assignments."""

from newbridge.modules.permissions.service import PermissionService

__all__ = ["PermissionService"]
