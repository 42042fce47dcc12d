"""Updates module: contributor-submitted changes awaiting admin review."""

from newbridge.modules.updates.service import ResourceUpdateService, normalize_availability

__all__ = [
    "ResourceUpdateService",
    "normalize_availability",
]
