"""Identity module: sign-in tracking and session endpoints."""

from newbridge.modules.identity.service import SignInService

__all__ = ["SignInService"]
