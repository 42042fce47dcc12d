"""JWT authentication dependency for FastAPI.

Validates Bearer tokens from the Authorization header and extracts the session
principal. Tokens are minted by the identity provider (OAuth sign-in) or by the
admin password sign-in, both signed with the shared JWT secret.
"""

import logging
from datetime import UTC, datetime, timedelta

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from newbridge.config import settings
from newbridge.exceptions import UnauthorizedException
from newbridge.modules.access.schemas import SessionPrincipal

logger = logging.getLogger(__name__)

# FastAPI security scheme: extracts Bearer token from Authorization header
_bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(
    subject: str,
    email: str | None = None,
    name: str | None = None,
    is_super_admin: bool = False,
    expires_minutes: int | None = None,
) -> str:
    """Sign a session token for the given principal."""
    expires_at = datetime.now(UTC) + timedelta(
        minutes=expires_minutes if expires_minutes is not None else settings.jwt_expiry_minutes
    )
    claims = {
        "sub": subject,
        "email": email,
        "name": name,
        "is_super_admin": is_super_admin,
        "exp": expires_at,
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def _decode_token(token: str) -> dict:
    """Decode and validate a JWT token. Raises UnauthorizedException on failure."""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
        return payload
    except JWTError as exc:
        logger.warning("JWT validation failed: %s", exc)
        raise UnauthorizedException("Invalid or expired token") from exc


async def get_current_principal(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> SessionPrincipal:
    """FastAPI dependency that extracts and validates the current principal from JWT."""
    if credentials is None:
        raise UnauthorizedException("Authentication required")

    payload = _decode_token(credentials.credentials)

    subject = payload.get("sub")
    if not subject:
        raise UnauthorizedException("Token is missing required claims")

    # Recorded for diagnostics only; access comes from AccessResolver
    roles = payload.get("roles")
    principal = SessionPrincipal(
        subject=str(subject),
        email=payload.get("email") or None,
        name=payload.get("name") or None,
        is_super_admin=payload.get("is_super_admin") is True,
        claimed_roles=[str(role) for role in roles] if isinstance(roles, list) else [],
    )

    request.state.principal = principal
    return principal


async def get_optional_principal(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> SessionPrincipal | None:
    """Like get_current_principal but returns None instead of raising for unauthenticated requests."""
    if credentials is None:
        return None

    try:
        return await get_current_principal(request, credentials)
    except UnauthorizedException:
        return None
