"""Session API router: admin password sign-in and principal introspection."""

import hmac
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from newbridge.config import settings
from newbridge.database.session import get_db
from newbridge.exceptions import UnauthorizedException
from newbridge.modules.access.auth import create_access_token, get_current_principal
from newbridge.modules.access.constants import ADMIN_PASSWORD_PRINCIPAL_NAME
from newbridge.modules.access.dependencies import get_access_resolver
from newbridge.modules.access.resolver import AccessResolver
from newbridge.modules.access.schemas import (
    AdminAccessResponse,
    PrincipalResponse,
    SessionPrincipal,
)
from newbridge.modules.identity.schemas import AdminLoginRequest, SessionResponse, TokenResponse
from newbridge.modules.identity.service import SignInService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


async def _principal_response(
    principal: SessionPrincipal, resolver: AccessResolver
) -> PrincipalResponse:
    access = await resolver.resolve_access_for_session(principal)
    return PrincipalResponse(
        email=principal.email,
        name=principal.name,
        access=AdminAccessResponse.from_access(access),
    )


@router.post("/admin-login", response_model=TokenResponse)
async def admin_login(body: AdminLoginRequest):
    """Exchange the shared admin password for a super-admin session token."""
    configured = settings.admin_password
    if not configured:
        raise UnauthorizedException("Admin password sign-in is not configured")

    if not hmac.compare_digest(body.password.encode(), configured.encode()):
        logger.warning("Rejected admin password sign-in")
        raise UnauthorizedException("Invalid credentials")

    token = create_access_token(
        subject=ADMIN_PASSWORD_PRINCIPAL_NAME,
        name=ADMIN_PASSWORD_PRINCIPAL_NAME,
        is_super_admin=True,
    )
    logger.info("Issued admin password session")
    return TokenResponse(access_token=token, expires_in=settings.jwt_expiry_minutes * 60)


@router.post("/session", response_model=SessionResponse)
async def record_session(
    principal: SessionPrincipal = Depends(get_current_principal),
    resolver: AccessResolver = Depends(get_access_resolver),
    db: AsyncSession = Depends(get_db),
):
    """Record a sign-in so the user can be granted roles, then return their access."""
    tracked = False
    if settings.use_database and principal.email:
        await SignInService(db).record_sign_in(principal.email, principal.name)
        tracked = True

    return SessionResponse(
        principal=await _principal_response(principal, resolver),
        tracked=tracked,
    )


@router.get("/me", response_model=PrincipalResponse)
async def get_me(
    principal: SessionPrincipal = Depends(get_current_principal),
    resolver: AccessResolver = Depends(get_access_resolver),
):
    return await _principal_response(principal, resolver)
