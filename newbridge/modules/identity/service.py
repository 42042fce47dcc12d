"""Sign-in tracking: the set of users an admin can grant roles to."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from newbridge.exceptions import ValidationException
from newbridge.models.tracked_user import TrackedUser
from newbridge.modules.access.resolver import normalize_email

logger = logging.getLogger(__name__)


class SignInService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def record_sign_in(self, email: str | None, name: str | None = None) -> TrackedUser:
        """Create or refresh the tracked user for ``email``."""
        normalized = normalize_email(email)
        if not normalized:
            raise ValidationException("Cannot record a sign-in without an email")

        result = await self.db.execute(
            select(TrackedUser).where(TrackedUser.email == normalized)
        )
        user = result.scalar_one_or_none()
        now = datetime.now(UTC)

        if user is None:
            user = TrackedUser(email=normalized, name=name, last_sign_in_at=now)
            self.db.add(user)
            logger.info("Tracking new user %s", normalized)
        else:
            user.last_sign_in_at = now
            if name:
                user.name = name

        await self.db.flush()
        return user

    async def list_tracked_emails(self) -> list[str]:
        result = await self.db.execute(select(TrackedUser.email).order_by(TrackedUser.email.asc()))
        return list(result.scalars().all())
