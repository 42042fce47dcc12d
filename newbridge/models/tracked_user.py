from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from newbridge.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class TrackedUser(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "tracked_users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(String(255))
    last_sign_in_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
