from datetime import datetime

from sqlalchemy import JSON, DateTime, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from newbridge.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, utcnow
from newbridge.models.enums import UpdateStatus


class ResourceUpdateRequest(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "resource_update_requests"

    city_slug: Mapped[str] = mapped_column(String(100), nullable=False)
    resource_external_id: Mapped[str | None] = mapped_column(String(100))
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    change_type: Mapped[str] = mapped_column(String(20), nullable=False)
    payload: Mapped[dict] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=dict
    )
    submitted_by_email: Mapped[str] = mapped_column(String(255), nullable=False)
    submitted_by_name: Mapped[str | None] = mapped_column(String(255))
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=UpdateStatus.PENDING.value, server_default="pending"
    )
    reviewed_by_email: Mapped[str | None] = mapped_column(String(255))
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    review_note: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (
        Index("ix_resource_update_requests_status_submitted", "status", "submitted_at"),
        Index("ix_resource_update_requests_city_slug", "city_slug"),
    )

    def __repr__(self) -> str:
        return (
            f"<ResourceUpdateRequest id={self.id} city={self.city_slug} "
            f"resource={self.resource_external_id} status={self.status}>"
        )
