from sqlalchemy import Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from newbridge.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class AdminRoleAssignment(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """One admin grant: a role at a global, city or location scope.

    ``role`` and ``scope_type`` are stored as plain strings so that the access
    resolver can skip values it does not recognise instead of failing to load
    the row.
    """

    __tablename__ = "admin_role_assignments"

    user_email: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False)
    scope_type: Mapped[str] = mapped_column(String(32), nullable=False)
    city_slug: Mapped[str | None] = mapped_column(String(100))
    location_id: Mapped[str | None] = mapped_column(String(100))

    __table_args__ = (
        UniqueConstraint(
            "user_email",
            "role",
            "scope_type",
            "city_slug",
            "location_id",
            name="uq_admin_role_assignments_grant",
            postgresql_nulls_not_distinct=True,
        ),
        Index("ix_admin_role_assignments_user_email", "user_email"),
    )

    def __repr__(self) -> str:
        return (
            f"<AdminRoleAssignment id={self.id} email={self.user_email} role={self.role} "
            f"scope={self.scope_type} city={self.city_slug} location={self.location_id}>"
        )
